import os
from collections.abc import Callable, Generator
from typing import Any

import psycopg
import pytest

from contractguard.config.settings import Settings
from contractguard.database.connection import (
    apply_schema,
    close_pool,
    get_connection,
    init_pool,
)
from contractguard.database.repositories.analysis_repository import AnalysisRepository


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "contractguard_test")
    return Settings(semantic_provider="example", analysis_store="postgres")


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        apply_schema()
    except Exception as e:
        close_pool()
        pytest.skip(
            f"PostgreSQL test DB not available: {e}. "
            "Set DB_* env to point at a disposable database"
        )
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def integration_cleanup(integration_pool: None) -> Generator[list[int], None, None]:
    contract_ids: list[int] = []
    yield contract_ids
    if not contract_ids:
        return
    with get_connection() as conn:
        with conn.cursor() as cur:
            cur.execute("DELETE FROM contracts WHERE id = ANY(%s)", (contract_ids,))
        conn.commit()


@pytest.fixture
def seed_contract(integration_cleanup: list[int]) -> Callable[[str | None], int]:
    """Insert a PENDING contract and schedule it for deletion."""

    def _seed(text: str | None = "The Owner may terminate for convenience at any time.") -> int:
        contract_id = AnalysisRepository().add_document(text)
        integration_cleanup.append(contract_id)
        return contract_id

    return _seed
