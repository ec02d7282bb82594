import pytest

from contractguard.config.settings import Settings
from contractguard.database.repositories.analysis_repository import AnalysisRepository
from contractguard.database.repositories.factory import AnalysisRepositoryFactory
from contractguard.database.repositories.memory_analysis_repository import (
    InMemoryAnalysisRepository,
)


class TestAnalysisRepositoryFactory:
    def test_creates_postgres_repository_by_default(self) -> None:
        repo = AnalysisRepositoryFactory.create(Settings())
        assert isinstance(repo, AnalysisRepository)

    def test_creates_memory_repository(self) -> None:
        repo = AnalysisRepositoryFactory.create(Settings(analysis_store="MEMORY"))
        assert isinstance(repo, InMemoryAnalysisRepository)

    def test_unknown_store_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown analysis store 'redis'"):
            AnalysisRepositoryFactory.create(Settings(analysis_store="redis"))
