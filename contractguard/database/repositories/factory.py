from contractguard.config.settings import Settings
from contractguard.database.repositories.analysis_repository import AnalysisRepository
from contractguard.database.repositories.base import BaseAnalysisRepository
from contractguard.database.repositories.memory_analysis_repository import (
    InMemoryAnalysisRepository,
)


class AnalysisRepositoryFactory:
    """Creates the analysis store selected in settings."""

    ADAPTERS: dict[str, type[BaseAnalysisRepository]] = {
        "postgres": AnalysisRepository,
        "memory": InMemoryAnalysisRepository,
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseAnalysisRepository:
        store = settings.analysis_store.lower()
        adapter_cls = cls.ADAPTERS.get(store)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown analysis store '{store}'. Choose from: {list(cls.ADAPTERS)}"
            )
        return adapter_cls()
