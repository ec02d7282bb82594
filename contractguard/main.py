from contractguard.analysis.orchestrator import build_orchestrator
from contractguard.config.settings import Settings
from contractguard.database.connection import close_pool, init_pool
from contractguard.database.repositories.factory import AnalysisRepositoryFactory
from contractguard.logging.logger import Log
from contractguard.worker.worker import Worker


def main() -> None:
    """Entry point: initialize pool -> build dependencies -> fail stale -> start worker loop."""
    settings = Settings()
    Log.configure(settings.log_level)
    uses_postgres = settings.analysis_store.lower() == "postgres"
    if uses_postgres:
        init_pool(settings)

    orchestrator = None
    try:
        repository = AnalysisRepositoryFactory.create(settings)
        orchestrator = build_orchestrator(settings, repository)
        stale = repository.fail_stale(settings.stale_analysis_timeout_seconds)
        if stale:
            Log.warning(f"Marked {len(stale)} interrupted analyses as failed: {stale}")
        worker = Worker(repository, orchestrator, settings)
        worker.run()
    finally:
        if orchestrator is not None:
            orchestrator.shutdown()
        if uses_postgres:
            close_pool()


if __name__ == "__main__":
    main()
