import time

from contractguard.analysis.orchestrator import AnalysisOrchestrator
from contractguard.config.settings import Settings
from contractguard.database.models import ContractRecord
from contractguard.database.repositories.base import BaseAnalysisRepository
from contractguard.logging.logger import Log


class Worker:
    """Poll loop: sleep -> claim pending contract -> analyze."""

    def __init__(
        self,
        repository: BaseAnalysisRepository,
        orchestrator: AnalysisOrchestrator,
        settings: Settings,
    ) -> None:
        self._repository = repository
        self._orchestrator = orchestrator
        self._settings = settings

    def run(self, max_jobs: int | None = None) -> None:
        """Main poll loop. Runs forever until interrupted.

        If max_jobs is set, stop after analyzing that many contracts (for testing).
        """
        Log.info("Worker started, polling for pending contracts")
        jobs_done = 0
        try:
            while True:
                if max_jobs is not None and jobs_done >= max_jobs:
                    break
                record = self._try_claim()
                if record:
                    self._dispatch(record)
                    jobs_done += 1
                else:
                    Log.debug("No pending contracts, sleeping")
                    time.sleep(self._settings.worker_poll_interval_seconds)
        except KeyboardInterrupt:
            Log.info("Worker shutting down gracefully")

    def _try_claim(self) -> ContractRecord | None:
        """Attempt to claim the next pending contract. Gracefully handle DB errors."""
        try:
            return self._repository.claim_next_pending()
        except Exception as exc:
            Log.warning("Database error while claiming, will retry", error=exc)
            return None

    def _dispatch(self, record: ContractRecord) -> None:
        try:
            status = self._orchestrator.execute_claimed(record.id, record.extracted_text or "")
        except Exception as exc:
            Log.error(f"Could not read back analysis status: {exc}", document_id=record.id)
            return
        Log.info(f"Analysis finished with state {status.state.value}", document_id=record.id)
