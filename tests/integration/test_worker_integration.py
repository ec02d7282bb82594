from collections.abc import Callable

import pytest

from contractguard.analysis.models import AnalysisState, Severity
from contractguard.analysis.orchestrator import build_orchestrator
from contractguard.config.settings import Settings
from contractguard.database.repositories.analysis_repository import AnalysisRepository
from contractguard.worker.worker import Worker


@pytest.mark.integration
class TestWorkerIntegration:
    def test_worker_claims_and_completes_one_contract(
        self,
        seed_contract: Callable[..., int],
        test_settings: Settings,
    ) -> None:
        contract_id = seed_contract(
            "Subcontractor payment shall be made pay-when-paid, within seven days of "
            "receiving payment from Owner."
        )
        repository = AnalysisRepository()
        orchestrator = build_orchestrator(test_settings, repository)
        try:
            Worker(repository, orchestrator, test_settings).run(max_jobs=1)
        finally:
            orchestrator.shutdown()

        status = repository.get_status(contract_id)
        assert status.state is AnalysisState.COMPLETED
        assert status.overall_severity is Severity.HIGH
        result = repository.get_result(contract_id)
        assert result is not None
        assert [f.category for f in result.findings] == ["PAYMENT_TERMS"]

    def test_background_start_and_poll(
        self,
        seed_contract: Callable[..., int],
        test_settings: Settings,
    ) -> None:
        contract_id = seed_contract()
        repository = AnalysisRepository()
        orchestrator = build_orchestrator(test_settings, repository)
        try:
            future = orchestrator.start_analysis(
                contract_id, "The Owner may terminate for convenience at any time."
            )
            final = future.result(timeout=30)
        finally:
            orchestrator.shutdown()

        assert final.state is AnalysisState.COMPLETED
        assert orchestrator.get_status(contract_id).overall_severity is Severity.MEDIUM
