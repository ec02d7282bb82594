from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor

import pytest

from contractguard.analysis.exceptions import (
    AlreadyCompletedError,
    AlreadyInProgressError,
    DocumentNotFoundError,
    PersistenceError,
    StateConflictError,
)
from contractguard.analysis.models import AnalysisResult, AnalysisState, Finding, Severity
from contractguard.database.connection import get_connection
from contractguard.database.repositories.analysis_repository import AnalysisRepository
from contractguard.database.repositories.base import STALE_ATTEMPT_REASON


def _result(
    contract_id: int, *findings: Finding, severity: Severity = Severity.MEDIUM
) -> AnalysisResult:
    return AnalysisResult(document_id=contract_id, overall_severity=severity, findings=findings)


def _finding(category: str, severity: Severity, source: str = "pattern") -> Finding:
    return Finding(category, severity, f"{category} excerpt", f"{category} explanation", source)


def _findings_rows(contract_id: int) -> list[tuple[int, str]]:
    with get_connection() as conn:
        with conn.cursor() as cur:
            cur.execute(
                "SELECT position, risk_type FROM risk_findings WHERE contract_id = %s "
                "ORDER BY position",
                (contract_id,),
            )
            return [(row[0], row[1]) for row in cur.fetchall()]


@pytest.mark.integration
class TestClaimForAnalysis:
    def test_claims_pending_contract(self, seed_contract: Callable[..., int]) -> None:
        contract_id = seed_contract()
        repo = AnalysisRepository()

        repo.claim_for_analysis(contract_id)

        status = repo.get_status(contract_id)
        assert status.state is AnalysisState.IN_PROGRESS
        assert status.started_at is not None

    def test_rejects_in_progress(self, seed_contract: Callable[..., int]) -> None:
        contract_id = seed_contract()
        repo = AnalysisRepository()
        repo.claim_for_analysis(contract_id)

        with pytest.raises(AlreadyInProgressError):
            repo.claim_for_analysis(contract_id, reanalyze=True)

    def test_rejects_completed_without_reanalyze(self, seed_contract: Callable[..., int]) -> None:
        contract_id = seed_contract()
        repo = AnalysisRepository()
        repo.claim_for_analysis(contract_id)
        repo.replace_analysis_result(_result(contract_id))

        with pytest.raises(AlreadyCompletedError):
            repo.claim_for_analysis(contract_id)

    def test_missing_contract_raises(self, integration_pool: None) -> None:
        with pytest.raises(DocumentNotFoundError):
            AnalysisRepository().claim_for_analysis(-1)

    def test_concurrent_claims_admit_exactly_one(self, seed_contract: Callable[..., int]) -> None:
        contract_id = seed_contract()
        repo = AnalysisRepository()

        def _claim() -> bool:
            try:
                repo.claim_for_analysis(contract_id)
            except StateConflictError:
                return False
            return True

        with ThreadPoolExecutor(max_workers=4) as pool:
            outcomes = list(pool.map(lambda _: _claim(), range(4)))

        assert outcomes.count(True) == 1


@pytest.mark.integration
class TestClaimNextPending:
    def test_claims_seeded_contract(self, seed_contract: Callable[..., int]) -> None:
        contract_id = seed_contract("Contractor shall be paid if paid by Owner.")
        repo = AnalysisRepository()

        record = repo.claim_next_pending()

        assert record is not None
        assert record.id == contract_id
        assert record.extracted_text == "Contractor shall be paid if paid by Owner."
        assert repo.get_state(contract_id) is AnalysisState.IN_PROGRESS

    def test_skips_contract_without_text(self, seed_contract: Callable[..., int]) -> None:
        contract_id = seed_contract(None)

        record = AnalysisRepository().claim_next_pending()

        assert record is None or record.id != contract_id


@pytest.mark.integration
class TestReplaceAnalysisResult:
    def test_persists_findings_in_order(self, seed_contract: Callable[..., int]) -> None:
        contract_id = seed_contract()
        repo = AnalysisRepository()
        repo.claim_for_analysis(contract_id)

        repo.replace_analysis_result(_result(
            contract_id,
            _finding("TERMINATION", Severity.MEDIUM),
            _finding("NOTICE", Severity.LOW, source="semantic"),
        ))

        status = repo.get_status(contract_id)
        assert status.state is AnalysisState.COMPLETED
        assert status.overall_severity is Severity.MEDIUM
        assert status.findings_count == 2
        result = repo.get_result(contract_id)
        assert result is not None
        assert [(f.category, f.source) for f in result.findings] == [
            ("TERMINATION", "pattern"),
            ("NOTICE", "semantic"),
        ]

    def test_reanalysis_replaces_findings(self, seed_contract: Callable[..., int]) -> None:
        contract_id = seed_contract()
        repo = AnalysisRepository()
        repo.claim_for_analysis(contract_id)
        repo.replace_analysis_result(_result(
            contract_id,
            _finding("TERMINATION", Severity.MEDIUM),
            _finding("NOTICE", Severity.LOW),
        ))

        repo.claim_for_analysis(contract_id, reanalyze=True)
        repo.replace_analysis_result(_result(
            contract_id, _finding("LIABILITY", Severity.HIGH), severity=Severity.HIGH
        ))

        assert _findings_rows(contract_id) == [(0, "LIABILITY")]
        assert repo.get_status(contract_id).overall_severity is Severity.HIGH

    def test_rejects_contract_not_in_progress(self, seed_contract: Callable[..., int]) -> None:
        contract_id = seed_contract()
        repo = AnalysisRepository()

        with pytest.raises(PersistenceError):
            repo.replace_analysis_result(_result(contract_id, _finding("X", Severity.LOW)))

        assert _findings_rows(contract_id) == []
        assert repo.get_state(contract_id) is AnalysisState.PENDING

    def test_completed_without_findings(self, seed_contract: Callable[..., int]) -> None:
        contract_id = seed_contract()
        repo = AnalysisRepository()
        repo.claim_for_analysis(contract_id)

        repo.replace_analysis_result(_result(contract_id, severity=Severity.LOW))

        result = repo.get_result(contract_id)
        assert result is not None
        assert result.findings == ()
        assert result.overall_severity is Severity.LOW


@pytest.mark.integration
class TestFailure:
    def test_mark_failed_keeps_previous_result(self, seed_contract: Callable[..., int]) -> None:
        contract_id = seed_contract()
        repo = AnalysisRepository()
        repo.claim_for_analysis(contract_id)
        repo.replace_analysis_result(_result(contract_id, _finding("TERMINATION", Severity.MEDIUM)))
        repo.claim_for_analysis(contract_id, reanalyze=True)

        repo.mark_failed(contract_id, "Semantic analyzer timed out")

        status = repo.get_status(contract_id)
        assert status.state is AnalysisState.FAILED
        assert status.error_message == "Semantic analyzer timed out"
        result = repo.get_result(contract_id)
        assert result is not None
        assert [f.category for f in result.findings] == ["TERMINATION"]

    def test_fail_stale_marks_old_attempts(self, seed_contract: Callable[..., int]) -> None:
        contract_id = seed_contract()
        repo = AnalysisRepository()
        repo.claim_for_analysis(contract_id)
        with get_connection() as conn:
            conn.execute(
                "UPDATE contracts SET analysis_started_at = NOW() - INTERVAL '2 hours' "
                "WHERE id = %s",
                (contract_id,),
            )
            conn.commit()

        failed = repo.fail_stale(3600)

        assert contract_id in failed
        status = repo.get_status(contract_id)
        assert status.state is AnalysisState.FAILED
        assert status.error_message == STALE_ATTEMPT_REASON

    def test_fail_stale_keeps_recent_attempts(self, seed_contract: Callable[..., int]) -> None:
        contract_id = seed_contract()
        repo = AnalysisRepository()
        repo.claim_for_analysis(contract_id)

        assert contract_id not in repo.fail_stale(3600)
        assert repo.get_state(contract_id) is AnalysisState.IN_PROGRESS
