from unittest.mock import MagicMock, patch

from contractguard.analysis.models import AnalysisState, AnalysisStatus
from contractguard.database.models import ContractRecord
from contractguard.worker.worker import Worker


def _make_worker() -> tuple[Worker, MagicMock, MagicMock]:
    """Create a Worker with mocked dependencies."""
    mock_repo = MagicMock()
    mock_orchestrator = MagicMock()
    mock_orchestrator.execute_claimed.return_value = AnalysisStatus(
        document_id=1, state=AnalysisState.COMPLETED
    )
    settings = MagicMock(worker_poll_interval_seconds=1)
    worker = Worker(mock_repo, mock_orchestrator, settings)
    return worker, mock_repo, mock_orchestrator


def _make_record(contract_id: int = 1, text: str | None = "contract text") -> ContractRecord:
    return ContractRecord(id=contract_id, analysis_status="in_progress", extracted_text=text)


class TestWorkerDispatch:
    def test_dispatches_record_to_orchestrator(self) -> None:
        worker, _repo, mock_orchestrator = _make_worker()
        record = _make_record()

        with patch.object(worker, "_try_claim", side_effect=[record, KeyboardInterrupt]):
            worker.run()

        mock_orchestrator.execute_claimed.assert_called_once_with(1, "contract text")

    def test_dispatches_multiple_records(self) -> None:
        worker, _repo, mock_orchestrator = _make_worker()

        with patch.object(
            worker,
            "_try_claim",
            side_effect=[_make_record(1), _make_record(2), KeyboardInterrupt],
        ):
            worker.run()

        assert mock_orchestrator.execute_claimed.call_count == 2

    def test_missing_text_is_passed_as_empty(self) -> None:
        worker, _repo, mock_orchestrator = _make_worker()

        with patch.object(
            worker, "_try_claim", side_effect=[_make_record(text=None), KeyboardInterrupt]
        ):
            worker.run()

        mock_orchestrator.execute_claimed.assert_called_once_with(1, "")

    def test_stops_after_max_jobs(self) -> None:
        worker, mock_repo, mock_orchestrator = _make_worker()
        mock_repo.claim_next_pending.side_effect = [_make_record(1), _make_record(2)]

        worker.run(max_jobs=1)

        assert mock_orchestrator.execute_claimed.call_count == 1
        assert mock_repo.claim_next_pending.call_count == 1

    def test_dispatch_error_does_not_stop_loop(self) -> None:
        worker, _repo, mock_orchestrator = _make_worker()
        mock_orchestrator.execute_claimed.side_effect = [RuntimeError("db down"), MagicMock()]

        with patch.object(
            worker,
            "_try_claim",
            side_effect=[_make_record(1), _make_record(2), KeyboardInterrupt],
        ):
            worker.run()

        assert mock_orchestrator.execute_claimed.call_count == 2


class TestWorkerClaim:
    def test_database_error_returns_none(self) -> None:
        worker, mock_repo, _orchestrator = _make_worker()
        mock_repo.claim_next_pending.side_effect = RuntimeError("connection refused")

        assert worker._try_claim() is None


class TestWorkerSleep:
    def test_sleeps_when_nothing_pending(self) -> None:
        worker, _repo, _orchestrator = _make_worker()

        with (
            patch.object(worker, "_try_claim", side_effect=[None, KeyboardInterrupt]),
            patch("contractguard.worker.worker.time.sleep") as mock_sleep,
        ):
            worker.run()

        mock_sleep.assert_called_once_with(1)


class TestWorkerShutdown:
    def test_handles_keyboard_interrupt(self) -> None:
        worker, _repo, _orchestrator = _make_worker()

        with patch.object(worker, "_try_claim", side_effect=KeyboardInterrupt):
            worker.run()  # Should not raise
