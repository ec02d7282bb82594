import threading
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone

from contractguard.analysis.exceptions import DocumentNotFoundError, PersistenceError
from contractguard.analysis.models import AnalysisResult, AnalysisState, AnalysisStatus
from contractguard.database.models import ContractRecord
from contractguard.database.repositories.base import (
    STALE_ATTEMPT_REASON,
    BaseAnalysisRepository,
    conflict_for,
)


@dataclass
class _Entry:
    extracted_text: str | None
    state: AnalysisState = AnalysisState.PENDING
    error: str | None = None
    started_at: datetime | None = None
    result: AnalysisResult | None = None


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryAnalysisRepository(BaseAnalysisRepository):
    """Process-local analysis store for tests and single-process runs.

    Every operation holds one lock; results are frozen values swapped in whole,
    so a reader sees either the previous result or the new one.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[int, _Entry] = {}

    def add_document(self, document_id: int, extracted_text: str | None) -> None:
        """Register a document in PENDING state."""
        with self._lock:
            self._entries[document_id] = _Entry(extracted_text=extracted_text)

    def claim_for_analysis(self, document_id: int, *, reanalyze: bool = False) -> None:
        with self._lock:
            entry = self._get(document_id)
            blocked = entry.state == AnalysisState.IN_PROGRESS or (
                entry.state == AnalysisState.COMPLETED and not reanalyze
            )
            if blocked:
                raise conflict_for(document_id, entry.state)
            self._start(entry)

    def claim_next_pending(self) -> ContractRecord | None:
        with self._lock:
            for document_id, entry in self._entries.items():
                if entry.state == AnalysisState.PENDING and entry.extracted_text is not None:
                    self._start(entry)
                    return ContractRecord(
                        id=document_id,
                        analysis_status=entry.state.value,
                        extracted_text=entry.extracted_text,
                        analysis_started_at=entry.started_at,
                    )
        return None

    def replace_analysis_result(self, result: AnalysisResult) -> None:
        with self._lock:
            entry = self._entries.get(result.document_id)
            if entry is None or entry.state != AnalysisState.IN_PROGRESS:
                raise PersistenceError(
                    f"Document {result.document_id} is no longer being analyzed"
                )
            entry.result = replace(
                result,
                findings=tuple(result.findings),
                completed=True,
                completed_at=_now(),
            )
            entry.state = AnalysisState.COMPLETED
            entry.error = None

    def mark_failed(self, document_id: int, reason: str) -> None:
        with self._lock:
            entry = self._entries.get(document_id)
            if entry is not None and entry.state == AnalysisState.IN_PROGRESS:
                entry.state = AnalysisState.FAILED
                entry.error = reason

    def get_state(self, document_id: int) -> AnalysisState:
        with self._lock:
            return self._get(document_id).state

    def set_state(self, document_id: int, state: AnalysisState) -> None:
        with self._lock:
            self._get(document_id).state = state

    def get_status(self, document_id: int) -> AnalysisStatus:
        with self._lock:
            entry = self._get(document_id)
            result = entry.result
            return AnalysisStatus(
                document_id=document_id,
                state=entry.state,
                overall_severity=result.overall_severity if result else None,
                findings_count=len(result.findings) if result else 0,
                error_message=entry.error if entry.state == AnalysisState.FAILED else None,
                started_at=entry.started_at,
                completed_at=result.completed_at if result else None,
                degraded=result.degraded if result else False,
            )

    def get_result(self, document_id: int) -> AnalysisResult | None:
        with self._lock:
            return self._get(document_id).result

    def fail_stale(self, max_age_seconds: int) -> list[int]:
        threshold = _now() - timedelta(seconds=max_age_seconds)
        failed: list[int] = []
        with self._lock:
            for document_id, entry in self._entries.items():
                if entry.state != AnalysisState.IN_PROGRESS:
                    continue
                if entry.started_at is None or entry.started_at <= threshold:
                    entry.state = AnalysisState.FAILED
                    entry.error = STALE_ATTEMPT_REASON
                    failed.append(document_id)
        return failed

    def _get(self, document_id: int) -> _Entry:
        entry = self._entries.get(document_id)
        if entry is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        return entry

    @staticmethod
    def _start(entry: _Entry) -> None:
        entry.state = AnalysisState.IN_PROGRESS
        entry.error = None
        entry.started_at = _now()
