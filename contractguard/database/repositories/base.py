from abc import ABC, abstractmethod

from contractguard.analysis.exceptions import (
    AlreadyCompletedError,
    AlreadyInProgressError,
    StateConflictError,
)
from contractguard.analysis.models import AnalysisResult, AnalysisState, AnalysisStatus
from contractguard.database.models import ContractRecord

STALE_ATTEMPT_REASON = "Analysis interrupted before completion"


class BaseAnalysisRepository(ABC):
    """Contract for the per-document analysis state and result store.

    Implementations guarantee that a document's findings, overall severity and
    COMPLETED state become visible together, and that claiming a document for
    analysis is an atomic check-and-set.
    """

    @abstractmethod
    def claim_for_analysis(self, document_id: int, *, reanalyze: bool = False) -> None:
        """Move a document to IN_PROGRESS if its current state allows a new attempt.

        Raises:
            DocumentNotFoundError: if the document does not exist.
            AlreadyInProgressError: if an attempt is already running.
            AlreadyCompletedError: if completed and ``reanalyze`` is False.
        """

    @abstractmethod
    def claim_next_pending(self) -> ContractRecord | None:
        """Claim the oldest PENDING document that has extracted text, or None."""

    @abstractmethod
    def replace_analysis_result(self, result: AnalysisResult) -> None:
        """Atomically replace the document's findings and severity and mark it COMPLETED.

        Raises:
            PersistenceError: if the write fails or the document is not IN_PROGRESS.
                Nothing from the failed write remains visible.
        """

    @abstractmethod
    def mark_failed(self, document_id: int, reason: str) -> None:
        """Move an IN_PROGRESS document to FAILED, keeping the reason for status queries."""

    @abstractmethod
    def get_state(self, document_id: int) -> AnalysisState:
        """Return the document's current state. Raises DocumentNotFoundError."""

    @abstractmethod
    def set_state(self, document_id: int, state: AnalysisState) -> None:
        """Unconditionally set the document's state. Raises DocumentNotFoundError."""

    @abstractmethod
    def get_status(self, document_id: int) -> AnalysisStatus:
        """Return the status read model. Raises DocumentNotFoundError."""

    @abstractmethod
    def get_result(self, document_id: int) -> AnalysisResult | None:
        """Return the last completed result, or None if the document was never analyzed."""

    @abstractmethod
    def fail_stale(self, max_age_seconds: int) -> list[int]:
        """Fail IN_PROGRESS attempts started at least ``max_age_seconds`` ago.

        Returns:
            IDs of the documents that were moved to FAILED.
        """


def conflict_for(document_id: int, state: AnalysisState) -> StateConflictError:
    """Build the guard error for a document whose state refused a claim."""
    if state == AnalysisState.IN_PROGRESS:
        return AlreadyInProgressError(f"Analysis already in progress for document {document_id}")
    if state == AnalysisState.COMPLETED:
        return AlreadyCompletedError(f"Analysis already completed for document {document_id}")
    return StateConflictError(
        f"Document {document_id} cannot start analysis from state '{state.value}'"
    )
