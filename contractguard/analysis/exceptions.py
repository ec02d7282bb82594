class AnalysisError(Exception):
    """Base exception for all risk analysis errors."""


class InvalidInputError(AnalysisError):
    """Raised when empty or whitespace-only text is submitted for analysis."""


class DetectionError(AnalysisError):
    """Raised when the pattern matcher fails internally."""


class PersistenceError(AnalysisError):
    """Raised when an analysis result cannot be written atomically."""


class DocumentNotFoundError(AnalysisError):
    """Raised when a document cannot be found in the analysis store."""


class StateConflictError(AnalysisError):
    """Raised when the document's analysis state forbids starting an attempt."""


class AlreadyInProgressError(StateConflictError):
    """Raised when an analysis attempt is already running for the document."""


class AlreadyCompletedError(StateConflictError):
    """Raised when the document is already analyzed and re-analysis was not requested."""
