from typing import ClassVar

from contractguard.analysis.exceptions import AnalysisError


class ExternalAnalyzerError(AnalysisError):
    """Raised when the semantic analyzer cannot produce findings."""

    transient: ClassVar[bool] = False
    label: ClassVar[str] = "Semantic analyzer error"

    def __str__(self) -> str:
        detail = super().__str__()
        return f"{self.label}: {detail}" if detail else self.label


class ExternalAnalyzerTimeoutError(ExternalAnalyzerError):
    """Raised when the AI provider did not answer in time."""

    transient = True
    label = "Semantic analyzer timed out"


class RateLimitedError(ExternalAnalyzerError):
    """Raised when the AI provider throttled the request."""

    transient = True
    label = "Semantic analyzer rate limited"


class QuotaExceededError(ExternalAnalyzerError):
    """Raised when the AI provider account has no remaining quota."""

    label = "Semantic analyzer quota exceeded"


class MalformedResponseError(ExternalAnalyzerError):
    """Raised when the AI provider response does not match the findings schema."""

    label = "Semantic analyzer returned a malformed response"


class AuthenticationFailedError(ExternalAnalyzerError):
    """Raised when the AI provider rejected the configured credentials."""

    label = "Semantic analyzer authentication failed"


class AnalyzerUnavailableError(ExternalAnalyzerError):
    """Raised when the AI provider call fails due to network/infrastructure issues."""

    transient = True
    label = "Semantic analyzer unavailable"


class RequestRejectedError(ExternalAnalyzerError):
    """Raised when the AI provider refused the request itself (e.g. context too long)."""

    label = "Semantic analyzer rejected the request"
