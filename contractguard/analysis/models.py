from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class Severity(str, Enum):
    """Risk severity of a finding or of a whole document."""

    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {Severity.HIGH: 3, Severity.MEDIUM: 2, Severity.LOW: 1}


class AnalysisState(str, Enum):
    """Lifecycle of one analysis attempt, as stored in contracts.analysis_status."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class Finding:
    """One flagged excerpt of contract text."""

    category: str
    severity: Severity
    matched_text: str
    explanation: str
    source: str = "pattern"


@dataclass(frozen=True)
class AnalysisResult:
    """Authoritative outcome of a completed analysis for one document."""

    document_id: int
    overall_severity: Severity
    findings: tuple[Finding, ...] = ()
    completed: bool = True
    degraded: bool = False
    completed_at: datetime | None = None


@dataclass(frozen=True)
class AnalysisStatus:
    """Read model returned to status queries."""

    document_id: int
    state: AnalysisState
    overall_severity: Severity | None = None
    findings_count: int = 0
    error_message: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    degraded: bool = False


@dataclass(frozen=True)
class RiskSummary:
    """Finding counts by severity and by category."""

    total: int
    by_severity: dict[Severity, int] = field(default_factory=dict)
    by_category: dict[str, int] = field(default_factory=dict)


def sort_by_severity(findings: Iterable[Finding]) -> list[Finding]:
    """Order findings HIGH -> MEDIUM -> LOW, keeping discovery order within a tier."""
    return sorted(findings, key=lambda finding: -finding.severity.rank)
