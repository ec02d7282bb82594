from dataclasses import dataclass
from datetime import datetime


@dataclass
class ContractRecord:
    """Represents a row from the contracts table."""

    id: int
    analysis_status: str
    extracted_text: str | None = None
    risk_score: str | None = None
    analysis_error: str | None = None
    analysis_degraded: bool = False
    analysis_started_at: datetime | None = None
    analysis_completed_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class RiskFindingRecord:
    """Represents a row from the risk_findings table."""

    contract_id: int
    position: int
    risk_type: str
    risk_level: str
    problematic_text: str
    explanation: str
    source: str = "pattern"
    id: int | None = None
    created_at: datetime | None = None
