"""Validates the parsed AI response and builds semantic findings."""

import re
from typing import Any

from contractguard.analysis.models import Finding, Severity
from contractguard.semantic.exceptions import MalformedResponseError

_MAX_FINDINGS = 100
_MAX_MATCHED_TEXT_CHARS = 500
_MAX_CATEGORY_CHARS = 100
_CATEGORY_SEPARATORS = re.compile(r"[\s\-/]+")


def validate_and_build(data: dict[str, Any]) -> list[Finding]:
    """Validate raw parsed JSON and build semantic findings.

    Raises:
        MalformedResponseError: on any validation failure.
    """
    raw_findings = data.get("findings")
    if not isinstance(raw_findings, list):
        raise MalformedResponseError("'findings' must be a list")
    if len(raw_findings) > _MAX_FINDINGS:
        raise MalformedResponseError(
            f"Too many findings: {len(raw_findings)} (max {_MAX_FINDINGS})"
        )
    return [_build_finding(item, i) for i, item in enumerate(raw_findings)]


def normalize_category(raw: str) -> str:
    """Upper snake case, e.g. 'payment terms' -> 'PAYMENT_TERMS'."""
    return _CATEGORY_SEPARATORS.sub("_", raw.strip()).upper()


def _build_finding(raw: Any, index: int) -> Finding:
    if not isinstance(raw, dict):
        raise MalformedResponseError(f"Finding at index {index} must be an object")
    risk_type = _require_string(raw, "risk_type", index)
    problematic_text = _require_string(raw, "problematic_text", index)
    explanation = _require_string(raw, "explanation", index)
    severity = _build_severity(raw.get("risk_level"), index)

    recommendation = raw.get("recommendation")
    if recommendation is not None and not isinstance(recommendation, str):
        raise MalformedResponseError(
            f"Finding at index {index}: 'recommendation' must be a string or null"
        )
    if recommendation and recommendation.strip():
        explanation = f"{explanation}\n\nRecommendation: {recommendation.strip()}"

    category = normalize_category(risk_type)
    if len(category) > _MAX_CATEGORY_CHARS:
        raise MalformedResponseError(
            f"Finding at index {index}: 'risk_type' must be at most "
            f"{_MAX_CATEGORY_CHARS} characters"
        )

    return Finding(
        category=category,
        severity=severity,
        matched_text=_clip(problematic_text.strip()),
        explanation=explanation,
        source="semantic",
    )


def _require_string(raw: dict[str, Any], field: str, index: int) -> str:
    value = raw.get(field)
    if not value or not isinstance(value, str) or not value.strip():
        raise MalformedResponseError(
            f"Finding at index {index}: '{field}' must be a non-empty string"
        )
    return value


def _build_severity(raw: Any, index: int) -> Severity:
    if not isinstance(raw, str):
        raise MalformedResponseError(
            f"Finding at index {index}: 'risk_level' must be a string"
        )
    try:
        return Severity(raw.strip().upper())
    except ValueError as exc:
        raise MalformedResponseError(
            f"Finding at index {index}: 'risk_level' must be one of "
            f"{[s.value for s in Severity]}, got {raw!r}"
        ) from exc


def _clip(text: str) -> str:
    if len(text) <= _MAX_MATCHED_TEXT_CHARS:
        return text
    return text[: _MAX_MATCHED_TEXT_CHARS - 3] + "..."
