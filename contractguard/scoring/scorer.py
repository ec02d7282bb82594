"""Reduction of a finding set to one overall severity."""

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from contractguard.analysis.exceptions import InvalidInputError
from contractguard.analysis.models import Finding, RiskSummary, Severity
from contractguard.patterns.matcher import PatternMatcher

HIGH_ESCALATION_MEDIUM_COUNT = 5
MEDIUM_ESCALATION_MEDIUM_COUNT = 2
MEDIUM_ESCALATION_LOW_COUNT = 8


@dataclass(frozen=True)
class RiskAssessment:
    """Pattern-only assessment of a text."""

    overall_severity: Severity
    findings: tuple[Finding, ...]
    summary: RiskSummary


def score_counts(high: int, medium: int, low: int) -> Severity:
    """Overall severity for the given per-severity finding counts.

    Raises:
        InvalidInputError: if any count is negative.
    """
    if high < 0 or medium < 0 or low < 0:
        raise InvalidInputError(
            f"Finding counts must be non-negative, got ({high}, {medium}, {low})"
        )
    if high >= 1 or medium >= HIGH_ESCALATION_MEDIUM_COUNT:
        return Severity.HIGH
    if medium >= MEDIUM_ESCALATION_MEDIUM_COUNT or low >= MEDIUM_ESCALATION_LOW_COUNT:
        return Severity.MEDIUM
    if medium >= 1:
        return Severity.MEDIUM
    return Severity.LOW


def score_findings(findings: Iterable[Finding]) -> Severity:
    counts = Counter(finding.severity for finding in findings)
    return score_counts(
        counts[Severity.HIGH],
        counts[Severity.MEDIUM],
        counts[Severity.LOW],
    )


def summarize(findings: Sequence[Finding]) -> RiskSummary:
    by_severity = {severity: 0 for severity in Severity}
    by_category: dict[str, int] = {}
    for finding in findings:
        by_severity[finding.severity] += 1
        by_category[finding.category] = by_category.get(finding.category, 0) + 1
    return RiskSummary(total=len(findings), by_severity=by_severity, by_category=by_category)


def assess(text: str, matcher: PatternMatcher) -> RiskAssessment:
    """Run the pattern matcher over raw text and score the result.

    Raises:
        InvalidInputError: if the text is empty or whitespace only.
    """
    if not text or not text.strip():
        raise InvalidInputError("Contract text is required for risk scoring")
    findings = tuple(matcher.analyze(text))
    return RiskAssessment(
        overall_severity=score_findings(findings),
        findings=findings,
        summary=summarize(findings),
    )
