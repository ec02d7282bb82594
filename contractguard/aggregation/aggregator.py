from collections.abc import Iterable

from contractguard.analysis.models import Finding

DEDUP_PREFIX_CHARS = 100


def dedup_key(finding: Finding) -> tuple[str, str]:
    """Key under which two findings are considered the same concern."""
    return finding.category, finding.matched_text[:DEDUP_PREFIX_CHARS]


def aggregate(*sources: Iterable[Finding]) -> list[Finding]:
    """Merge finding sequences, keeping the first finding seen for each key.

    Sources are consumed in argument order, so earlier sources win collisions.
    Output order follows input order.
    """
    seen: set[tuple[str, str]] = set()
    merged: list[Finding] = []
    for source in sources:
        for finding in source:
            key = dedup_key(finding)
            if key in seen:
                continue
            seen.add(key)
            merged.append(finding)
    return merged
