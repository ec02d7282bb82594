import re
from collections.abc import Iterator
from dataclasses import dataclass

from contractguard.analysis.models import Severity
from contractguard.patterns.exceptions import PatternCatalogError, UnknownPatternError

_MATCH_PLACEHOLDER = "{match}"
_MAX_CATEGORY_CHARS = 100


@dataclass(frozen=True)
class RiskPattern:
    """A known risk-bearing phrasing and the metadata attached to its findings."""

    name: str
    match_rule: re.Pattern[str]
    severity: Severity
    category: str
    explanation_template: str

    @classmethod
    def build(
        cls,
        *,
        name: str,
        rule: str,
        severity: Severity | str,
        category: str,
        explanation: str,
    ) -> "RiskPattern":
        """Compile a case-insensitive pattern definition.

        Raises:
            PatternCatalogError: if the rule is not a valid regular expression
                or the severity is unknown, or the category is blank or longer
                than 100 characters.
        """
        try:
            compiled = re.compile(rule, re.IGNORECASE)
        except re.error as exc:
            raise PatternCatalogError(f"Pattern '{name}' has an invalid rule: {exc}") from exc
        try:
            level = severity if isinstance(severity, Severity) else Severity(severity.upper())
        except (AttributeError, ValueError) as exc:
            raise PatternCatalogError(
                f"Pattern '{name}' has unknown severity {severity!r}"
            ) from exc
        normalized = category.strip().upper()
        if not normalized or len(normalized) > _MAX_CATEGORY_CHARS:
            raise PatternCatalogError(
                f"Pattern '{name}' category must be 1 to {_MAX_CATEGORY_CHARS} characters"
            )
        return cls(
            name=name,
            match_rule=compiled,
            severity=level,
            category=normalized,
            explanation_template=explanation,
        )

    def explain(self, matched_phrase: str) -> str:
        """Render the explanation for one match, naming the matched phrase."""
        base = self.explanation_template.replace(_MATCH_PLACEHOLDER, matched_phrase)
        return f'{base}\n\nSpecific concern: "{matched_phrase}"'


class PatternCatalog:
    """Immutable, ordered collection of risk patterns with unique names."""

    __slots__ = ("_patterns",)

    def __init__(self, patterns: tuple[RiskPattern, ...] | list[RiskPattern] = ()) -> None:
        names = [pattern.name for pattern in patterns]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise PatternCatalogError(f"Duplicate pattern names: {duplicates}")
        self._patterns: tuple[RiskPattern, ...] = tuple(patterns)

    def __iter__(self) -> Iterator[RiskPattern]:
        return iter(self._patterns)

    def __len__(self) -> int:
        return len(self._patterns)

    def __repr__(self) -> str:
        return f"PatternCatalog({len(self._patterns)} patterns)"

    @property
    def patterns(self) -> tuple[RiskPattern, ...]:
        return self._patterns

    def get(self, name: str) -> RiskPattern:
        for pattern in self._patterns:
            if pattern.name == name:
                return pattern
        raise UnknownPatternError(f"Pattern '{name}' not found")

    def with_patterns(self, *patterns: RiskPattern) -> "PatternCatalog":
        """Return a new catalog with the given patterns appended."""
        return PatternCatalog(self._patterns + tuple(patterns))
