from abc import ABC, abstractmethod

from contractguard.analysis.models import Finding


class BaseSemanticAnalyzer(ABC):
    """Contract for all semantic risk analyzers."""

    @abstractmethod
    def analyze(self, text: str) -> list[Finding]:
        """Identify risky clauses in contract text independently of the pattern catalog.

        Args:
            text: Extracted plain contract text.

        Returns:
            Findings tagged with source "semantic". An empty list means the
            provider answered and reported no risks.

        Raises:
            InvalidInputError: on empty or whitespace-only text.
            ExternalAnalyzerError: on any provider failure.
        """
