"""Integration tests for the analysis pipeline.

Uses a mock AI client and the in-memory store, so no API calls or database.
"""

import json
from unittest.mock import MagicMock

from contractguard.analysis.models import AnalysisState, Severity
from contractguard.analysis.orchestrator import AnalysisOrchestrator
from contractguard.database.repositories.memory_analysis_repository import (
    InMemoryAnalysisRepository,
)
from contractguard.patterns.matcher import PatternMatcher
from contractguard.semantic.analyzer import SemanticAnalyzer

CONTRACT = (
    "SUBCONTRACT AGREEMENT\n\n"
    "1. Payment. Subcontractor shall be paid if paid by Owner, within seven days of "
    "receipt of funds.\n\n"
    "2. Termination. The Owner may terminate for convenience at any time.\n\n"
    "3. Notice. Subcontractor must give written notice of any claim within 24 hours.\n\n"
    "4. Governing Law. This Agreement is governed by the laws of the State of Ohio."
)


def _orchestrator(
    response: dict[str, object],
) -> tuple[AnalysisOrchestrator, InMemoryAnalysisRepository]:
    client = MagicMock()
    client.create_chat_completion.return_value = json.dumps(response)
    repo = InMemoryAnalysisRepository()
    repo.add_document(1, CONTRACT)
    orchestrator = AnalysisOrchestrator(
        matcher=PatternMatcher(),
        semantic_analyzer=SemanticAnalyzer(client=client, model="test-model"),
        repository=repo,
    )
    return orchestrator, repo


class TestFullAnalysisPipeline:
    def test_end_to_end_merges_both_detectors(self) -> None:
        orchestrator, _repo = _orchestrator({
            "findings": [
                {
                    "risk_type": "scope",
                    "risk_level": "low",
                    "problematic_text": "SUBCONTRACT AGREEMENT",
                    "explanation": "Scope of work is not described.",
                    "recommendation": "Attach a scope exhibit.",
                },
            ],
            "overall_assessment": "High risk.",
        })
        try:
            status = orchestrator.analyze(1, CONTRACT)
        finally:
            orchestrator.shutdown()

        assert status.state is AnalysisState.COMPLETED
        assert status.overall_severity is Severity.HIGH
        result = orchestrator.get_results(1)
        assert result is not None
        categories = [f.category for f in result.findings]
        assert categories[0] == "PAYMENT_TERMS"
        assert {"TERMINATION", "NOTICE_REQUIREMENTS", "JURISDICTION", "SCOPE"} <= set(categories)
        scope = next(f for f in result.findings if f.category == "SCOPE")
        assert scope.source == "semantic"
        assert scope.explanation.endswith("Recommendation: Attach a scope exhibit.")
        ranks = [f.severity.rank for f in result.findings]
        assert ranks == sorted(ranks, reverse=True)

    def test_malformed_ai_response_fails_whole_attempt(self) -> None:
        orchestrator, _repo = _orchestrator({"overall_assessment": "no findings key"})
        try:
            status = orchestrator.analyze(1, CONTRACT)
        finally:
            orchestrator.shutdown()

        assert status.state is AnalysisState.FAILED
        assert status.error_message is not None
        assert "malformed" in status.error_message
        assert orchestrator.get_results(1) is None
