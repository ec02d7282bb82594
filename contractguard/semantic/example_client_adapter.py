"""Offline semantic client for local runs and tests.

Returns a canned risk report instead of calling a provider. New provider
adapters implement BaseSemanticClient the same way and are registered in
SemanticAnalyzerFactory.
"""

import json
from collections.abc import Sequence

from contractguard.semantic.client_base import BaseSemanticClient

NO_RISKS_ASSESSMENT = "No semantic analysis performed by the example provider."


class ExampleClientAdapter(BaseSemanticClient):
    """Answers every request with the same findings report.

    The report holds no findings unless ``findings`` is given. Each call's
    user prompt is recorded in ``prompts``.
    """

    provider_name = "example"

    def __init__(
        self,
        findings: Sequence[dict[str, str]] = (),
        overall_assessment: str = NO_RISKS_ASSESSMENT,
    ) -> None:
        self._report = json.dumps(
            {"findings": list(findings), "overall_assessment": overall_assessment}
        )
        self.prompts: list[str] = []

    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        json_schema: dict[str, object],
    ) -> str:
        self.prompts.append(user_prompt)
        return self._report
