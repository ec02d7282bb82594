"""AI-powered semantic contract risk analyzer."""

import json
import re

from contractguard.analysis.exceptions import InvalidInputError
from contractguard.analysis.models import Finding
from contractguard.logging.logger import Log
from contractguard.semantic.base import BaseSemanticAnalyzer
from contractguard.semantic.client_base import BaseSemanticClient
from contractguard.semantic.exceptions import MalformedResponseError
from contractguard.semantic.prompt_loader import PromptBundle, load_prompt_bundle
from contractguard.semantic.validator import validate_and_build

TRUNCATION_MARKER = "...[truncated]"
MAX_TEMPERATURE = 0.2

_CODE_FENCE = re.compile(r"^```[\w-]*\s*\n?(.*?)\n?```$", re.DOTALL)


class SemanticAnalyzer(BaseSemanticAnalyzer):
    """Finds risky clauses in contract text using an AI provider.

    One provider call per ``analyze``. Contract text longer than
    ``max_input_chars`` is cut and marked before it goes into the prompt.
    """

    def __init__(
        self,
        *,
        client: BaseSemanticClient,
        model: str,
        temperature: float = 0.1,
        max_input_chars: int = 12000,
        prompts: PromptBundle | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = max(0.0, min(MAX_TEMPERATURE, temperature))
        self._max_input_chars = max_input_chars
        self._prompts = prompts if prompts is not None else load_prompt_bundle()
        self._schema = self._prompts.json_schema_dict

    def analyze(self, text: str) -> list[Finding]:
        if not text or not text.strip():
            raise InvalidInputError("Contract text is required for semantic analysis")

        prompt = self._prompts.render(self._truncate(text.strip()))
        Log.debug(f"Semantic analysis prompt:\n{prompt}", provider=self._client.provider_name)

        raw_response = self._client.create_chat_completion(
            model=self._model,
            temperature=self._temperature,
            system_prompt=self._prompts.system_prompt,
            user_prompt=prompt,
            json_schema=self._schema,
        )
        Log.debug(f"AI raw response:\n{raw_response}")

        findings = validate_and_build(parse_response(raw_response))
        Log.info(f"Semantic analysis complete: {len(findings)} potential risks")
        return findings

    def _truncate(self, text: str) -> str:
        if len(text) <= self._max_input_chars:
            return text
        return text[: self._max_input_chars] + TRUNCATION_MARKER


def parse_response(raw: str) -> dict[str, object]:
    """Decode the provider reply, tolerating a surrounding markdown code fence.

    Raises:
        MalformedResponseError: if the reply is not a JSON object.
    """
    cleaned = raw.strip()
    fenced = _CODE_FENCE.match(cleaned)
    if fenced:
        cleaned = fenced.group(1).strip()
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise MalformedResponseError(f"Invalid JSON response: {exc}") from exc
    if not isinstance(parsed, dict):
        raise MalformedResponseError("JSON response must be an object")
    return parsed
