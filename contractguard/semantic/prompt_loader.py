"""Loading of the bundled semantic analysis prompts and response schema."""

import json
from dataclasses import dataclass
from pathlib import Path

from contractguard.semantic.exceptions import ExternalAnalyzerError

PROMPT_DIR = Path(__file__).parent / "prompts"
PROMPT_TEMPLATE_FILE = "risk_analysis_prompt.txt"
SYSTEM_PROMPT_FILE = "risk_analysis_system_prompt.txt"
JSON_SCHEMA_FILE = "risk_findings_schema.json"


@dataclass(frozen=True)
class PromptBundle:
    """Everything the analyzer sends besides the contract text."""

    system_prompt: str
    template: str
    json_schema: str

    @property
    def json_schema_dict(self) -> dict[str, object]:
        return json.loads(self.json_schema)

    def render(self, contract_text: str) -> str:
        return self.template.format(contract_text=contract_text, json_schema=self.json_schema)


def _read(path: Path | None, default_name: str, what: str) -> str:
    source = path if path is not None else PROMPT_DIR / default_name
    try:
        return source.read_text(encoding="utf-8")
    except OSError as exc:
        raise ExternalAnalyzerError(f"Failed to load {what}: {exc}") from exc


def load_prompt_template(path: Path | None = None) -> str:
    """Load the user prompt template.

    The template carries ``{contract_text}`` and ``{json_schema}`` placeholders.

    Raises:
        ExternalAnalyzerError: if the file cannot be read.
    """
    return _read(path, PROMPT_TEMPLATE_FILE, "prompt template")


def load_system_prompt(path: Path | None = None) -> str:
    return _read(path, SYSTEM_PROMPT_FILE, "system prompt").strip()


def load_json_schema(path: Path | None = None) -> str:
    """Load the findings response schema as raw JSON text.

    Raises:
        ExternalAnalyzerError: if the file cannot be read or is not a JSON object.
    """
    raw = _read(path, JSON_SCHEMA_FILE, "JSON schema")
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ExternalAnalyzerError(f"Failed to load JSON schema: invalid JSON ({exc})") from exc
    if not isinstance(parsed, dict):
        raise ExternalAnalyzerError("Failed to load JSON schema: top level must be an object")
    return raw


def load_prompt_bundle(
    *,
    template_path: Path | None = None,
    system_prompt_path: Path | None = None,
    json_schema_path: Path | None = None,
) -> PromptBundle:
    return PromptBundle(
        system_prompt=load_system_prompt(system_prompt_path),
        template=load_prompt_template(template_path),
        json_schema=load_json_schema(json_schema_path),
    )
