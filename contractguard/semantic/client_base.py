from abc import ABC, abstractmethod
from typing import ClassVar


class BaseSemanticClient(ABC):
    """Transport to one AI provider.

    Implementations make a single request per call and never retry. Provider
    failures must surface as ExternalAnalyzerError subtypes so the orchestrator
    can record a readable reason.
    """

    provider_name: ClassVar[str] = "unknown"

    @abstractmethod
    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        json_schema: dict[str, object],
    ) -> str:
        """Send one chat request constrained to ``json_schema``; return the raw reply text."""
