from dataclasses import dataclass
from typing import ClassVar

from contractguard.config.settings import Settings
from contractguard.semantic.analyzer import SemanticAnalyzer
from contractguard.semantic.base import BaseSemanticAnalyzer
from contractguard.semantic.example_client_adapter import ExampleClientAdapter
from contractguard.semantic.openai_client_adapter import OpenAIClientAdapter


@dataclass(frozen=True)
class ProviderConfig:
    """Connection details for one OpenAI-compatible provider."""

    api_key: str
    model: str
    timeout_seconds: int
    base_url: str | None
    temperature: float = 0.0


class SemanticAnalyzerFactory:
    """Creates the semantic analyzer for ``settings.semantic_provider``.

    Every provider except ``example`` speaks the OpenAI chat API. Its key, model
    and timeout come from the ``semantic_<provider>_*`` settings.
    """

    DEFAULT_BASE_URLS: ClassVar[dict[str, str | None]] = {
        "openai": None,
        "openrouter": "https://openrouter.ai/api/v1",
        "groq": "https://api.groq.com/openai/v1",
        "ollama": "http://localhost:11434/v1",
    }
    CUSTOM_URL_PROVIDERS: ClassVar[tuple[str, ...]] = ("openai_compatible",)

    @classmethod
    def create(cls, settings: Settings) -> BaseSemanticAnalyzer:
        provider = settings.semantic_provider.lower()
        if provider == "example":
            return SemanticAnalyzer(
                client=ExampleClientAdapter(),
                model="example",
                temperature=0.0,
                max_input_chars=settings.semantic_max_input_chars,
            )
        config = cls.provider_config(provider, settings)
        client = OpenAIClientAdapter(
            api_key=config.api_key,
            timeout_seconds=config.timeout_seconds,
            base_url=config.base_url,
        )
        return SemanticAnalyzer(
            client=client,
            model=config.model,
            temperature=config.temperature,
            max_input_chars=settings.semantic_max_input_chars,
        )

    @classmethod
    def supported_providers(cls) -> list[str]:
        return ["example", *sorted([*cls.DEFAULT_BASE_URLS, *cls.CUSTOM_URL_PROVIDERS])]

    @classmethod
    def provider_config(cls, provider: str, settings: Settings) -> ProviderConfig:
        """Read the connection settings of an OpenAI-compatible provider.

        Raises:
            ValueError: for an unknown provider, or a custom-URL provider without a URL.
        """
        if provider in cls.CUSTOM_URL_PROVIDERS:
            base_url: str | None = getattr(settings, f"semantic_{provider}_base_url").strip()
            if not base_url:
                raise ValueError(
                    f"semantic_{provider}_base_url is required for semantic_provider={provider}"
                )
        elif provider in cls.DEFAULT_BASE_URLS:
            base_url = cls.DEFAULT_BASE_URLS[provider]
        else:
            raise ValueError(
                f"Unknown semantic provider '{provider}'. "
                f"Choose from: {cls.supported_providers()}"
            )

        prefix = f"semantic_{provider}_"
        return ProviderConfig(
            api_key=getattr(settings, prefix + "api_key") or "",
            model=getattr(settings, prefix + "model_name") or "",
            timeout_seconds=getattr(settings, prefix + "timeout_seconds") or 60,
            base_url=base_url,
            temperature=getattr(settings, prefix + "temperature", 0.0),
        )
