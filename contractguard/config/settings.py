from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "contractguard"
    db_username: str = "contractguard"
    db_password: str = "secret"

    analysis_store: str = "postgres"
    worker_poll_interval_seconds: int = 5

    analysis_max_concurrent_attempts: int = 4
    analysis_allow_partial_results: bool = False
    stale_analysis_timeout_seconds: int = 900
    pattern_catalog_path: str | None = None

    semantic_provider: str = "openai"
    semantic_call_timeout_seconds: int = 90
    semantic_max_input_chars: int = 12000

    semantic_openai_api_key: str = ""
    semantic_openai_model_name: str = "gpt-4o-mini"
    semantic_openai_timeout_seconds: int = 60
    semantic_openai_temperature: float = 0.1

    semantic_openai_compatible_base_url: str = ""
    semantic_openai_compatible_api_key: str = ""
    semantic_openai_compatible_model_name: str = ""
    semantic_openai_compatible_timeout_seconds: int = 60

    semantic_openrouter_api_key: str = ""
    semantic_openrouter_model_name: str = ""
    semantic_openrouter_timeout_seconds: int = 60

    semantic_groq_api_key: str = ""
    semantic_groq_model_name: str = ""
    semantic_groq_timeout_seconds: int = 60

    semantic_ollama_api_key: str = "ollama"
    semantic_ollama_model_name: str = ""
    semantic_ollama_timeout_seconds: int = 120
