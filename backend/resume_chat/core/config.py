from __future__ import annotations

from functools import lru_cache
from typing import Any, List

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_env: str = Field(default="dev", alias="APP_ENV")
    app_host: str = Field(default="0.0.0.0", alias="APP_HOST")
    app_port: int = Field(default=8000, alias="APP_PORT")
    # NOTE: Keep as string to avoid pydantic-settings JSON-decoding complex types from .env.
    cors_origins: str = Field(default="*", alias="CORS_ORIGINS")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    verbose_logging: bool = Field(default=False, alias="VERBOSE_LOGGING")

    openai_api_key: str = Field(default="", alias="OPENAI_API_KEY")
    openai_base_url: str = Field(default="https://api.openai.com", alias="OPENAI_BASE_URL")
    chat_model: str = Field(default="gpt-4o", alias="CHAT_MODEL")
    chat_temperature: float = Field(default=0.7, alias="CHAT_TEMPERATURE")
    embed_model: str = Field(default="text-embedding-ada-002", alias="EMBED_MODEL")
    embeddings_enabled: bool = Field(default=True, alias="EMBEDDINGS_ENABLED")

    supabase_url: str = Field(default="", alias="SUPABASE_URL")
    supabase_service_role_key: str = Field(default="", alias="SUPABASE_SERVICE_ROLE_KEY")
    match_threshold: float = Field(default=0.80, alias="MATCH_THRESHOLD")
    match_count: int = Field(default=6, alias="MATCH_COUNT")

    log_webhook_url: str = Field(
        default="",
        validation_alias=AliasChoices("LOG_WEBHOOK_URL", "GOOGLE_SHEETS_WEBHOOK_URL"),
    )
    log_timezone: str = Field(default="America/New_York", alias="LOG_TIMEZONE")
    chat_log_interactions: bool = Field(default=False, alias="CHAT_LOG_INTERACTIONS")

    assistant_name: str = Field(default="Sara", alias="ASSISTANT_NAME")
    persona_prompt: str = Field(default="", alias="PERSONA_PROMPT")
    http_timeout_sec: float = Field(default=20.0, alias="HTTP_TIMEOUT_SEC")
    max_message_chars: int = Field(default=4000, alias="MAX_MESSAGE_CHARS")

    model_config = SettingsConfigDict(
        env_file=(".env", "backend/.env"), extra="ignore", populate_by_name=True
    )

    def parsed_cors_origins(self) -> List[str]:
        """Return CORS origins parsed from env var.

        Supports comma-delimited strings (recommended) and JSON list strings.
        """

        raw = (self.cors_origins or "").strip()
        if not raw:
            return []
        if raw.startswith("["):
            try:
                import json

                value: Any = json.loads(raw)
                if isinstance(value, list):
                    items = [str(item).strip() for item in value]
                    return [item for item in items if item]
            except ValueError:
                pass
        return [item.strip() for item in raw.split(",") if item.strip()]

    @property
    def is_verbose(self) -> bool:
        """Verbose diagnostics are on explicitly or in the dev environment."""

        return self.verbose_logging or self.app_env.strip().lower() in {"dev", "development"}

    @property
    def vector_search_configured(self) -> bool:
        return bool(self.supabase_url.strip() and self.supabase_service_role_key.strip())


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()
