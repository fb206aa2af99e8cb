from __future__ import annotations

from typing import Literal

from pydantic import AliasChoices, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from newsdesk.core.errors import InvalidSettingsError

VALID_ENVIRONMENTS = frozenset({"local", "development", "test", "production"})
VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Supabase project (REST/Storage endpoint and keys)
    supabase_url: str = Field(
        default="",
        validation_alias=AliasChoices("NEXT_PUBLIC_SUPABASE_URL", "SUPABASE_URL", "supabase_url"),
        description="Supabase project URL",
    )
    supabase_anon_key: str = Field(
        default="",
        validation_alias=AliasChoices(
            "NEXT_PUBLIC_SUPABASE_ANON_KEY", "SUPABASE_ANON_KEY", "supabase_anon_key"
        ),
        description="Supabase anonymous (public) key",
    )
    supabase_service_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("SUPABASE_SERVICE_KEY", "SUPABASE_KEY", "supabase_service_key"),
        description="Supabase service-role key",
    )

    # Postgres connection of the Supabase project
    database_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("SUPABASE_DB_URL", "DATABASE_URL", "database_url"),
        description="Postgres connection URL",
    )

    # Mock-mode switches
    mock_db: bool = Field(default=False, description="Force the in-memory database")
    use_mock_data: bool = Field(
        default=False, description="Use the in-memory database in development"
    )
    mock_seed_data: bool = Field(
        default=True, description="Seed the in-memory database with fixture rows"
    )
    debug_supabase: bool = Field(default=False, description="Verbose database logging")

    # Storage
    storage_bucket: str = "article-images"
    local_upload_dir: str = "uploads"
    local_upload_base_url: str = "/uploads"

    # Dify
    dify_api_endpoint: str = "https://api.dify.ai/v1"
    dify_api_key: str | None = None
    dify_app_id: str | None = None
    dify_workflow_id: str | None = None
    dify_user_id: str | None = None
    dify_timeout_seconds: float = 60.0

    # LLM providers
    llm_provider: Literal["openai", "anthropic"] | None = None
    openai_api_key: str | None = None
    openai_model: str = "gpt-4-turbo"
    anthropic_api_key: str | None = None
    anthropic_model: str = "claude-3-opus-20240229"
    llm_temperature: float = 0.7
    llm_max_tokens: int = 4000

    # Rate limiting
    rate_limit_enabled: bool = True
    rate_limit_storage_url: str = "memory://"

    app_name: str = "crypto-newsdesk-api"
    environment: str = "development"
    log_level: str = "INFO"

    @field_validator("database_url")
    @classmethod
    def normalize_database_url(cls, value: str | None) -> str | None:
        """Point plain Postgres URLs at the asyncpg driver."""
        if not value:
            return None
        for prefix in ("postgres://", "postgresql://"):
            if value.startswith(prefix):
                return "postgresql+asyncpg://" + value[len(prefix) :]
        return value

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in VALID_ENVIRONMENTS:
            raise ValueError(f"must be one of {', '.join(sorted(VALID_ENVIRONMENTS))}")
        return normalized

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in VALID_LOG_LEVELS:
            raise ValueError(f"must be one of {', '.join(sorted(VALID_LOG_LEVELS))}")
        return normalized

    @field_validator("dify_api_endpoint", "supabase_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


def validate_settings() -> Settings:
    """Load settings from the environment.

    Raises:
        InvalidSettingsError: If any environment variable has an invalid value
    """
    try:
        return Settings()
    except ValidationError as e:
        invalid_fields: list[tuple[str, str]] = []
        for error in e.errors():
            field_path = ".".join(str(part) for part in error.get("loc", []))
            message = error.get("msg", "Invalid value")
            invalid_fields.append((field_path.upper() or "UNKNOWN", message))
        raise InvalidSettingsError(invalid_fields) from e


# Validate settings at import time.
# Exceptions will propagate to the importing module (e.g., newsdesk/main.py)
settings = validate_settings()
