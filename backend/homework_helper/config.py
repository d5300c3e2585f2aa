"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

_POSTGRES_SCHEMES = ("postgres://", "postgresql://", "postgresql+asyncpg://", "postgresql+psycopg2://")


def _with_driver(url: str, scheme: str) -> str:
    """Rewrite a Postgres URL onto `scheme`; other databases pass through."""
    for prefix in _POSTGRES_SCHEMES:
        if url.startswith(prefix):
            return f"{scheme}://{url[len(prefix):]}"
    return url


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Homework Helper"
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Database
    # database_url_override (a full URL, e.g. a hosted Postgres with sslmode=require)
    # takes precedence over the individual postgres_* parts
    database_url_override: str | None = None
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "homework"
    postgres_password: str = ""
    postgres_db: str = "homework_helper"

    def _raw_database_url(self) -> str:
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @computed_field
    @property
    def database_url(self) -> str:
        """Async URL for the application engine (asyncpg for Postgres)."""
        url = _with_driver(self._raw_database_url(), "postgresql+asyncpg")
        if url.startswith("postgresql+asyncpg://"):
            # asyncpg rejects libpq query options; SSL is passed via connect_args
            url = url.split("?", 1)[0]
        return url

    @computed_field
    @property
    def database_url_sync(self) -> str:
        """Driverless URL, used for offline migration scripts."""
        return _with_driver(self._raw_database_url(), "postgresql")

    @computed_field
    @property
    def database_requires_ssl(self) -> bool:
        query = self._raw_database_url().partition("?")[2]
        return "sslmode=require" in query or "ssl=require" in query

    # Auth / JWT
    jwt_secret_key: str  # Required - no default, must be set in .env
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60 * 24 * 7  # 7 days
    password_min_length: int = 6

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Cookies
    # Set to true when frontend and backend are on different domains
    # This uses samesite="none" + secure=True instead of samesite="lax"
    cookie_cross_domain: bool = False

    # Anthropic API
    anthropic_api_key: str

    # LLM Configuration
    llm_model: str = "claude-sonnet-4-20250514"
    llm_max_tokens: int = 4000
    llm_hint_temperature: float = 0.7
    llm_resources_max_tokens: int = 2048
    llm_resources_temperature: float = 0.2

    # Hint budgets
    first_hint_max_chars: int = 100
    second_hint_max_words: int = 200

    # Image upload (problem photos)
    max_image_size_bytes: int = 10 * 1024 * 1024  # 10MB


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def sanitize_error(error: Exception, *, generic_message: str = "An internal error occurred.") -> str:
    """
    Return a user-safe error message.

    In development, returns the full exception string for debugging.
    In staging/production, returns a generic message to avoid leaking internals.
    """
    settings = get_settings()
    if settings.environment == "development":
        return str(error)
    return generic_message
