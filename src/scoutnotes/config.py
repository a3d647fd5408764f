"""Application configuration with environment validation.

Usage:
    from scoutnotes.config import settings

    print(settings.storage_backend)
    print(settings.environment)

Settings come from environment variables and an optional .env file in the
working directory. Supabase credentials are only required when
STORAGE_BACKEND=supabase.
"""

from enum import StrEnum
from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(StrEnum):
    """Application environment."""

    LOCAL = "local"
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class LogFormat(StrEnum):
    """Log output format."""

    CONSOLE = "console"
    JSON = "json"


class StorageBackend(StrEnum):
    """Where team records are persisted."""

    MEMORY = "memory"  # Process-local, for tests and offline use
    SUPABASE = "supabase"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Environment = Environment.LOCAL

    # Storage
    storage_backend: StorageBackend = Field(
        default=StorageBackend.SUPABASE, description="Team record storage backend"
    )
    supabase_url: str | None = Field(default=None, description="Supabase project URL")
    supabase_key: SecretStr | None = Field(default=None, description="Supabase API key")
    team_records_table: str = Field(
        default="team_records", description="Table holding serialized team records"
    )

    # Caller retry policy for compare-and-swap conflicts
    cas_retry_attempts: int = Field(
        default=5, ge=1, description="Attempts the CLI makes before giving up on a CAS conflict"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_format: LogFormat | None = Field(
        default=None, description="Log output format (defaults to json in production)"
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == Environment.PRODUCTION

    @property
    def effective_log_format(self) -> LogFormat:
        """Log format to use, falling back on the environment default."""
        if self.log_format is not None:
            return self.log_format
        return LogFormat.JSON if self.is_production else LogFormat.CONSOLE


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are loaded once and cached. To reload, clear the cache:
        get_settings.cache_clear()
    """
    return Settings()


# Convenience alias for direct import
settings = get_settings()
