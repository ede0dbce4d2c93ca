"""Environment-based configuration using pydantic-settings.

Settings are only read to build RetryPolicy values for each adapter; the
retry engine itself never consults global configuration.

Example:
    >>> from callguard.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.http.retries
    3
    >>> settings.query.mutation_retries
    2

    # Or with environment variables:
    # CALLGUARD_HTTP_RETRIES=5
    # CALLGUARD_DB_RETRY_DELAY_MS=250
    # CALLGUARD_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, NonNegativeInt, PositiveInt, computed_field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class HttpRetrySettings(BaseSettings):
    """Outbound HTTP fetch defaults."""

    model_config = SettingsConfigDict(env_prefix="CALLGUARD_HTTP_", extra="ignore")

    retries: PositiveInt = Field(default=3, description="Total attempts per request")
    retry_delay_ms: NonNegativeInt = Field(default=1000, description="Base backoff delay")
    max_delay_ms: NonNegativeInt = Field(default=30_000, description="Backoff cap")
    per_attempt_timeout_ms: PositiveInt | None = Field(default=10_000, description="Deadline for each attempt")
    content_type: str = "application/json"


class DatabaseRetrySettings(BaseSettings):
    """Data-store operation defaults."""

    model_config = SettingsConfigDict(env_prefix="CALLGUARD_DB_", extra="ignore")

    retries: PositiveInt = 3
    retry_delay_ms: NonNegativeInt = 1000
    max_delay_ms: NonNegativeInt = 30_000
    per_attempt_timeout_ms: PositiveInt | None = None
    health_check_retries: PositiveInt = Field(default=2, description="Attempts for the SELECT 1 probe")
    health_check_delay_ms: NonNegativeInt = 500


class QueryRetrySettings(BaseSettings):
    """Client-side query cache defaults. Reads and mutations have separate budgets."""

    model_config = SettingsConfigDict(env_prefix="CALLGUARD_QUERY_", extra="ignore")

    query_retries: PositiveInt = 3
    mutation_retries: PositiveInt = 2
    retry_delay_ms: NonNegativeInt = 1000
    query_max_delay_ms: NonNegativeInt = 30_000
    mutation_max_delay_ms: NonNegativeInt = 10_000
    stale_time_ms: NonNegativeInt = 5 * 60 * 1000
    gc_time_ms: NonNegativeInt = 10 * 60 * 1000

    @model_validator(mode="after")
    def _check_caps(self) -> QueryRetrySettings:
        if self.retry_delay_ms > min(self.query_max_delay_ms, self.mutation_max_delay_ms):
            raise ValueError("retry_delay_ms must not exceed either backoff cap")
        return self


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="CALLGUARD_LOG_", extra="ignore")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "text"] = "text"

    @field_validator("level", mode="before")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class CallguardSettings(BaseSettings):
    """Root settings.

    Example environment variables:
        CALLGUARD_ENVIRONMENT=production
        CALLGUARD_HTTP_PER_ATTEMPT_TIMEOUT_MS=5000
        CALLGUARD_QUERY_MUTATION_RETRIES=1
    """

    model_config = SettingsConfigDict(
        env_prefix="CALLGUARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    environment: Literal["development", "staging", "production"] = "development"

    http: HttpRetrySettings = Field(default_factory=HttpRetrySettings)
    db: DatabaseRetrySettings = Field(default_factory=DatabaseRetrySettings)
    query: QueryRetrySettings = Field(default_factory=QueryRetrySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @field_validator("environment", mode="before")
    @classmethod
    def _normalize_env(cls, v: str) -> str:
        return v.lower() if isinstance(v, str) else v

    @computed_field
    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> CallguardSettings:
    """Get the global settings instance (cached)."""
    return CallguardSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache so the next get_settings() rereads the environment."""
    get_settings.cache_clear()
