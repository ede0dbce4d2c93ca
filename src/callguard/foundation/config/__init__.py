"""Configuration management using pydantic-settings."""

from .settings import (
    CallguardSettings,
    DatabaseRetrySettings,
    HttpRetrySettings,
    LoggingSettings,
    QueryRetrySettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "CallguardSettings",
    "DatabaseRetrySettings",
    "HttpRetrySettings",
    "LoggingSettings",
    "QueryRetrySettings",
    "clear_settings_cache",
    "get_settings",
]
