"""Tests for settings and logging configuration."""

from __future__ import annotations

import io
import logging
from collections.abc import Iterator

import orjson
import pytest
from pydantic import ValidationError

from callguard.adapters import QueryClient, default_http_policy
from callguard.foundation.config import (
    CallguardSettings,
    LoggingSettings,
    QueryRetrySettings,
    clear_settings_cache,
    get_settings,
)
from callguard.runtime.observability import configure_logging


def test_defaults() -> None:
    settings = get_settings()
    assert settings.http.retries == 3
    assert settings.http.per_attempt_timeout_ms == 10_000
    assert settings.db.per_attempt_timeout_ms is None
    assert (settings.query.query_retries, settings.query.mutation_retries) == (3, 2)
    assert settings.logging.level == "INFO"
    assert not settings.is_production


def test_settings_cached() -> None:
    assert get_settings() is get_settings()


def test_env_overrides_feed_policies(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CALLGUARD_HTTP_RETRIES", "5")
    monkeypatch.setenv("CALLGUARD_HTTP_PER_ATTEMPT_TIMEOUT_MS", "2500")
    monkeypatch.setenv("CALLGUARD_QUERY_MUTATION_RETRIES", "1")
    clear_settings_cache()

    policy = default_http_policy()
    assert policy.max_attempts == 5
    assert policy.per_attempt_timeout == 2.5
    assert QueryClient().mutation_policy.max_attempts == 1


def test_environment_normalized(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CALLGUARD_ENVIRONMENT", "PRODUCTION")
    assert CallguardSettings().is_production


def test_invalid_values_rejected() -> None:
    with pytest.raises(ValidationError):
        QueryRetrySettings(mutation_retries=0)
    with pytest.raises(ValidationError):
        QueryRetrySettings(retry_delay_ms=20_000)


# ═════════════════════════════════════════════════════════════════════════════
# Logging
# ═════════════════════════════════════════════════════════════════════════════


@pytest.fixture
def restore_logger() -> Iterator[logging.Logger]:
    logger = logging.getLogger("callguard")
    handlers, level = list(logger.handlers), logger.level
    yield logger
    logger.handlers[:] = handlers
    logger.setLevel(level)


def test_configure_json_logging(restore_logger: logging.Logger) -> None:
    out = io.StringIO()
    configure_logging(format="json", level="warning", output=out)
    logging.getLogger("callguard.retry").warning("[GET /offers] Attempt 1/3 failed")
    logging.getLogger("callguard.retry").info("hidden")

    lines = out.getvalue().splitlines()
    assert len(lines) == 1
    entry = orjson.loads(lines[0])
    assert entry["level"] == "warning"
    assert entry["logger"] == "callguard.retry"
    assert entry["event"] == "[GET /offers] Attempt 1/3 failed"


def test_configure_text_logging_from_settings(restore_logger: logging.Logger) -> None:
    out = io.StringIO()
    configure_logging(settings=LoggingSettings(level="debug", format="text"), output=out)
    configure_logging(settings=LoggingSettings(level="debug", format="text"), output=out)
    logging.getLogger("callguard.db").debug("probe")
    assert out.getvalue().count("[DEBUG] callguard.db: probe") == 1


def test_configure_rejects_unknown_format(restore_logger: logging.Logger) -> None:
    with pytest.raises(ValueError, match="Unknown format"):
        configure_logging(format="xml")
