"""Logging setup for the callguard.* loggers.

Modules log through stdlib loggers (callguard.retry, callguard.http,
callguard.db, callguard.query). configure_logging() attaches one handler to
the "callguard" parent with a text or one-line JSON format.

Example:
    >>> from callguard.runtime.observability import configure_logging
    >>> configure_logging()              # from CALLGUARD_LOG_* settings
    >>> configure_logging(format="json", level="DEBUG")
"""

from __future__ import annotations

import logging
import sys
from datetime import UTC, datetime
from typing import TYPE_CHECKING, TextIO

import orjson

if TYPE_CHECKING:
    from callguard.foundation.config import LoggingSettings

ROOT_LOGGER = "callguard"
_TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": record.getMessage(),
        }
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return orjson.dumps(entry).decode()


def configure_logging(
    format: str | None = None,  # noqa: A002 - matches the settings field name
    level: str | None = None,
    *,
    settings: LoggingSettings | None = None,
    output: TextIO | None = None,
) -> logging.Logger:
    """Attach a single handler to the callguard logger. Format: "text" or "json".

    Explicit arguments win over settings; settings default to get_settings().logging.
    Calling again replaces the previously installed handler.
    """
    if settings is None:
        from callguard.foundation.config import get_settings
        settings = get_settings().logging
    fmt = format or settings.format
    lvl = (level or settings.level).upper()

    match fmt:
        case "text": formatter: logging.Formatter = logging.Formatter(_TEXT_FORMAT)
        case "json": formatter = JsonFormatter()
        case _: raise ValueError(f"Unknown format: {fmt}. Use 'text' or 'json'")

    logger = logging.getLogger(ROOT_LOGGER)
    for handler in [h for h in logger.handlers if getattr(h, "_callguard", False)]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(output or sys.stderr)
    handler.setFormatter(formatter)
    handler._callguard = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, lvl, logging.INFO))
    return logger
