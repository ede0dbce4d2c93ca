"""Shared fixtures: recording sleep and isolated settings."""

from __future__ import annotations

import os
from collections.abc import Iterator

import pytest

from callguard.foundation.config import clear_settings_cache


class RecordingSleep:
    """Stands in for asyncio.sleep; records delays without waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Each test reads settings from a clean environment."""
    for name in [n for n in os.environ if n.startswith("CALLGUARD_")]:
        monkeypatch.delenv(name)
    clear_settings_cache()
    yield
    clear_settings_cache()
