"""Backoff schedule for retry policies.

Delay = min(base * 2^attempt, max_delay), attempt 0-indexed (first retry = 0).
Deterministic: no jitter is applied, so concurrent callers failing together
will retry together.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .policy import RetryPolicy


@runtime_checkable
class Backoff(Protocol):
    """Protocol for backoff delay calculation."""

    def delay(self, attempt: int) -> float:
        """Delay in seconds before the retry following 0-indexed `attempt`."""
        ...


@dataclass(frozen=True, slots=True)
class ExponentialBackoff:
    """Capped exponential backoff.

    Attributes:
        base: Initial delay in seconds (default: 1.0)
        max_delay: Maximum delay cap in seconds (default: 30.0)
        multiplier: Exponential growth factor (default: 2.0)
    """

    base: float = 1.0
    max_delay: float = 30.0
    multiplier: float = 2.0

    def delay(self, attempt: int) -> float:
        if attempt < 0:
            raise ValueError(f"attempt index must be >= 0, got {attempt}")
        return min(self.base * (self.multiplier ** attempt), self.max_delay)

    @classmethod
    def for_policy(cls, policy: RetryPolicy) -> ExponentialBackoff:
        return cls(base=policy.base_delay, max_delay=policy.max_delay)


def delay_for(attempt_index: int, policy: RetryPolicy) -> float:
    """Delay in seconds before the retry following `attempt_index` (0-based)."""
    return ExponentialBackoff.for_policy(policy).delay(attempt_index)


def schedule(policy: RetryPolicy) -> tuple[float, ...]:
    """All delays a fully exhausted call would sleep, in order."""
    backoff = ExponentialBackoff.for_policy(policy)
    return tuple(backoff.delay(i) for i in range(policy.max_attempts - 1))
