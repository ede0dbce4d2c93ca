"""Retry policy value object.

A RetryPolicy is immutable and built once per adapter (or per call for
overrides). Delays and timeouts are in seconds; from_options() accepts the
millisecond option names used by call sites.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, NonNegativeFloat, PositiveFloat, model_validator


class RetryPolicy(BaseModel):
    """Configurable retry policy for a remote call.

    Attributes:
        max_attempts: Total attempts including the first (>= 1)
        base_delay: Delay before the first retry, in seconds
        max_delay: Cap on any single backoff delay, in seconds
        per_attempt_timeout: Deadline applied independently to each attempt, or None

    Example:
        >>> policy = RetryPolicy(max_attempts=3, base_delay=1.0, max_delay=30.0)
        >>> policy.with_overrides(max_attempts=5).max_attempts
        5
    """

    model_config = ConfigDict(
        frozen=True,
        validate_default=True,
        extra="forbid",
        revalidate_instances="never",
        json_schema_extra={
            "title": "Retry Policy",
            "examples": [{"max_attempts": 3, "base_delay": 1.0, "max_delay": 30.0, "per_attempt_timeout": 10.0}],
        },
    )

    max_attempts: Annotated[int, Field(ge=1)] = 3
    base_delay: NonNegativeFloat = 1.0
    max_delay: NonNegativeFloat = 30.0
    per_attempt_timeout: PositiveFloat | None = None

    @model_validator(mode="after")
    def _check_delays(self) -> RetryPolicy:
        if self.base_delay > self.max_delay:
            raise ValueError(f"base_delay ({self.base_delay}) must not exceed max_delay ({self.max_delay})")
        return self

    @property
    def max_retries(self) -> int:
        """Retries after the first attempt."""
        return self.max_attempts - 1

    @classmethod
    def from_options(
        cls,
        *,
        retries: int = 3,
        retry_delay_ms: int = 1000,
        max_delay_ms: int | None = None,
        per_attempt_timeout_ms: int | None = None,
    ) -> RetryPolicy:
        """Build a policy from millisecond options.

        `retries` is the total attempt budget. When max_delay_ms is omitted the
        cap defaults to 30x the base delay (30s for the usual 1s base).
        """
        cap = max_delay_ms if max_delay_ms is not None else retry_delay_ms * 30
        return cls(
            max_attempts=retries,
            base_delay=retry_delay_ms / 1000,
            max_delay=cap / 1000,
            per_attempt_timeout=per_attempt_timeout_ms / 1000 if per_attempt_timeout_ms is not None else None,
        )

    def with_overrides(self, **overrides: Any) -> RetryPolicy:
        """Return a validated copy with the given fields replaced."""
        if not overrides:
            return self
        return RetryPolicy.model_validate({**self.model_dump(), **overrides})


NO_RETRY = RetryPolicy(max_attempts=1, base_delay=0.0, max_delay=0.0)
