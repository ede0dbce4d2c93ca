"""Result sum type for call outcomes.

A call resolves to exactly one Result: Ok(value) on success or Err(error)
after a permanent failure or an exhausted budget. AttemptOutcome records a
single attempt inside that call.

Examples:
    >>> Ok(42).map(lambda x: x * 2).unwrap()
    84
    >>> Err("fail").unwrap_or(0)
    0
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Generic, TypeVar

if TYPE_CHECKING:
    from collections.abc import Iterator

    from callguard.runtime.retry.classifier import Classification

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")
F = TypeVar("F")


class Result(Generic[T, E]):
    """Either the value of a call or the error it ended with.

    Build with Ok()/Err(); inspect with is_ok(), match() or a match statement
    on the `value` attribute.
    """

    __slots__ = ("value", "success")
    __match_args__ = ("value",)

    def __init__(self, value: T | E, success: bool) -> None:
        self.value = value
        self.success = success

    def is_ok(self) -> bool:
        return self.success

    def is_err(self) -> bool:
        return not self.success

    def unwrap(self) -> T:
        if not self.success:
            raise RuntimeError(f"unwrap() called on Err({self.value!r})")
        return self.value  # type: ignore[return-value]

    def unwrap_err(self) -> E:
        if self.success:
            raise RuntimeError(f"unwrap_err() called on Ok({self.value!r})")
        return self.value  # type: ignore[return-value]

    def unwrap_or(self, default: T) -> T:
        return self.value if self.success else default  # type: ignore[return-value]

    def ok(self) -> T | None:
        return self.value if self.success else None  # type: ignore[return-value]

    def err(self) -> E | None:
        return None if self.success else self.value  # type: ignore[return-value]

    def map(self, f: Callable[[T], U]) -> Result[U, E]:
        if not self.success:
            return self  # type: ignore[return-value]
        return Ok(f(self.value))  # type: ignore[arg-type]

    def map_err(self, f: Callable[[E], F]) -> Result[T, F]:
        """Transform the error, e.g. an exception into its ErrorInfo."""
        if self.success:
            return self  # type: ignore[return-value]
        return Err(f(self.value))  # type: ignore[arg-type]

    def flat_map(self, f: Callable[[T], Result[U, E]]) -> Result[U, E]:
        if not self.success:
            return self  # type: ignore[return-value]
        return f(self.value)  # type: ignore[arg-type]

    def match(self, *, ok: Callable[[T], U], err: Callable[[E], U]) -> U:
        if self.success:
            return ok(self.value)  # type: ignore[arg-type]
        return err(self.value)  # type: ignore[arg-type]

    def __bool__(self) -> bool:
        return self.success

    def __repr__(self) -> str:
        return f"{'Ok' if self.success else 'Err'}({self.value!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Result):
            return NotImplemented
        return self.success == other.success and self.value == other.value

    def __iter__(self) -> Iterator[T]:
        if self.success:
            yield self.value  # type: ignore[misc]


def Ok(value: T) -> Result[T, E]:  # noqa: N802
    return Result(value, True)


def Err(error: E) -> Result[T, E]:  # noqa: N802
    return Result(error, False)


@dataclass(frozen=True, slots=True)
class AttemptOutcome(Generic[T]):
    """One attempt within a call.

    Attributes:
        attempt: 1-based attempt number
        result: Ok(value) or Err(exception) for this attempt
        classification: Verdict for a failed attempt, None on success
        elapsed: Seconds spent inside the attempt
        delay: Backoff slept after this attempt (0.0 if none)
    """
    attempt: int
    result: Result[T, BaseException]
    classification: Classification | None = None
    elapsed: float = 0.0
    delay: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.result.is_ok()
