"""Execute-with-retry engine.

Runs a zero-argument async operation under a RetryPolicy and an
ErrorClassifier. Attempts are strictly sequential. Each attempt gets its own
deadline when the policy sets one, so a timeout on attempt k does not
shorten attempt k+1. The budget is attempt-count bounded, not wall-clock
bounded.

Per call:
    attempt -> success                        -> return value
            -> failure, PERMANENT             -> raise original error
            -> failure, RETRYABLE, exhausted  -> raise original error
            -> failure, RETRYABLE, budget left -> sleep(delay) -> attempt

Example:
    >>> from callguard.runtime.retry import RetryPolicy, classify_http, execute
    >>> value = await execute(lambda: client.get(url), RetryPolicy(max_attempts=3), classify_http)
"""

from __future__ import annotations

import asyncio
import logging
import time
from functools import wraps
from typing import TYPE_CHECKING, Awaitable, Callable, ParamSpec, TypeVar

from callguard.foundation.errors import AttemptOutcome, AttemptTimeout, Err, ErrorInfo, Ok, Result, error_info

from .backoff import delay_for
from .classifier import Classification, ErrorClassifier

if TYPE_CHECKING:
    from .policy import RetryPolicy

logger = logging.getLogger("callguard.retry")

T = TypeVar("T")
P = ParamSpec("P")

Operation = Callable[[], Awaitable[T]]
Sleep = Callable[[float], Awaitable[None]]
OnRetry = Callable[[int, BaseException, float], None]
CallResult = Result[T, ErrorInfo]


async def _attempt(operation: Operation[T], timeout: float | None) -> T:
    """Run one attempt, aborting it if it outlives its own deadline."""
    if timeout is None:
        return await operation()
    try:
        async with asyncio.timeout(timeout) as scope:
            return await operation()
    except TimeoutError as exc:
        # TimeoutError raised by the operation itself is left untouched
        if scope.expired():
            raise AttemptTimeout.after(timeout) from exc
        raise


async def _run(
    operation: Operation[T],
    policy: RetryPolicy,
    classifier: ErrorClassifier,
    sleep: Sleep,
    on_retry: OnRetry | None,
    label: str,
    outcomes: list[AttemptOutcome[T]] | None,
) -> Result[T, BaseException]:
    """Attempt loop shared by every public entry point. Resolves exactly once."""
    attempt = 0
    while True:
        attempt += 1
        start = time.perf_counter()
        try:
            value = await _attempt(operation, policy.per_attempt_timeout)
        except Exception as exc:
            elapsed = time.perf_counter() - start
            verdict = classifier(exc)
            info = error_info(exc)

            if verdict is Classification.PERMANENT or attempt >= policy.max_attempts:
                if outcomes is not None:
                    outcomes.append(AttemptOutcome(attempt, Err(exc), verdict, elapsed))
                if verdict is Classification.PERMANENT:
                    logger.debug(f"[{label}] Attempt {attempt} failed permanently ({info.kind}): {exc}")
                else:
                    logger.debug(f"[{label}] Giving up after {attempt} attempts ({info.kind}): {exc}")
                return Err(exc)

            delay = delay_for(attempt - 1, policy)
            if outcomes is not None:
                outcomes.append(AttemptOutcome(attempt, Err(exc), verdict, elapsed, delay))
            logger.warning(
                f"[{label}] Attempt {attempt}/{policy.max_attempts} failed ({info.kind}): {exc}. "
                f"Retrying in {delay:.1f}s"
            )
            if on_retry is not None:
                on_retry(attempt - 1, exc, delay)
            await sleep(delay)
            continue

        if outcomes is not None:
            outcomes.append(AttemptOutcome(attempt, Ok(value), None, time.perf_counter() - start))
        return Ok(value)


async def execute(
    operation: Operation[T],
    policy: RetryPolicy,
    classifier: ErrorClassifier,
    *,
    sleep: Sleep = asyncio.sleep,
    on_retry: OnRetry | None = None,
    label: str = "call",
) -> T:
    """Run operation with retries; return its value or raise the last error unchanged.

    Args:
        operation: Zero-argument callable returning an awaitable
        policy: Attempt budget, backoff bounds and per-attempt timeout
        classifier: Verdict function for raised exceptions
        sleep: Non-blocking suspension used for backoff
        on_retry: Called with (attempt_index, error, delay) before each backoff
        label: Tag used in log lines

    Raises:
        The original exception from the final attempt. Caller cancellation
        (asyncio.CancelledError) is never retried and propagates as-is.
    """
    result = await _run(operation, policy, classifier, sleep, on_retry, label, None)
    if result.is_ok():
        return result.unwrap()
    raise result.unwrap_err()


execute_with_policy = execute


async def execute_result(
    operation: Operation[T],
    policy: RetryPolicy,
    classifier: ErrorClassifier,
    *,
    sleep: Sleep = asyncio.sleep,
    on_retry: OnRetry | None = None,
    label: str = "call",
) -> CallResult[T]:
    """Like execute(), but resolves to Ok(value) or Err(ErrorInfo) instead of raising."""
    result = await _run(operation, policy, classifier, sleep, on_retry, label, None)
    return result.map_err(error_info)


async def execute_traced(
    operation: Operation[T],
    policy: RetryPolicy,
    classifier: ErrorClassifier,
    *,
    sleep: Sleep = asyncio.sleep,
    label: str = "call",
) -> tuple[Result[T, BaseException], list[AttemptOutcome[T]]]:
    """Run with retries and return the terminal result plus every attempt outcome."""
    outcomes: list[AttemptOutcome[T]] = []
    result = await _run(operation, policy, classifier, sleep, None, label, outcomes)
    return result, outcomes


def retrying(
    policy: RetryPolicy,
    classifier: ErrorClassifier,
    *,
    sleep: Sleep = asyncio.sleep,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Decorator form of execute() for async functions.

    Example:
        >>> @retrying(RetryPolicy(max_attempts=2), classify_store)
        ... async def load_offer(offer_id: str) -> dict: ...
    """
    def decorator(fn: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @wraps(fn)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            return await execute(lambda: fn(*args, **kwargs), policy, classifier, sleep=sleep, label=fn.__name__)
        return wrapper
    return decorator
