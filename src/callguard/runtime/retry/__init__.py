"""Retry engine for remote calls.

Provides an immutable RetryPolicy, a deterministic capped exponential
backoff, pure error classifiers and the execute-with-retry loop.

Example:
    >>> from callguard.runtime.retry import RetryPolicy, classify_store, execute
    >>>
    >>> policy = RetryPolicy(max_attempts=3, base_delay=1.0, max_delay=30.0)
    >>> offer = await execute(lambda: store.offer.find_unique({"id": 7}), policy, classify_store)
"""

from .backoff import Backoff, ExponentialBackoff, delay_for, schedule
from .classifier import (
    TRANSIENT_STORE_CODES,
    Classification,
    ErrorClassifier,
    classify_http,
    classify_query,
    classify_store,
    never_retry,
)
from .executor import (
    CallResult,
    OnRetry,
    Operation,
    Sleep,
    execute,
    execute_result,
    execute_traced,
    execute_with_policy,
    retrying,
)
from .policy import NO_RETRY, RetryPolicy

__all__ = [
    # Policy
    "RetryPolicy",
    "NO_RETRY",
    # Backoff
    "Backoff",
    "ExponentialBackoff",
    "delay_for",
    "schedule",
    # Classification
    "Classification",
    "ErrorClassifier",
    "TRANSIENT_STORE_CODES",
    "classify_http",
    "classify_store",
    "classify_query",
    "never_retry",
    # Execution
    "Operation",
    "Sleep",
    "OnRetry",
    "CallResult",
    "execute",
    "execute_with_policy",
    "execute_result",
    "execute_traced",
    "retrying",
]
