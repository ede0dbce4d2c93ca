"""Runtime: retry engine and logging setup."""

from .observability import configure_logging
from .retry import (
    NO_RETRY,
    Classification,
    ErrorClassifier,
    ExponentialBackoff,
    RetryPolicy,
    classify_http,
    classify_query,
    classify_store,
    delay_for,
    execute,
    execute_result,
    execute_with_policy,
)

__all__ = [
    "configure_logging",
    "RetryPolicy", "NO_RETRY", "ExponentialBackoff", "delay_for",
    "Classification", "ErrorClassifier", "classify_http", "classify_store", "classify_query",
    "execute", "execute_with_policy", "execute_result",
]
