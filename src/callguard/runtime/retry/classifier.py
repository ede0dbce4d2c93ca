"""Error classifiers for the retry executor.

A classifier maps a raised exception to RETRYABLE or PERMANENT. Each one is
a pure function over the exception's ErrorInfo. Anything a classifier
cannot positively identify as transient is PERMANENT.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Protocol, runtime_checkable

from callguard.foundation.errors import ErrorInfo, ErrorKind, error_info


class Classification(StrEnum):
    RETRYABLE = "RETRYABLE"
    PERMANENT = "PERMANENT"


@runtime_checkable
class ErrorClassifier(Protocol):
    """Pure verdict function over a raised exception."""

    def __call__(self, error: BaseException) -> Classification: ...


# Transport failures without an HTTP status
_TRANSIENT_KINDS: frozenset[ErrorKind] = frozenset({
    ErrorKind.NETWORK,
    ErrorKind.TIMEOUT,
    ErrorKind.ABORTED,
})

# Store driver codes meaning the connection dropped or the operation timed out
TRANSIENT_STORE_CODES: frozenset[str] = frozenset({
    "P1001",  # can't reach database server
    "P1008",  # operation timed out
    "P1017",  # server closed the connection
    "CONNECTION_CLOSED",
    "ECONNRESET",
    "ETIMEDOUT",
})


def _verdict(retryable: bool) -> Classification:
    return Classification.RETRYABLE if retryable else Classification.PERMANENT


def _http_rule(info: ErrorInfo) -> bool:
    if info.kind is ErrorKind.HTTP_STATUS:
        return info.is_server_error
    return info.kind in _TRANSIENT_KINDS


def _store_rule(info: ErrorInfo) -> bool:
    if info.kind is ErrorKind.STORE:
        return info.code in TRANSIENT_STORE_CODES
    return info.kind in _TRANSIENT_KINDS


def classify_http(error: BaseException) -> Classification:
    """5xx and transport errors retry; 4xx and unknown shapes do not."""
    return _verdict(_http_rule(error_info(error)))


def classify_store(error: BaseException) -> Classification:
    """Connection-loss and timeout driver codes retry; constraint/not-found/validation do not."""
    return _verdict(_store_rule(error_info(error)))


def classify_query(error: BaseException) -> Classification:
    """HTTP rule for cache queries, with 4xx rejected before anything else.

    Store connection codes surfaced through a fetch are also transient.
    """
    info = error_info(error)
    if info.is_client_error:
        return Classification.PERMANENT
    return _verdict(_http_rule(info) or (info.kind is ErrorKind.STORE and info.code in TRANSIENT_STORE_CODES))


def never_retry(error: BaseException) -> Classification:
    return Classification.PERMANENT
