"""Tests for error normalization and the three classifiers."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from callguard.foundation.errors import (
    AttemptTimeout,
    CallError,
    ErrorInfo,
    ErrorKind,
    HttpStatusError,
    StoreError,
    error_info,
)
from callguard.runtime.retry import Classification, classify_http, classify_query, classify_store, never_retry

RETRY = Classification.RETRYABLE
PERM = Classification.PERMANENT

_REQUEST = httpx.Request("GET", "http://test/offers")


def http_error(status: int) -> HttpStatusError:
    return HttpStatusError.from_response(httpx.Response(status, request=_REQUEST))


# ═════════════════════════════════════════════════════════════════════════════
# Boundary normalization
# ═════════════════════════════════════════════════════════════════════════════


def test_error_info_from_call_error_is_identity() -> None:
    err = StoreError.from_code("P2002", "Unique constraint failed")
    assert error_info(err) is err.info


@pytest.mark.parametrize("exc,kind", [
    (httpx.ConnectError("fetch failed", request=_REQUEST), ErrorKind.NETWORK),
    (httpx.ReadTimeout("timed out", request=_REQUEST), ErrorKind.TIMEOUT),
    (TimeoutError(), ErrorKind.TIMEOUT),
    (asyncio.TimeoutError(), ErrorKind.TIMEOUT),
    (ConnectionResetError("reset by peer"), ErrorKind.NETWORK),
    (ConnectionRefusedError(), ErrorKind.NETWORK),
    (ValueError("bad slug"), ErrorKind.UNKNOWN),
    (KeyError("id"), ErrorKind.UNKNOWN),
])
def test_error_info_by_type(exc: BaseException, kind: ErrorKind) -> None:
    assert error_info(exc).kind == kind


def test_error_info_ignores_message_text() -> None:
    # A message mentioning a transient condition does not make it transient
    assert error_info(RuntimeError("Connection closed ECONNRESET")).kind == ErrorKind.UNKNOWN
    assert classify_store(RuntimeError("P1001 Connection closed")) == PERM


@pytest.mark.parametrize("exc,message", [
    (ValueError("   "), "ValueError"),
    (RuntimeError("\n"), "RuntimeError"),
    (TimeoutError("\t"), "operation timed out"),
    (ConnectionResetError(" "), "connection reset"),
])
def test_error_info_tolerates_blank_messages(exc: BaseException, message: str) -> None:
    assert error_info(exc).message == message
    assert classify_http(exc) == (RETRY if isinstance(exc, OSError) else PERM)


def test_blank_call_error_message_replaced() -> None:
    assert CallError.create(ErrorKind.NETWORK, " \n ").info.message == "unknown error"


def test_nonstandard_status_kept() -> None:
    err = http_error(999)
    assert err.status == 999
    assert not err.info.is_server_error
    assert classify_http(err) == PERM


def test_http_status_error_carries_response() -> None:
    err = http_error(503)
    assert err.status == 503
    assert err.info.is_server_error
    assert err.response is not None and err.response.status_code == 503
    assert "503" in str(err)


def test_error_info_str_includes_kind_and_code() -> None:
    info = ErrorInfo(kind=ErrorKind.STORE, code="P1001", message="Can't reach database server")
    assert str(info) == "Can't reach database server [STORE:P1001]"


# ═════════════════════════════════════════════════════════════════════════════
# HTTP classifier
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.parametrize("status", [500, 502, 503, 504, 599])
def test_http_5xx_retryable(status: int) -> None:
    assert classify_http(http_error(status)) == RETRY


@pytest.mark.parametrize("status", [400, 401, 403, 404, 409, 422, 429, 499])
def test_http_4xx_permanent(status: int) -> None:
    assert classify_http(http_error(status)) == PERM


@pytest.mark.parametrize("exc", [
    httpx.ConnectError("fetch failed", request=_REQUEST),
    httpx.ReadTimeout("timed out", request=_REQUEST),
    AttemptTimeout.after(10.0),
    ConnectionResetError(),
])
def test_http_transport_errors_retryable(exc: BaseException) -> None:
    assert classify_http(exc) == RETRY


def test_http_unknown_shape_fails_closed() -> None:
    assert classify_http(ValueError("unexpected")) == PERM
    assert classify_http(StoreError.from_code("P1001", "unreachable")) == PERM


# ═════════════════════════════════════════════════════════════════════════════
# Store classifier
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.parametrize("code", ["P1001", "P1008", "P1017", "CONNECTION_CLOSED", "ECONNRESET", "ETIMEDOUT"])
def test_store_transient_codes_retryable(code: str) -> None:
    assert classify_store(StoreError.from_code(code, "transient")) == RETRY


@pytest.mark.parametrize("code", ["P2002", "P2025", "P2003", "P2000"])
def test_store_data_errors_permanent(code: str) -> None:
    assert classify_store(StoreError.from_code(code, "data error")) == PERM


def test_store_builtin_connection_errors_retryable() -> None:
    assert classify_store(ConnectionResetError()) == RETRY
    assert classify_store(TimeoutError()) == RETRY
    assert classify_store(AttemptTimeout.after(1.0)) == RETRY


def test_store_unknown_fails_closed() -> None:
    assert classify_store(ValueError("validation failed")) == PERM
    assert classify_store(http_error(503)) == PERM


# ═════════════════════════════════════════════════════════════════════════════
# Query classifier
# ═════════════════════════════════════════════════════════════════════════════


def test_query_4xx_rejected_first() -> None:
    for status in (400, 404, 429):
        assert classify_query(http_error(status)) == PERM


def test_query_follows_http_rule() -> None:
    assert classify_query(http_error(503)) == RETRY
    assert classify_query(httpx.ConnectError("fetch failed", request=_REQUEST)) == RETRY
    assert classify_query(AttemptTimeout.after(1.0)) == RETRY
    assert classify_query(ValueError("boom")) == PERM


def test_query_accepts_surfaced_store_connection_codes() -> None:
    assert classify_query(StoreError.from_code("CONNECTION_CLOSED", "Connection closed")) == RETRY
    assert classify_query(StoreError.from_code("P2002", "duplicate")) == PERM


def test_classification_is_idempotent() -> None:
    errors: list[BaseException] = [
        http_error(503), http_error(404), StoreError.from_code("P1001", "x"),
        CallError.create(ErrorKind.UNKNOWN, "y"), ValueError("z"),
    ]
    for classify in (classify_http, classify_store, classify_query, never_retry):
        for err in errors:
            assert classify(err) == classify(err)


def test_never_retry() -> None:
    assert never_retry(http_error(503)) == PERM
