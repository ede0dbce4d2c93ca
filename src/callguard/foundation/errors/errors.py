"""Structured error kinds for remote calls.

Errors are normalized once, at the boundary where they are raised, into an
ErrorInfo record. Classifiers match on ErrorInfo.kind and codes, never on
message text.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Self

import httpx
from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator


class ErrorKind(StrEnum):
    """Closed set of failure shapes produced at the call boundary."""
    NETWORK = "NETWORK"
    TIMEOUT = "TIMEOUT"
    ABORTED = "ABORTED"
    HTTP_STATUS = "HTTP_STATUS"
    STORE = "STORE"
    UNKNOWN = "UNKNOWN"


class ErrorInfo(BaseModel):
    """Structured description of a failed attempt.

    Attributes:
        kind: Failure shape (network, timeout, HTTP status, store driver...)
        message: Human-readable message, kept verbatim from the source error
        code: Driver or protocol code (e.g. "P1001", "ECONNRESET")
        status: HTTP status code for HTTP_STATUS errors
        details: Optional extra context (exception type name, body excerpt)
    """

    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        extra="forbid",
        revalidate_instances="never",
        json_schema_extra={
            "title": "Error Info",
            "examples": [{"kind": "HTTP_STATUS", "status": 503, "message": "HTTP 503: Service Unavailable"}],
        },
    )

    kind: ErrorKind = ErrorKind.UNKNOWN
    message: Annotated[str, Field(min_length=1)]
    code: str | None = None
    status: int | None = Field(default=None, ge=100)
    details: str | None = Field(default=None, repr=False)

    @field_validator("message", mode="before")
    @classmethod
    def _ensure_message(cls, v: object) -> str:
        """Accept exceptions and blank messages."""
        text = str(v) if v is not None else ""
        return text.strip() or "unknown error"

    @computed_field
    @property
    def is_client_error(self) -> bool:
        return self.status is not None and 400 <= self.status < 500

    @computed_field
    @property
    def is_server_error(self) -> bool:
        return self.status is not None and 500 <= self.status < 600

    def __str__(self) -> str:
        tag = self.code or (str(self.status) if self.status is not None else None)
        return f"{self.message} [{self.kind}{':' + tag if tag else ''}]"


class CallError(Exception):
    """Exception carrying an ErrorInfo.

    Raised by adapters at the boundary so downstream classification reads a
    structured record instead of probing attributes.
    """

    __slots__ = ("info",)

    def __init__(self, info: ErrorInfo) -> None:
        self.info = info
        super().__init__(info.message)

    @classmethod
    def create(cls, kind: ErrorKind, message: str, *, code: str | None = None, status: int | None = None) -> Self:
        return cls(ErrorInfo(kind=kind, message=message, code=code, status=status))


class HttpStatusError(CallError):
    """Non-2xx HTTP response surfaced as an error."""

    __slots__ = ("response",)

    def __init__(self, info: ErrorInfo, response: httpx.Response | None = None) -> None:
        super().__init__(info)
        self.response = response

    @classmethod
    def from_response(cls, response: httpx.Response, message: str | None = None) -> Self:
        return cls(
            ErrorInfo(
                kind=ErrorKind.HTTP_STATUS,
                status=response.status_code,
                message=message or f"HTTP {response.status_code}: {response.reason_phrase}",
            ),
            response,
        )

    @property
    def status(self) -> int:
        return self.info.status or 0


class StoreError(CallError):
    """Data-store driver failure with a driver error code.

    Example:
        >>> raise StoreError.from_code("P2002", "Unique constraint failed on slug")
    """

    @classmethod
    def from_code(cls, code: str, message: str) -> Self:
        return cls(ErrorInfo(kind=ErrorKind.STORE, code=code, message=message))

    @property
    def code(self) -> str | None:
        return self.info.code


class AttemptTimeout(CallError):
    """Raised when a single attempt exceeds its per-attempt deadline."""

    @classmethod
    def after(cls, seconds: float) -> Self:
        return cls(ErrorInfo(kind=ErrorKind.ABORTED, code="ATTEMPT_TIMEOUT", message=f"Attempt aborted after {seconds:g}s"))


def _text(exc: BaseException, fallback: str) -> str:
    return str(exc).strip() or fallback


def error_info(exc: BaseException) -> ErrorInfo:
    """Normalize an exception into ErrorInfo by its type, never by message text."""
    if isinstance(exc, CallError):
        return exc.info

    name = type(exc).__name__
    if isinstance(exc, httpx.TimeoutException):
        return ErrorInfo(kind=ErrorKind.TIMEOUT, message=_text(exc, "request timed out"), details=name)
    if isinstance(exc, httpx.TransportError):
        return ErrorInfo(kind=ErrorKind.NETWORK, message=_text(exc, "fetch failed"), details=name)
    if isinstance(exc, httpx.HTTPStatusError):
        return ErrorInfo(kind=ErrorKind.HTTP_STATUS, status=exc.response.status_code, message=_text(exc, "HTTP error"), details=name)

    if isinstance(exc, TimeoutError):
        return ErrorInfo(kind=ErrorKind.TIMEOUT, code="ETIMEDOUT", message=_text(exc, "operation timed out"), details=name)
    if isinstance(exc, ConnectionResetError):
        return ErrorInfo(kind=ErrorKind.NETWORK, code="ECONNRESET", message=_text(exc, "connection reset"), details=name)
    if isinstance(exc, ConnectionError):
        return ErrorInfo(kind=ErrorKind.NETWORK, message=_text(exc, "connection closed"), details=name)
    return ErrorInfo(kind=ErrorKind.UNKNOWN, message=_text(exc, name), details=name)
