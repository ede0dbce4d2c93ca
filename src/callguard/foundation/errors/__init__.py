"""Structured errors and the Result sum type.

- ErrorKind/ErrorInfo: closed set of failure shapes, normalized at the boundary
- CallError and subclasses: exceptions carrying an ErrorInfo
- Result/Ok/Err: terminal outcome of a call
- AttemptOutcome: record of a single attempt
"""

from .errors import (
    AttemptTimeout,
    CallError,
    ErrorInfo,
    ErrorKind,
    HttpStatusError,
    StoreError,
    error_info,
)
from .result import AttemptOutcome, Err, Ok, Result

__all__ = [
    # Error shapes
    "ErrorKind", "ErrorInfo", "error_info",
    # Exceptions
    "CallError", "HttpStatusError", "StoreError", "AttemptTimeout",
    # Results
    "Result", "Ok", "Err", "AttemptOutcome",
]
