"""Foundation layer: structured errors and configuration."""

from .config import CallguardSettings, get_settings
from .errors import CallError, ErrorInfo, ErrorKind, Err, Ok, Result, error_info

__all__ = [
    "CallguardSettings", "get_settings",
    "CallError", "ErrorInfo", "ErrorKind", "error_info",
    "Result", "Ok", "Err",
]
