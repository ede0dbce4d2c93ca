"""callguard - resilient remote calls for asyncio services.

One retry engine, three call-site configurations:

- HTTP: per-attempt timeout, 5xx/network retried, 4xx returned as-is
- Database: connection-loss and timeout driver codes retried
- Query cache: 3 attempts for reads, 2 for mutations

Quick Start:
    >>> from callguard import RetryPolicy, classify_http, execute
    >>>
    >>> policy = RetryPolicy(max_attempts=3, base_delay=1.0, max_delay=30.0, per_attempt_timeout=10.0)
    >>> data = await execute(lambda: fetch_offers(), policy, classify_http)

Adapters:
    >>> from callguard import HttpAdapter, DatabaseAdapter, QueryClient
    >>>
    >>> async with HttpAdapter() as http:
    ...     response = await http.fetch("https://api.example.com/destinations")
    >>>
    >>> db = DatabaseAdapter(store)
    >>> count = await db.count(store.offer)
    >>>
    >>> queries = QueryClient()
    >>> tags = await queries.fetch_query("tags", lambda: api.get("/tags"))

Failures are never translated or wrapped: the caller receives the original
exception (CallError subclasses carry a structured ErrorInfo).
"""

from .foundation import (
    CallguardSettings,
    CallError,
    Err,
    ErrorInfo,
    ErrorKind,
    Ok,
    Result,
    error_info,
    get_settings,
)
from .foundation.errors import AttemptOutcome, AttemptTimeout, HttpStatusError, StoreError
from .runtime import configure_logging
from .runtime.retry import (
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
    execute_traced,
    execute_with_policy,
    retrying,
    schedule,
)
from .adapters import (
    QUERY_PRESETS,
    ApiClient,
    DatabaseAdapter,
    HttpAdapter,
    QueryClient,
    QueryOptions,
)

__version__ = "0.1.0"

__all__ = [
    # Errors
    "ErrorKind", "ErrorInfo", "error_info",
    "CallError", "HttpStatusError", "StoreError", "AttemptTimeout",
    "Result", "Ok", "Err", "AttemptOutcome",
    # Config
    "CallguardSettings", "get_settings", "configure_logging",
    # Engine
    "RetryPolicy", "NO_RETRY", "ExponentialBackoff", "delay_for", "schedule",
    "Classification", "ErrorClassifier", "classify_http", "classify_store", "classify_query",
    "execute", "execute_with_policy", "execute_result", "execute_traced", "retrying",
    # Adapters
    "HttpAdapter", "ApiClient", "DatabaseAdapter", "QueryClient", "QueryOptions", "QUERY_PRESETS",
]
