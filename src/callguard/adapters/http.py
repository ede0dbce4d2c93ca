"""HTTP adapter - outbound requests with per-attempt timeout and retry.

- Each attempt issues a fresh request under its own deadline
- 5xx responses are discarded and retried from scratch
- 4xx responses are returned as-is (no exception, no retry) so callers can
  read the body
- Transport errors and timeouts are retried; the last error propagates
  unchanged after the budget is spent

Example:
    >>> async with HttpAdapter() as http:
    ...     response = await http.fetch("https://api.example.com/offers")
    ...     if response.status_code == 404:
    ...         ...
    >>>
    >>> api = ApiClient(HttpAdapter(base_url="https://api.example.com"))
    >>> offers = await api.get("/offers")
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Literal

import httpx
import orjson

from callguard.foundation.config import get_settings
from callguard.foundation.errors import HttpStatusError
from callguard.runtime.retry import RetryPolicy, classify_http, execute

if TYPE_CHECKING:
    from types import TracebackType

    from callguard.runtime.retry import Sleep

logger = logging.getLogger("callguard.http")

HttpMethod = Literal["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"]


def default_http_policy() -> RetryPolicy:
    """Policy from CALLGUARD_HTTP_* settings: 3 attempts, 1s base, 30s cap, 10s per attempt."""
    s = get_settings().http
    return RetryPolicy.from_options(
        retries=s.retries,
        retry_delay_ms=s.retry_delay_ms,
        max_delay_ms=s.max_delay_ms,
        per_attempt_timeout_ms=s.per_attempt_timeout_ms,
    )


class HttpAdapter:
    """Retrying wrapper around an httpx.AsyncClient.

    Args:
        client: Client to use; one is created lazily (and owned) when omitted
        policy: Retry policy; defaults to default_http_policy()
        default_headers: Merged under caller headers on every request
        base_url: Base URL for an owned client
        sleep: Backoff suspension (injectable for tests)
    """

    __slots__ = ("policy", "default_headers", "_client", "_owns_client", "_base_url", "_sleep")

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        policy: RetryPolicy | None = None,
        *,
        default_headers: dict[str, str] | None = None,
        base_url: str = "",
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.policy = policy or default_http_policy()
        self.default_headers = {"Content-Type": get_settings().http.content_type, **(default_headers or {})}
        self._client = client
        self._owns_client = client is None
        self._base_url = base_url
        self._sleep = sleep

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            # Deadlines come from the retry policy, not from httpx
            self._client = httpx.AsyncClient(base_url=self._base_url, timeout=None, follow_redirects=True)
        return self._client

    async def aclose(self) -> None:
        """Close the client if this adapter created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> HttpAdapter:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    def merge_headers(self, headers: dict[str, str] | None) -> dict[str, str]:
        """Defaults first, caller headers win."""
        return {**self.default_headers, **(headers or {})}

    async def fetch(
        self,
        url: str,
        *,
        method: HttpMethod = "GET",
        headers: dict[str, str] | None = None,
        json: Any = None,
        content: str | bytes | None = None,
        policy: RetryPolicy | None = None,
    ) -> httpx.Response:
        """Send a request with retries.

        Returns the response for 2xx and every non-retryable status (4xx included).
        Raises HttpStatusError for a 5xx that survives the whole budget, or the
        last transport/timeout error.
        """
        merged = self.merge_headers(headers)
        body = orjson.dumps(json) if json is not None else content
        client = await self._get_client()

        async def attempt() -> httpx.Response:
            response = await client.request(method, url, headers=merged, content=body)
            if response.is_server_error:
                await response.aclose()
                raise HttpStatusError.from_response(response)
            return response

        response = await execute(attempt, policy or self.policy, classify_http, sleep=self._sleep, label=f"{method} {url}")
        if response.is_client_error:
            logger.debug(f"[{method} {url}] Returned {response.status_code} without retry")
        return response

    async def request_json(
        self,
        url: str,
        *,
        method: HttpMethod = "GET",
        headers: dict[str, str] | None = None,
        json: Any = None,
        policy: RetryPolicy | None = None,
    ) -> Any:
        """Fetch and decode a JSON body; any non-2xx becomes HttpStatusError.

        The error message is the body's "error" field when the server sent one.
        """
        try:
            response = await self.fetch(url, method=method, headers=headers, json=json, policy=policy)
        except Exception as e:
            logger.error(f"API request failed for {url}: {e}")
            raise

        if not response.is_success:
            raise HttpStatusError.from_response(response, _error_message(response))
        return orjson.loads(response.content) if response.content else None


def _error_message(response: httpx.Response) -> str | None:
    try:
        payload = orjson.loads(response.content)
    except orjson.JSONDecodeError:
        return None
    if isinstance(payload, dict) and isinstance(payload.get("error"), str) and payload["error"]:
        return payload["error"]
    return None


class ApiClient:
    """Verb helpers over HttpAdapter.request_json.

    Example:
        >>> api = ApiClient(HttpAdapter(base_url="http://localhost:3000/api"))
        >>> await api.post("/offers", {"title": "Cancun 5D/4N"})
    """

    __slots__ = ("http",)

    def __init__(self, http: HttpAdapter | None = None) -> None:
        self.http = http or HttpAdapter()

    async def get(self, endpoint: str, *, policy: RetryPolicy | None = None) -> Any:
        return await self.http.request_json(endpoint, method="GET", policy=policy)

    async def post(self, endpoint: str, data: Any, *, policy: RetryPolicy | None = None) -> Any:
        return await self.http.request_json(endpoint, method="POST", json=data, policy=policy)

    async def put(self, endpoint: str, data: Any, *, policy: RetryPolicy | None = None) -> Any:
        return await self.http.request_json(endpoint, method="PUT", json=data, policy=policy)

    async def patch(self, endpoint: str, data: Any, *, policy: RetryPolicy | None = None) -> Any:
        return await self.http.request_json(endpoint, method="PATCH", json=data, policy=policy)

    async def delete(self, endpoint: str, *, policy: RetryPolicy | None = None) -> Any:
        return await self.http.request_json(endpoint, method="DELETE", policy=policy)
