"""Cache-query adapter - client-side query cache with separate read/write retry budgets.

Reads (fetch_query) get 3 attempts with backoff capped at 30s. Mutations
get 2 attempts capped at 10s, since retrying a write is riskier. Both use
classify_query, which rejects 4xx before anything else.

Cached query data is served until it goes stale, and dropped after its gc
time. Keys are tuples; a plain string key is treated as a 1-tuple.

Example:
    >>> queries = QueryClient()
    >>> offers = await queries.fetch_query(("offers", "active"), lambda: api.get("/offers"),
    ...                                    QUERY_PRESETS["dynamic"])
    >>> await queries.mutate(lambda: api.post("/offers", data), invalidates=[("offers",)])
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Hashable, Iterable, TypeVar

from callguard.foundation.config import get_settings
from callguard.runtime.retry import RetryPolicy, classify_query, execute

if TYPE_CHECKING:
    from callguard.runtime.retry import Operation, Sleep

logger = logging.getLogger("callguard.query")

T = TypeVar("T")
QueryKey = tuple[Hashable, ...]


@dataclass(frozen=True, slots=True)
class QueryOptions:
    """Per-query cache behavior. Times are in seconds.

    Attributes:
        stale_time: Age after which cached data is refetched
        gc_time: Age after which cached data is dropped
        refetch_interval: Suggested polling interval for UI hooks, if any
        refetch_on_window_focus: Hint for UI hooks
        refetch_on_reconnect: Hint for UI hooks
        refetch_on_mount: Hint for UI hooks
        retries: Attempt budget override for this query (None = client default)
    """
    stale_time: float = 5 * 60
    gc_time: float = 10 * 60
    refetch_interval: float | None = None
    refetch_on_window_focus: bool = False
    refetch_on_reconnect: bool = True
    refetch_on_mount: bool = True
    retries: int | None = None


QUERY_PRESETS: dict[str, QueryOptions] = {
    # Data that changes frequently
    "dynamic": QueryOptions(stale_time=30, gc_time=2 * 60, refetch_interval=60),
    # Relatively stable data
    "stable": QueryOptions(stale_time=10 * 60, gc_time=30 * 60),
    # Static data
    "static": QueryOptions(stale_time=60 * 60, gc_time=24 * 60 * 60),
    # User-specific data
    "user": QueryOptions(stale_time=5 * 60, gc_time=15 * 60, refetch_on_window_focus=True),
}


@dataclass(slots=True)
class QueryEntry:
    """Cached data for one key."""
    data: Any
    updated_at: float
    stale_time: float
    gc_time: float
    invalidated: bool = False

    def is_stale(self, now: float) -> bool:
        return self.invalidated or now - self.updated_at >= self.stale_time

    def is_expired(self, now: float) -> bool:
        return now - self.updated_at >= self.gc_time


def default_query_policy() -> RetryPolicy:
    s = get_settings().query
    return RetryPolicy.from_options(retries=s.query_retries, retry_delay_ms=s.retry_delay_ms, max_delay_ms=s.query_max_delay_ms)


def default_mutation_policy() -> RetryPolicy:
    s = get_settings().query
    return RetryPolicy.from_options(retries=s.mutation_retries, retry_delay_ms=s.retry_delay_ms, max_delay_ms=s.mutation_max_delay_ms)


def _key(key: Hashable | QueryKey) -> QueryKey:
    return key if isinstance(key, tuple) else (key,)


class QueryClient:
    """In-memory query cache whose fetches and mutations retry.

    Meant to be used from a single event loop; holds no locks.

    Args:
        query_policy: Read policy (default 3 attempts, 30s cap)
        mutation_policy: Write policy (default 2 attempts, 10s cap)
        default_options: Cache options for queries that pass none
        clock: Monotonic time source in seconds
        sleep: Backoff suspension (injectable for tests)
    """

    def __init__(
        self,
        *,
        query_policy: RetryPolicy | None = None,
        mutation_policy: RetryPolicy | None = None,
        default_options: QueryOptions | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.query_policy = query_policy or default_query_policy()
        self.mutation_policy = mutation_policy or default_mutation_policy()
        if default_options is None:
            s = get_settings().query
            default_options = QueryOptions(stale_time=s.stale_time_ms / 1000, gc_time=s.gc_time_ms / 1000)
        self.default_options = default_options
        self._clock = clock
        self._sleep = sleep
        self._entries: dict[QueryKey, QueryEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    # ─────────────────────────────────────────────────────────────────
    # Reads
    # ─────────────────────────────────────────────────────────────────

    async def fetch_query(self, key: Hashable | QueryKey, fn: Operation[T], options: QueryOptions | None = None) -> T:
        """Return fresh cached data, or fetch under the read policy and cache the result."""
        k = _key(key)
        opts = options or self.default_options
        entry = self._entries.get(k)
        if entry is not None and not entry.is_stale(self._clock()):
            return entry.data

        policy = self.query_policy if opts.retries is None else self.query_policy.with_overrides(max_attempts=opts.retries)
        try:
            data = await execute(fn, policy, classify_query, sleep=self._sleep, label=f"query {k!r}")
        except Exception as e:
            logger.error(f"Query {k!r} failed: {e}")
            raise
        self._entries[k] = QueryEntry(data, self._clock(), opts.stale_time, opts.gc_time)
        return data

    def get_query_data(self, key: Hashable | QueryKey) -> Any:
        """Cached data (stale or not) unless it has been garbage collected."""
        entry = self._entries.get(_key(key))
        if entry is None or entry.is_expired(self._clock()):
            return None
        return entry.data

    def set_query_data(self, key: Hashable | QueryKey, data: Any, options: QueryOptions | None = None) -> None:
        opts = options or self.default_options
        self._entries[_key(key)] = QueryEntry(data, self._clock(), opts.stale_time, opts.gc_time)

    def invalidate_queries(self, prefix: Hashable | QueryKey = ()) -> int:
        """Mark every entry whose key starts with prefix as stale. Returns count."""
        p = _key(prefix)
        hits = [e for k, e in self._entries.items() if k[:len(p)] == p]
        for entry in hits:
            entry.invalidated = True
        return len(hits)

    def remove_expired(self) -> int:
        """Drop entries older than their gc time. Returns count removed."""
        now = self._clock()
        expired = [k for k, e in self._entries.items() if e.is_expired(now)]
        for k in expired:
            del self._entries[k]
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()

    # ─────────────────────────────────────────────────────────────────
    # Writes
    # ─────────────────────────────────────────────────────────────────

    async def mutate(
        self,
        fn: Operation[T],
        *,
        invalidates: Iterable[Hashable | QueryKey] = (),
        retries: int | None = None,
    ) -> T:
        """Run a write under the mutation policy, then invalidate the given key prefixes."""
        policy = self.mutation_policy if retries is None else self.mutation_policy.with_overrides(max_attempts=retries)
        try:
            result = await execute(fn, policy, classify_query, sleep=self._sleep, label="mutation")
        except Exception as e:
            logger.error(f"Mutation failed: {e}")
            raise
        for prefix in invalidates:
            self.invalidate_queries(prefix)
        return result
