"""Database adapter - retry for data-store operations issued from request handlers.

Every operation kind (point read, bulk read, write, upsert, count,
transaction, raw query) runs under the same policy and classify_store.
Reads and writes are not distinguished: a write that failed with an
ambiguous connection error is retried without an idempotency guarantee.

The store itself is external. Drivers are expected to raise StoreError with
their error code; builtin ConnectionError/TimeoutError are also understood.

Example:
    >>> db = DatabaseAdapter(store)
    >>> offer = await db.find_unique(store.offer, {"where": {"id": 7}})
    >>> await db.transaction(lambda tx: tx.offer.update({"where": {"id": 7}, "data": {...}}))
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Mapping, Protocol, TypeVar, runtime_checkable

from callguard.foundation.config import get_settings
from callguard.runtime.retry import RetryPolicy, classify_store, execute

if TYPE_CHECKING:
    from callguard.runtime.retry import Operation, Sleep

logger = logging.getLogger("callguard.db")

T = TypeVar("T")
Args = Mapping[str, Any]


@runtime_checkable
class StoreModel(Protocol):
    """One model/table of the external store."""

    async def find_unique(self, args: Args) -> Any: ...
    async def find_many(self, args: Args) -> list[Any]: ...
    async def create(self, args: Args) -> Any: ...
    async def update(self, args: Args) -> Any: ...
    async def delete(self, args: Args) -> Any: ...
    async def upsert(self, args: Args) -> Any: ...
    async def count(self, args: Args) -> int: ...


@runtime_checkable
class StoreClient(Protocol):
    """Connection-level capabilities of the external store."""

    async def transaction(self, fn: Callable[[Any], Awaitable[T]]) -> T: ...
    async def query_raw(self, query: str, *params: Any) -> Any: ...
    async def disconnect(self) -> None: ...


def default_db_policy() -> RetryPolicy:
    s = get_settings().db
    return RetryPolicy.from_options(
        retries=s.retries,
        retry_delay_ms=s.retry_delay_ms,
        max_delay_ms=s.max_delay_ms,
        per_attempt_timeout_ms=s.per_attempt_timeout_ms,
    )


def health_check_policy() -> RetryPolicy:
    """2 attempts, 500ms base: a connectivity probe should answer quickly."""
    s = get_settings().db
    return RetryPolicy.from_options(retries=s.health_check_retries, retry_delay_ms=s.health_check_delay_ms)


def _model_name(model: object) -> str:
    return str(getattr(model, "name", None) or type(model).__name__)


class DatabaseAdapter:
    """Uniform retry wrapper for store operations.

    Args:
        client: Store connection (transactions, raw queries, disconnect)
        policy: Retry policy; defaults to default_db_policy()
        sleep: Backoff suspension (injectable for tests)
    """

    __slots__ = ("client", "policy", "_sleep")

    def __init__(self, client: StoreClient, policy: RetryPolicy | None = None, *, sleep: Sleep = asyncio.sleep) -> None:
        self.client = client
        self.policy = policy or default_db_policy()
        self._sleep = sleep

    async def run(self, operation: Operation[T], *, policy: RetryPolicy | None = None, label: str = "db") -> T:
        """Run any store operation under the adapter's policy and classify_store."""
        return await execute(operation, policy or self.policy, classify_store, sleep=self._sleep, label=label)

    # ─────────────────────────────────────────────────────────────────
    # Model operations
    # ─────────────────────────────────────────────────────────────────

    async def find_unique(self, model: StoreModel, args: Args) -> Any:
        return await self.run(lambda: model.find_unique(args), label=f"{_model_name(model)}.find_unique")

    async def find_many(self, model: StoreModel, args: Args | None = None) -> list[Any]:
        return await self.run(lambda: model.find_many(args or {}), label=f"{_model_name(model)}.find_many")

    async def create(self, model: StoreModel, args: Args) -> Any:
        return await self.run(lambda: model.create(args), label=f"{_model_name(model)}.create")

    async def update(self, model: StoreModel, args: Args) -> Any:
        return await self.run(lambda: model.update(args), label=f"{_model_name(model)}.update")

    async def delete(self, model: StoreModel, args: Args) -> Any:
        return await self.run(lambda: model.delete(args), label=f"{_model_name(model)}.delete")

    async def upsert(self, model: StoreModel, args: Args) -> Any:
        return await self.run(lambda: model.upsert(args), label=f"{_model_name(model)}.upsert")

    async def count(self, model: StoreModel, args: Args | None = None) -> int:
        return await self.run(lambda: model.count(args or {}), label=f"{_model_name(model)}.count")

    # ─────────────────────────────────────────────────────────────────
    # Connection operations
    # ─────────────────────────────────────────────────────────────────

    async def transaction(self, fn: Callable[[Any], Awaitable[T]]) -> T:
        """Retry the whole transaction; fn is re-run from the start on each attempt."""
        return await self.run(lambda: self.client.transaction(fn), label="transaction")

    async def raw(self, query: str, *params: Any) -> Any:
        return await self.run(lambda: self.client.query_raw(query, *params), label="raw")

    async def check_connection(self) -> bool:
        """Probe with SELECT 1. False when the store stays unreachable."""
        try:
            await self.run(lambda: self.client.query_raw("SELECT 1"), policy=health_check_policy(), label="health_check")
        except Exception as e:
            logger.error(f"Database connection check failed: {e}")
            return False
        return True

    async def disconnect(self) -> None:
        """Close the store connection. Failures are logged, not raised."""
        try:
            await self.client.disconnect()
        except Exception:
            logger.exception("Error disconnecting from database")
            return
        logger.info("Database disconnected gracefully")
