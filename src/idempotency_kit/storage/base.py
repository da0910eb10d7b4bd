"""Store adapter protocol for idempotency middleware.

The coordinator talks to its store through three operations only. Each
concrete adapter translates them to one key-value store calling convention:

    read(key) -> IdempotencyRecord | None
    write(key, record, ttl)                   unconditional upsert
    write_if_absent(key, record, ttl) -> bool atomic set-if-not-exists

``write_if_absent`` is what keeps two concurrent requests from both
executing. It must be a single atomic operation at the store level, never a
read followed by a write from the adapter's side.

Adapters receive the client's raw idempotency key and namespace it with
:func:`storage_key` before touching the backing store.

Examples:
    Implementing a custom store adapter::

        from idempotency_kit.models import IdempotencyRecord
        from idempotency_kit.storage.base import StoreAdapter, storage_key

        class DictStoreAdapter:
            def __init__(self) -> None:
                self.data: dict[str, IdempotencyRecord] = {}

            async def read(self, key: str) -> IdempotencyRecord | None:
                return self.data.get(storage_key(key))

            async def write(self, key, record, ttl) -> None:
                self.data[storage_key(key)] = record

            async def write_if_absent(self, key, record, ttl) -> bool:
                return self.data.setdefault(storage_key(key), record) is record
"""

import inspect
from typing import Any, Protocol, runtime_checkable

from idempotency_kit.models import IdempotencyRecord

KEY_PREFIX = "idempotency:"


def storage_key(key: str) -> str:
    """Return the store key for a client-supplied idempotency key.

    Examples:
        >>> storage_key("payment-123")
        'idempotency:payment-123'
    """
    return f"{KEY_PREFIX}{key}"


async def resolve(value: Any) -> Any:
    """Await ``value`` if the backing store returned a coroutine.

    Lets one adapter wrap both synchronous clients (``redis.Redis``) and
    asynchronous ones (``redis.asyncio.Redis``).
    """
    if inspect.isawaitable(value):
        return await value
    return value


@runtime_checkable
class StoreAdapter(Protocol):
    """Protocol defining the uniform store contract used by the coordinator.

    Error Handling:
        Adapters propagate failures of the backing store (wrapped in
        StorageError where the adapter knows the backend's error types).
        They must never report a write as successful when it was not.
    """

    async def read(self, key: str) -> IdempotencyRecord | None:
        """Retrieve the record for an idempotency key.

        Args:
            key: The client-supplied idempotency key.

        Returns:
            The record if present and not expired, None otherwise.
        """
        ...

    async def write(self, key: str, record: IdempotencyRecord, ttl: int) -> None:
        """Store ``record`` under ``key`` unconditionally, expiring after ``ttl`` seconds."""
        ...

    async def write_if_absent(self, key: str, record: IdempotencyRecord, ttl: int) -> bool:
        """Atomically store ``record`` only if ``key`` does not exist.

        Returns:
            True if the record was written, False if the key already existed
            (in which case nothing is modified).
        """
        ...
