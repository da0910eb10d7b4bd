"""Adapter for cache-style stores.

A cache-style store exposes ``read(key)`` and
``write(key, value, expires_in=..., unless_exist=...)``. The in-process
:class:`~idempotency_kit.storage.memory.MemoryCache` follows this
convention, as do most framework cache abstractions.

Records are handed to the cache as plain dicts and validated back into
:class:`IdempotencyRecord` on read, so caches that pickle or copy values
behave the same as ones that keep references.
"""

from typing import Any

from idempotency_kit.models import IdempotencyRecord
from idempotency_kit.storage.base import resolve, storage_key


class CacheStoreAdapter:
    """Store adapter over a ``read``/``write`` cache."""

    def __init__(self, cache: Any) -> None:
        self.cache = cache

    async def read(self, key: str) -> IdempotencyRecord | None:
        value = await resolve(self.cache.read(storage_key(key)))
        if value is None:
            return None
        return IdempotencyRecord.model_validate(value)

    async def write(self, key: str, record: IdempotencyRecord, ttl: int) -> None:
        await resolve(self.cache.write(storage_key(key), record.model_dump(), expires_in=ttl))

    async def write_if_absent(self, key: str, record: IdempotencyRecord, ttl: int) -> bool:
        written = await resolve(
            self.cache.write(
                storage_key(key),
                record.model_dump(),
                expires_in=ttl,
                unless_exist=True,
            )
        )
        return bool(written)
