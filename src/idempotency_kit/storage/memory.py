"""In-memory cache-style store with TTL expiry.

This module provides MemoryCache, a process-local key-value cache following
the cache-style calling convention (``read``/``write`` with ``expires_in``
and ``unless_exist``). It is wrapped by CacheStoreAdapter like any other
cache-style store.

The MemoryCache is suitable for:
    - Single-process applications
    - Development and testing

For multiple processes or hosts, use a Redis client with RedisStoreAdapter.

Thread Safety:
    - Writes are serialized by an asyncio.Lock, so ``unless_exist`` is atomic
      among coroutines sharing one event loop
    - Expired entries read as absent and are dropped lazily or by
      cleanup_expired()

Examples:
    Basic usage::

        from idempotency_kit.storage.memory import MemoryCache

        cache = MemoryCache()
        await cache.write("greeting", "hello", expires_in=60)
        assert await cache.read("greeting") == "hello"

        # Conditional write only succeeds for absent keys
        assert await cache.write("greeting", "bye", unless_exist=True) is False
"""

import asyncio
import time
from collections.abc import Callable
from typing import Any, NamedTuple


class _Entry(NamedTuple):
    value: Any
    expires_at: float | None


class MemoryCache:
    """In-process cache with per-entry expiry.

    Attributes:
        _store: Dictionary mapping keys to entries.
        _lock: Lock serializing writes.
        _clock: Monotonic time source, injectable for tests.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        """Initialize an empty cache.

        Args:
            clock: Function returning the current monotonic time in seconds.
        """
        self._store: dict[str, _Entry] = {}
        self._lock = asyncio.Lock()
        self._clock = clock

    def __len__(self) -> int:
        return len(self._store)

    def _is_expired(self, entry: _Entry, now: float) -> bool:
        return entry.expires_at is not None and entry.expires_at <= now

    def _live_entry(self, key: str) -> _Entry | None:
        entry = self._store.get(key)
        if entry is None:
            return None
        if self._is_expired(entry, self._clock()):
            del self._store[key]
            return None
        return entry

    async def read(self, key: str) -> Any:
        """Return the value stored under ``key``, or None if absent or expired."""
        entry = self._live_entry(key)
        return None if entry is None else entry.value

    async def write(
        self,
        key: str,
        value: Any,
        expires_in: float | None = None,
        unless_exist: bool = False,
    ) -> bool:
        """Store ``value`` under ``key``.

        Args:
            key: Cache key.
            value: Value to store.
            expires_in: Seconds until the entry expires. None keeps it forever.
            unless_exist: Only write if no live entry exists for ``key``.

        Returns:
            True if the value was written, False if ``unless_exist`` blocked it.
        """
        async with self._lock:
            if unless_exist and self._live_entry(key) is not None:
                return False

            expires_at = None if expires_in is None else self._clock() + expires_in
            self._store[key] = _Entry(value=value, expires_at=expires_at)
            return True

    async def delete(self, key: str) -> bool:
        """Remove ``key``. Returns True if a live entry was removed."""
        async with self._lock:
            entry = self._live_entry(key)
            if entry is None:
                return False
            del self._store[key]
            return True

    async def clear(self) -> None:
        async with self._lock:
            self._store.clear()

    async def cleanup_expired(self) -> int:
        """Remove expired entries.

        Returns:
            The number of entries removed.
        """
        now = self._clock()
        async with self._lock:
            expired_keys = [
                key for key, entry in self._store.items() if self._is_expired(entry, now)
            ]
            for key in expired_keys:
                del self._store[key]
        return len(expired_keys)
