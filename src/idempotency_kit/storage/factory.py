"""Store adapter selection.

The middleware accepts any of three kinds of store and picks the matching
adapter once, at construction:

- an object already implementing :class:`StoreAdapter` with coroutine
  methods is used as-is;
- a cache-style store (``read``/``write``) is wrapped in
  :class:`CacheStoreAdapter`;
- a remote string cache (``get``/``set``) is wrapped in
  :class:`RedisStoreAdapter`.
"""

import inspect
from typing import Any

from idempotency_kit.exceptions import ConfigurationError
from idempotency_kit.storage.base import StoreAdapter
from idempotency_kit.storage.cache import CacheStoreAdapter
from idempotency_kit.storage.redis_store import RedisStoreAdapter


def _supports(store: Any, *names: str) -> bool:
    return all(callable(getattr(store, name, None)) for name in names)


def adapter_for(store: Any) -> StoreAdapter:
    """Return the store adapter matching ``store``'s calling convention.

    Args:
        store: A StoreAdapter, a cache-style store or a remote string cache.

    Returns:
        A StoreAdapter wrapping ``store``.

    Raises:
        ConfigurationError: If ``store`` exposes neither calling convention,
            or implements the adapter methods synchronously.

    Examples:
        >>> from idempotency_kit.storage.memory import MemoryCache
        >>> type(adapter_for(MemoryCache())).__name__
        'CacheStoreAdapter'
    """
    if _supports(store, "read", "write", "write_if_absent"):
        if not all(
            inspect.iscoroutinefunction(getattr(store, name))
            for name in ("read", "write", "write_if_absent")
        ):
            raise ConfigurationError("store adapter methods must be coroutine functions")
        return store
    if _supports(store, "read", "write"):
        return CacheStoreAdapter(store)
    if _supports(store, "get", "set"):
        return RedisStoreAdapter(store)
    raise ConfigurationError("store must support read/write or get/set")
