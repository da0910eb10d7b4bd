"""Store adapters for idempotency middleware.

This package normalizes key-value stores into the StoreAdapter contract
defined in base.py.

Available Adapters:
    - CacheStoreAdapter: cache-style stores (``read``/``write``)
    - RedisStoreAdapter: remote string caches (``get``/``set``)

Available Stores:
    - MemoryCache: in-process cache-style store with TTL expiry
"""

from idempotency_kit.storage.base import StoreAdapter, storage_key
from idempotency_kit.storage.cache import CacheStoreAdapter
from idempotency_kit.storage.factory import adapter_for
from idempotency_kit.storage.memory import MemoryCache
from idempotency_kit.storage.redis_store import RedisStoreAdapter

__all__ = [
    "StoreAdapter",
    "CacheStoreAdapter",
    "RedisStoreAdapter",
    "MemoryCache",
    "adapter_for",
    "storage_key",
]
