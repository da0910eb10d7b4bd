"""
Idempotency middleware for Python web applications.

Clients send an idempotency key header with state-changing requests. The
middleware executes each keyed request at most once, replays the stored
response for retries with the same payload, and rejects retries whose
payload differs or whose original is still running.
"""

from idempotency_kit.config import IdempotencyConfig
from idempotency_kit.core.middleware import IdempotencyMiddleware, Request
from idempotency_kit.core.replay import ReplayedResponse
from idempotency_kit.exceptions import (
    ConfigurationError,
    ConflictError,
    FingerprintMismatchError,
    IdempotencyError,
    RequestInFlightError,
    StorageError,
)
from idempotency_kit.models import IdempotencyRecord, RecordState
from idempotency_kit.storage import (
    CacheStoreAdapter,
    MemoryCache,
    RedisStoreAdapter,
    StoreAdapter,
    adapter_for,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "IdempotencyConfig",
    "IdempotencyMiddleware",
    "Request",
    "ReplayedResponse",
    "IdempotencyRecord",
    "RecordState",
    "StoreAdapter",
    "CacheStoreAdapter",
    "RedisStoreAdapter",
    "MemoryCache",
    "adapter_for",
    "IdempotencyError",
    "ConfigurationError",
    "ConflictError",
    "FingerprintMismatchError",
    "RequestInFlightError",
    "StorageError",
]
