"""Adapter for Redis and other remote string caches.

The backing store only holds strings, so this adapter owns the JSON encoding
of records. The conditional write is a single ``SET key value NX PX ttl_ms``
round trip, which Redis executes atomically.

Examples:
    With an asyncio Redis client::

        from redis.asyncio import Redis
        from idempotency_kit.storage.redis_store import RedisStoreAdapter

        adapter = RedisStoreAdapter(Redis.from_url("redis://localhost:6379/0"))

    The synchronous ``redis.Redis`` client works the same way.
"""

from typing import Any

from pydantic import ValidationError
from redis.exceptions import RedisError

from idempotency_kit.exceptions import StorageError
from idempotency_kit.models import IdempotencyRecord
from idempotency_kit.storage.base import resolve, storage_key


def _ttl_ms(ttl: float) -> int:
    return int(ttl * 1000)


class RedisStoreAdapter:
    """Store adapter over a ``get``/``set`` string cache.

    Attributes:
        client: Redis client (sync or asyncio) or anything exposing
            ``get(key)`` and ``set(key, value, nx=..., px=...)``.
    """

    def __init__(self, client: Any) -> None:
        self.client = client

    async def read(self, key: str) -> IdempotencyRecord | None:
        try:
            raw = await resolve(self.client.get(storage_key(key)))
        except RedisError as e:
            raise StorageError(f"Failed to read key {key} from Redis: {e}", cause=e) from e

        if raw is None:
            return None

        try:
            return IdempotencyRecord.model_validate_json(raw)
        except ValidationError as e:
            raise StorageError(f"Stored record for key {key} is not decodable", cause=e) from e

    async def write(self, key: str, record: IdempotencyRecord, ttl: int) -> None:
        try:
            await resolve(
                self.client.set(storage_key(key), record.model_dump_json(), px=_ttl_ms(ttl))
            )
        except RedisError as e:
            raise StorageError(f"Failed to write key {key} to Redis: {e}", cause=e) from e

    async def write_if_absent(self, key: str, record: IdempotencyRecord, ttl: int) -> bool:
        try:
            result = await resolve(
                self.client.set(
                    storage_key(key),
                    record.model_dump_json(),
                    nx=True,
                    px=_ttl_ms(ttl),
                )
            )
        except RedisError as e:
            raise StorageError(f"Failed to write key {key} to Redis: {e}", cause=e) from e

        # redis-py returns True when set, None when NX blocked the write
        return bool(result)
