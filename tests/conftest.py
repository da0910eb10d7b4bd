"""
Pytest configuration and shared fixtures for idempotency_kit tests.
"""

import asyncio
from collections.abc import Callable
from typing import Any

import pytest

from idempotency_kit.config import IdempotencyConfig
from idempotency_kit.core.middleware import Request
from idempotency_kit.storage.memory import MemoryCache


class FakeClock:
    """Manually advanced monotonic clock for TTL tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeRedis:
    """In-memory double for the get/set subset of the redis-py asyncio client.

    Values are stored as bytes, like Redis returns them without
    ``decode_responses``. Expiry is recorded but not enforced.
    """

    def __init__(self) -> None:
        self.data: dict[str, bytes] = {}
        self.expiry_ms: dict[str, int | None] = {}
        self.calls: list[tuple[Any, ...]] = []

    async def get(self, key: str) -> bytes | None:
        self.calls.append(("get", key))
        return self.data.get(key)

    async def set(
        self,
        key: str,
        value: str | bytes,
        nx: bool = False,
        px: int | None = None,
    ) -> bool | None:
        self.calls.append(("set", key, nx, px))
        if nx and key in self.data:
            return None
        self.data[key] = value.encode("utf-8") if isinstance(value, str) else value
        self.expiry_ms[key] = px
        return True


class ClosableBody:
    """Chunked response body that counts how often it was closed."""

    def __init__(self, chunks: list[bytes]) -> None:
        self.chunks = chunks
        self.close_calls = 0

    def __iter__(self):
        return iter(self.chunks)

    def close(self) -> None:
        self.close_calls += 1


class RecordingHandler:
    """Downstream handler double that counts invocations.

    Every call returns its body as a ClosableBody split into two chunks.
    """

    def __init__(
        self,
        status: int = 201,
        headers: dict[str, str] | None = None,
        body: bytes = b'{"id": "pay_1", "status": "succeeded"}',
        delay: float = 0.0,
        error: Exception | None = None,
    ) -> None:
        self.status = status
        self.headers = headers if headers is not None else {"Content-Type": "application/json"}
        self.body = body
        self.delay = delay
        self.error = error
        self.calls = 0
        self.bodies: list[ClosableBody] = []

    async def __call__(self, request: Request) -> tuple[int, dict[str, str], ClosableBody]:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error

        middle = len(self.body) // 2
        body = ClosableBody([self.body[:middle], self.body[middle:]])
        self.bodies.append(body)
        return self.status, dict(self.headers), body


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache() -> MemoryCache:
    """Provide a fresh in-process cache for each test."""
    return MemoryCache()


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def config() -> IdempotencyConfig:
    """Config with a short wait window so timeout tests stay fast."""
    return IdempotencyConfig(wait_timeout=0.3, poll_interval=0.01)


@pytest.fixture
def handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def make_request() -> Callable[..., Request]:
    """Factory for internal Request objects carrying an idempotency key."""

    def _make(
        body: bytes = b'{"amount": 100, "currency": "USD"}',
        key: str | None = "payment-key-1",
        method: str = "POST",
        path: str = "/api/payments",
        query_string: str = "",
        header: str = "Idempotency-Key",
    ) -> Request:
        headers = {"Content-Type": "application/json"}
        if key is not None:
            headers[header] = key
        return Request(
            method=method,
            path=path,
            query_string=query_string,
            headers=headers,
            body=body,
        )

    return _make


@pytest.fixture
def make_handler() -> type[RecordingHandler]:
    """Expose RecordingHandler so tests can configure status, body, delay or error."""
    return RecordingHandler


@pytest.fixture
def clocked_cache(clock: FakeClock) -> MemoryCache:
    """In-process cache driven by the fake clock."""
    return MemoryCache(clock=clock)
