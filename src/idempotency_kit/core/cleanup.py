"""Periodic expiry sweep for in-process stores.

Records are never deleted by the coordinator; expiry belongs to the store.
Redis expires keys on its own, and MemoryCache treats expired entries as
absent on read. Entries for keys that are never read again still occupy
memory, so long-running processes using MemoryCache should run this sweep.

Examples:
    Integrate with FastAPI startup/shutdown::

        from contextlib import asynccontextmanager

        from fastapi import FastAPI
        from idempotency_kit.core.cleanup import start_cleanup_task, stop_cleanup_task
        from idempotency_kit.storage.memory import MemoryCache

        cache = MemoryCache()

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            task = await start_cleanup_task(cache, interval_seconds=60)
            yield
            await stop_cleanup_task(task)

        app = FastAPI(lifespan=lifespan)
"""

import asyncio
from typing import Protocol

from idempotency_kit.observability.logging import get_logger
from idempotency_kit.observability.metrics import record_cleanup

logger = get_logger(__name__)


class ExpiringStore(Protocol):
    async def cleanup_expired(self) -> int: ...


async def cleanup_loop(
    store: ExpiringStore,
    interval_seconds: float = 300,
    stop_event: asyncio.Event | None = None,
) -> None:
    """Call ``store.cleanup_expired()`` every ``interval_seconds`` until stopped.

    A failed sweep is logged and the loop keeps running; the next sweep
    retries the same work.

    Args:
        store: Store exposing cleanup_expired()
        interval_seconds: Time between sweeps
        stop_event: Event to signal the loop to stop (optional)
    """
    if stop_event is None:
        stop_event = asyncio.Event()

    logger.info("cleanup.started", interval_seconds=interval_seconds)

    while not stop_event.is_set():
        try:
            count = await store.cleanup_expired()
        except Exception as e:
            logger.error("cleanup.failed", error=str(e), error_type=type(e).__name__)
        else:
            record_cleanup(count)
            if count > 0:
                logger.info("cleanup.completed", records_removed=count)
            else:
                logger.debug("cleanup.completed", records_removed=0)

        try:
            await asyncio.wait_for(stop_event.wait(), timeout=interval_seconds)
        except asyncio.TimeoutError:
            continue

    logger.info("cleanup.stopped")


async def start_cleanup_task(
    store: ExpiringStore,
    interval_seconds: float = 300,
) -> asyncio.Task[None]:
    """Start the sweep as a background task.

    Returns:
        The asyncio Task running the cleanup loop
    """
    stop_event = asyncio.Event()

    task = asyncio.create_task(
        cleanup_loop(store=store, interval_seconds=interval_seconds, stop_event=stop_event)
    )
    task._stop_event = stop_event  # type: ignore[attr-defined]

    return task


async def stop_cleanup_task(task: asyncio.Task[None], timeout: float = 5.0) -> None:
    """Signal the sweep to stop and wait for it, cancelling it if it overruns."""
    stop_event: asyncio.Event | None = getattr(task, "_stop_event", None)
    if stop_event:
        stop_event.set()

    try:
        await asyncio.wait_for(task, timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("cleanup.stop_timeout", timeout=timeout)
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            logger.debug("cleanup.cancelled")
