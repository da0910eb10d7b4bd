"""State machine handler for idempotency request processing.

This module implements the coordination logic for a single idempotency key:

    absent -> in_flight -> completed

``absent -> in_flight`` only happens through a successful conditional write
(``write_if_absent``). Every request that instead observes an existing
record takes a read-only path: replay it, wait for it, or reject it.

The state machine handles:
- Lock acquisition via the store's conditional write
- Conflict detection (same key, different fingerprint)
- Bounded polling while the original request is in flight
- Response capture and recording for admitted requests
- A best-effort fallback when the conditional write fails but no record
  is visible afterwards (the request executes without holding the lock)

Examples:
    Processing a request::

        from idempotency_kit.config import IdempotencyConfig
        from idempotency_kit.core.state_machine import process_request
        from idempotency_kit.storage import MemoryCache, adapter_for

        store = adapter_for(MemoryCache())

        async def handler(request):
            return 201, {"content-type": "application/json"}, [b'{"id": 1}']

        result = await process_request(
            store=store,
            key="payment-123",
            fingerprint="abc123",
            handler=handler,
            request=request,
            config=IdempotencyConfig(),
        )
"""

import asyncio
import time
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from idempotency_kit.config import IdempotencyConfig
from idempotency_kit.core.body import capture_body, close_body
from idempotency_kit.core.replay import ReplayedResponse, replay_response
from idempotency_kit.exceptions import FingerprintMismatchError, RequestInFlightError
from idempotency_kit.models import IdempotencyRecord
from idempotency_kit.observability.logging import get_logger
from idempotency_kit.observability.metrics import (
    in_flight_requests,
    record_execution_time,
    record_wait,
)
from idempotency_kit.storage.base import StoreAdapter

logger = get_logger(__name__)

# (status, headers, body); body is a single value or a sequence of chunks
HandlerResult = tuple[int, Mapping[str, str], Any]
Handler = Callable[[Any], Awaitable[HandlerResult]]


class StateResult:
    """Result of state machine processing.

    Attributes:
        response: The response object (either new or replayed)
        outcome: "new", "fallback" or "replay"
        execution_time_ms: Handler execution time in milliseconds (None for replays)
    """

    def __init__(
        self,
        response: ReplayedResponse,
        outcome: str,
        execution_time_ms: float | None = None,
    ) -> None:
        self.response = response
        self.outcome = outcome
        self.execution_time_ms = execution_time_ms

    @property
    def was_replayed(self) -> bool:
        return self.outcome == "replay"


async def run_handler(handler: Handler, request: Any) -> ReplayedResponse:
    """Invoke the downstream handler once and capture its response.

    The handler's body is read fully into memory and then released through
    its ``aclose()``/``close()`` method, if it has one, whether or not
    capture succeeded. Handler exceptions propagate unchanged.
    """
    body = None
    try:
        status, headers, body = await handler(request)
        captured = await capture_body(body)
    finally:
        if body is not None:
            await close_body(body)

    return ReplayedResponse(status=int(status), headers=dict(headers), body=captured)


async def process_request(
    store: StoreAdapter,
    key: str,
    fingerprint: str,
    handler: Handler,
    request: Any,
    config: IdempotencyConfig,
) -> StateResult:
    """Process an idempotent request through the state machine.

    Flow:
        1. Read the record for this key
        2. If a record exists: replay it, wait for it, or reject
        3. If no record: claim the key with an in_flight marker and execute
        4. If the claim fails: re-read, then replay/wait/reject, or execute
           without the lock if the record is still not visible

    Args:
        store: Store adapter for idempotency records
        key: Idempotency key from request header
        fingerprint: Fingerprint of the request
        handler: Async function that executes the actual request
        request: The original request object (passed to handler)
        config: Configuration object

    Returns:
        StateResult with the response and metadata

    Raises:
        FingerprintMismatchError: If the key belongs to a different request
        RequestInFlightError: If the original is still running after the wait
        StorageError: If the store fails
    """
    record = await store.read(key)
    if record is not None:
        return await replay_or_conflict(store, key, record, fingerprint, config)

    marker = IdempotencyRecord.in_flight(fingerprint)
    if await store.write_if_absent(key, marker, config.lock_ttl):
        logger.info("idempotency.lock_acquired", key=key, lock_ttl=config.lock_ttl)
        return await execute_and_record(
            store=store,
            key=key,
            fingerprint=fingerprint,
            handler=handler,
            request=request,
            config=config,
            outcome="new",
        )

    # Another request created a record between our read and our write
    logger.info("idempotency.lock_lost", key=key)
    record = await store.read(key)
    if record is not None:
        return await replay_or_conflict(store, key, record, fingerprint, config)

    logger.warning("idempotency.fallback_execute", key=key)
    return await execute_and_record(
        store=store,
        key=key,
        fingerprint=fingerprint,
        handler=handler,
        request=request,
        config=config,
        outcome="fallback",
    )


async def replay_or_conflict(
    store: StoreAdapter,
    key: str,
    record: IdempotencyRecord,
    fingerprint: str,
    config: IdempotencyConfig,
) -> StateResult:
    """Handle a request whose key already has a record.

    Args:
        store: Store adapter
        key: Idempotency key
        record: The record found for the key
        fingerprint: Fingerprint of the incoming request
        config: Configuration

    Returns:
        StateResult carrying the replayed response

    Raises:
        FingerprintMismatchError: If the record belongs to a different request
        RequestInFlightError: If the record is still in flight (or vanished)
            once the wait window has elapsed
    """
    _check_fingerprint(key, record, fingerprint)

    if record.is_in_flight:
        polled, waited = await wait_for_completion(store, key, config)
        if polled is None or polled.is_in_flight:
            logger.info("idempotency.in_flight_timeout", key=key, waited_seconds=waited)
            raise RequestInFlightError(key, waited)

        # The key may have expired and been claimed again while we polled
        _check_fingerprint(key, polled, fingerprint)
        record = polled

    response = replay_response(record)
    logger.info("idempotency.replayed", key=key, status=response.status)
    return StateResult(response=response, outcome="replay")


async def wait_for_completion(
    store: StoreAdapter,
    key: str,
    config: IdempotencyConfig,
) -> tuple[IdempotencyRecord | None, float]:
    """Poll the store until the record leaves ``in_flight`` or the wait times out.

    The deadline is measured on the monotonic clock from the moment polling
    starts. Polling sleeps ``config.poll_interval`` before every read and
    holds no lock while sleeping.

    Returns:
        The last record read (None if it disappeared) and the seconds waited.
    """
    start = time.monotonic()
    deadline = start + config.wait_timeout

    while True:
        await asyncio.sleep(config.poll_interval)
        record = await store.read(key)
        if record is None or not record.is_in_flight:
            break
        if time.monotonic() >= deadline:
            break

    waited = time.monotonic() - start
    outcome = "completed" if record is not None and record.is_completed else "timeout"
    record_wait(outcome, waited)
    return record, waited


async def execute_and_record(
    store: StoreAdapter,
    key: str,
    fingerprint: str,
    handler: Handler,
    request: Any,
    config: IdempotencyConfig,
    outcome: str,
) -> StateResult:
    """Execute the handler once and persist its response for replay.

    Responses whose body exceeds ``config.max_body_bytes`` are returned to
    the caller but not stored, so a retry executes again. If the handler
    raises, nothing is written and the in_flight marker expires after
    ``config.lock_ttl``.

    Args:
        store: Store adapter
        key: Idempotency key
        fingerprint: Request fingerprint
        handler: Handler function to execute
        request: Original request object
        config: Configuration
        outcome: "new" if this request holds the lock, "fallback" otherwise

    Returns:
        StateResult with execution result
    """
    start_time = time.perf_counter()
    in_flight_requests.inc()
    try:
        response = await run_handler(handler, request)
    finally:
        in_flight_requests.dec()

    execution_time_ms = (time.perf_counter() - start_time) * 1000
    record_execution_time(execution_time_ms)

    body_bytes = len(response.body)
    if body_bytes <= config.max_body_bytes:
        completed = IdempotencyRecord.completed(
            fingerprint=fingerprint,
            status=response.status,
            headers=response.headers,
            body=response.body,
        )
        await store.write(key, completed, config.ttl)
        logger.info(
            "idempotency.recorded",
            key=key,
            status=response.status,
            body_bytes=body_bytes,
            execution_time_ms=round(execution_time_ms, 2),
        )
    else:
        logger.info(
            "idempotency.not_recorded",
            key=key,
            body_bytes=body_bytes,
            max_body_bytes=config.max_body_bytes,
        )

    return StateResult(
        response=response,
        outcome=outcome,
        execution_time_ms=execution_time_ms,
    )


def _check_fingerprint(key: str, record: IdempotencyRecord, fingerprint: str) -> None:
    if record.fingerprint != fingerprint:
        logger.info("idempotency.conflict", key=key)
        raise FingerprintMismatchError(
            key=key,
            stored_fingerprint=record.fingerprint,
            request_fingerprint=fingerprint,
        )
