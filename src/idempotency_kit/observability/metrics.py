"""Prometheus metrics for idempotency middleware.

Metrics include:

- Request counter by outcome (passthrough, new, replay, conflict, in_flight, fallback)
- Handler execution time for admitted requests
- Time spent waiting on an in-flight original
- Gauge of executions currently holding a key
- Cleanup operation tracking for the in-process cache

Examples:
    Recording a replayed request::

        from idempotency_kit.observability.metrics import record_request

        record_request(result="replay", status_code=201)
"""

from prometheus_client import Counter, Gauge, Histogram

# Labels: result (passthrough, new, replay, conflict, in_flight, fallback), status_code
requests_total = Counter(
    "idempotency_requests_total",
    "Total number of requests processed by idempotency middleware",
    ["result", "status_code"],
)

execution_time_ms = Histogram(
    "idempotency_execution_time_ms",
    "Downstream handler execution time in milliseconds (admitted requests only)",
    buckets=[10, 25, 50, 100, 250, 500, 1000, 2500, 5000, 10000],
)

wait_time_seconds = Histogram(
    "idempotency_wait_time_seconds",
    "Time spent polling for an in-flight request to complete",
    ["outcome"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10],
)

in_flight_requests = Gauge(
    "idempotency_in_flight_requests",
    "Number of admitted requests currently executing in this process",
)

cleanup_operations = Counter(
    "idempotency_cleanup_operations_total",
    "Total number of cleanup operations performed",
)

cleanup_records_removed = Counter(
    "idempotency_cleanup_records_removed_total",
    "Total number of expired entries removed by cleanup",
)


def record_request(result: str, status_code: int) -> None:
    """Record a processed request.

    Examples:
        >>> record_request("conflict", 409)
    """
    requests_total.labels(result=result, status_code=str(status_code)).inc()


def record_execution_time(exec_time_ms: float) -> None:
    """Record downstream execution time. Not called for replays."""
    execution_time_ms.observe(exec_time_ms)


def record_wait(outcome: str, waited_seconds: float) -> None:
    """Record how long a request polled and how the wait ended.

    Args:
        outcome: "completed" or "timeout"
        waited_seconds: Time spent polling
    """
    wait_time_seconds.labels(outcome=outcome).observe(waited_seconds)


def record_cleanup(records_removed: int) -> None:
    """Record a cleanup operation."""
    cleanup_operations.inc()
    cleanup_records_removed.inc(records_removed)
