"""Observability utilities for idempotency middleware.

This package provides:
- Prometheus metrics for request outcomes, execution and wait times
- Structured logging with the idempotency key bound to each event
"""

from idempotency_kit.observability.logging import configure_logging, get_logger
from idempotency_kit.observability.metrics import (
    in_flight_requests,
    record_cleanup,
    record_execution_time,
    record_request,
    record_wait,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "in_flight_requests",
    "record_request",
    "record_execution_time",
    "record_wait",
    "record_cleanup",
]
