"""Structured logging configuration for idempotency middleware.

This module provides structured logging using structlog. Every decision the
coordinator takes is logged as a named event with the idempotency key bound,
so a single key can be followed from lock acquisition to replay.

Events emitted by the middleware:
- idempotency.passthrough (debug)
- idempotency.lock_acquired / idempotency.lock_lost
- idempotency.fallback_execute (warning)
- idempotency.replayed
- idempotency.conflict / idempotency.in_flight_timeout
- idempotency.recorded / idempotency.not_recorded

Examples:
    Configure logging::

        from idempotency_kit.observability.logging import configure_logging

        configure_logging(level="INFO", json_output=True)

    Output (JSON)::

        {
            "key": "payment-123",
            "status": 201,
            "event": "idempotency.replayed",
            "level": "info",
            "timestamp": "2024-01-01T00:00:00.000000Z"
        }
"""

import logging
import sys
from typing import Any

import structlog


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
) -> None:
    """Configure structured logging for the application.

    This should be called once at application startup.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, emit JSON logs; if False, use console format
    """
    log_level = getattr(logging, level.upper())

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    processors: list[object] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,  # type: ignore[arg-type]
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ from the calling module)

    Returns:
        A structlog logger instance
    """
    return structlog.get_logger(name)
