"""Core coordination logic for idempotency handling.

This package contains:
- Middleware: eligibility checks, fingerprinting, 409 mapping
- State machine: absent -> in_flight -> completed, replay and waiting
- Replay: response types and the stored-response replay
- Body: capture and release of downstream response bodies
- Cleanup: periodic expiry sweep for in-process stores

The core logic is framework-agnostic and is wrapped by adapters for
specific web frameworks.
"""

from idempotency_kit.core.middleware import IdempotencyMiddleware, Request
from idempotency_kit.core.replay import ReplayedResponse, conflict_response, replay_response

__all__ = [
    "IdempotencyMiddleware",
    "Request",
    "ReplayedResponse",
    "conflict_response",
    "replay_response",
]
