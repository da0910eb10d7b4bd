"""Response types produced by the idempotency middleware.

Every response leaving the coordinator is a ReplayedResponse with a fully
captured body: the downstream response on first execution, the stored
response on replay, or a 409 built here when the key cannot be admitted.

Replays return exactly what was stored. Status, headers and body are passed
back unchanged, byte for byte.

Examples:
    Replaying a completed record::

        from idempotency_kit.core.replay import replay_response
        from idempotency_kit.models import IdempotencyRecord

        record = IdempotencyRecord.completed(
            fingerprint="a" * 64,
            status=201,
            headers={"content-type": "application/json"},
            body=b'{"id": "pay_123"}',
        )

        response = replay_response(record)
        # response.status == 201
        # response.body == b'{"id": "pay_123"}'
"""

import json
from typing import cast

from idempotency_kit.models import IdempotencyRecord

CONFLICT_STATUS = 409


class ReplayedResponse:
    """Represents an HTTP response returned by the middleware.

    Attributes:
        status: HTTP status code (e.g., 200, 409, 500)
        headers: Response headers as key-value pairs
        body: Response body as bytes
    """

    def __init__(self, status: int, headers: dict[str, str], body: bytes) -> None:
        """Initialize a response.

        Args:
            status: HTTP status code
            headers: Response headers
            body: Response body as bytes
        """
        self.status = status
        self.headers = headers
        self.body = body

    def __repr__(self) -> str:
        return f"ReplayedResponse(status={self.status}, body_bytes={len(self.body)})"


def replay_response(record: IdempotencyRecord) -> ReplayedResponse:
    """Reconstruct the HTTP response stored in a completed record.

    Args:
        record: A completed idempotency record

    Returns:
        ReplayedResponse with the stored status, headers and body

    Raises:
        ValueError: If the record is not completed
    """
    if not record.is_completed:
        raise ValueError(f"Record in state {record.state.value} has no stored response")

    # Validation guarantees these are set on completed records
    return ReplayedResponse(
        status=cast(int, record.status),
        headers=dict(cast(dict[str, str], record.headers)),
        body=cast(bytes, record.body),
    )


def conflict_response(error_code: str) -> ReplayedResponse:
    """Build the 409 response sent when a key cannot be admitted.

    Examples:
        >>> conflict_response("idempotency_key_conflict").body
        b'{"error": "idempotency_key_conflict"}'
    """
    return ReplayedResponse(
        status=CONFLICT_STATUS,
        headers={"Content-Type": "application/json"},
        body=json.dumps({"error": error_code}).encode("utf-8"),
    )
