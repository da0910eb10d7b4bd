"""Core type definitions and models for idempotency middleware.

This module provides the persisted idempotency record and its state enum.
A record starts life ``in_flight`` (holding only the request fingerprint)
and is overwritten by a ``completed`` record carrying the captured response.

Examples:
    Creating an in-flight marker::

        from idempotency_kit.models import IdempotencyRecord

        marker = IdempotencyRecord.in_flight(fingerprint="a" * 64)

    Recording a completed response::

        record = IdempotencyRecord.completed(
            fingerprint="a" * 64,
            status=201,
            headers={"content-type": "application/json"},
            body=b'{"id": "pay_123"}',
        )

    Serializing for a string-only store::

        raw = record.model_dump_json()
        restored = IdempotencyRecord.model_validate_json(raw)
        assert restored == record
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class RecordState(str, Enum):
    """Represents the lifecycle state of an idempotency key.

    Attributes:
        IN_FLIGHT: The original request is currently executing.
        COMPLETED: A response has been captured and is eligible for replay.
    """

    IN_FLIGHT = "in_flight"
    COMPLETED = "completed"


class IdempotencyRecord(BaseModel):
    """The record stored under ``idempotency:<key>``.

    The response fields are present only when the record is completed. The
    body is kept as raw bytes; JSON serialization encodes it as base64 so any
    byte sequence survives a round trip through a string store unchanged.

    Attributes:
        state: Current lifecycle state.
        fingerprint: Digest of the request that first claimed the key.
        status: HTTP status code of the captured response.
        headers: Response headers of the captured response.
        body: Response body of the captured response.
    """

    model_config = ConfigDict(
        frozen=True,
        ser_json_bytes="base64",
        val_json_bytes="base64",
    )

    state: RecordState = Field(
        ...,
        description="Lifecycle state of the idempotency key",
        examples=[RecordState.IN_FLIGHT, RecordState.COMPLETED],
    )
    fingerprint: str = Field(
        ...,
        description="Digest of the request identity",
        min_length=1,
        examples=["a" * 64],
    )
    status: int | None = Field(
        default=None,
        description="HTTP status code (completed records only)",
        ge=100,
        le=599,
        examples=[200, 201, 400],
    )
    headers: dict[str, str] | None = Field(
        default=None,
        description="HTTP response headers (completed records only)",
        examples=[{"content-type": "application/json"}],
    )
    body: bytes | None = Field(
        default=None,
        description="HTTP response body (completed records only)",
    )

    @model_validator(mode="after")
    def validate_response_fields(self) -> "IdempotencyRecord":
        """Check that response fields match the state.

        Raises:
            ValueError: If a completed record lacks its response, or an
                in-flight record carries one.
        """
        response_fields = (self.status, self.headers, self.body)
        if self.state == RecordState.COMPLETED:
            if any(field is None for field in response_fields):
                raise ValueError("completed records require status, headers and body")
        elif any(field is not None for field in response_fields):
            raise ValueError("in_flight records cannot carry a response")
        return self

    @classmethod
    def in_flight(cls, fingerprint: str) -> "IdempotencyRecord":
        """Build the marker written when a request claims a key."""
        return cls(state=RecordState.IN_FLIGHT, fingerprint=fingerprint)

    @classmethod
    def completed(
        cls,
        fingerprint: str,
        status: int,
        headers: dict[str, str],
        body: bytes,
    ) -> "IdempotencyRecord":
        """Build the record written once the response has been captured."""
        return cls(
            state=RecordState.COMPLETED,
            fingerprint=fingerprint,
            status=status,
            headers=dict(headers),
            body=body,
        )

    @property
    def is_in_flight(self) -> bool:
        return self.state == RecordState.IN_FLIGHT

    @property
    def is_completed(self) -> bool:
        return self.state == RecordState.COMPLETED
