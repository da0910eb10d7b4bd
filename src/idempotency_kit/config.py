"""Configuration module for idempotency middleware.

This module provides the IdempotencyConfig class for configuring the behavior of the
idempotency middleware: which methods are tracked, which header carries the key,
how long records live, and how long a retry waits for an in-flight original.

Example:
    Basic usage with defaults:

        >>> config = IdempotencyConfig()
        >>> config.methods
        ['POST', 'PUT', 'PATCH']

    Custom configuration:

        >>> config = IdempotencyConfig(
        ...     methods=["POST"],
        ...     ttl=3600,
        ...     header="X-Idempotency-Key",
        ...     wait_timeout=5.0,
        ... )

    Loading from environment:

        >>> import os
        >>> os.environ['IDEMPOTENCY_METHODS'] = 'POST,PUT'
        >>> os.environ['IDEMPOTENCY_TTL'] = '3600'
        >>> config = IdempotencyConfig.from_env()
"""

import os
from typing import Any

from pydantic import BaseModel, Field, field_validator

# Valid HTTP methods for idempotency
VALID_HTTP_METHODS = {
    "GET",
    "HEAD",
    "POST",
    "PUT",
    "DELETE",
    "CONNECT",
    "OPTIONS",
    "TRACE",
    "PATCH",
}

DEFAULT_TTL = 86400
DEFAULT_HEADER = "Idempotency-Key"
DEFAULT_METHODS = ["POST", "PUT", "PATCH"]
DEFAULT_WAIT_TIMEOUT = 2.0
DEFAULT_LOCK_TTL = 10
DEFAULT_MAX_BODY_BYTES = 1_000_000
DEFAULT_POLL_INTERVAL = 0.05


class IdempotencyConfig(BaseModel):
    """Configuration for idempotency middleware.

    Attributes:
        ttl: Time-to-live in seconds for completed records. Default is 86400 (24 hours).
        header: Name of the request header carrying the idempotency key.
            Default is "Idempotency-Key".
        methods: HTTP methods subject to idempotency. Matched case-insensitively.
            Default is POST, PUT, PATCH.
        wait_timeout: Seconds a retry polls for an in-flight original to complete
            before giving up with 409. Default is 2.0.
        lock_ttl: Time-to-live in seconds for the in-flight marker. Bounds how long
            a crashed execution blocks its key. Default is 10.
        max_body_bytes: Largest response body, in bytes, that is stored for replay.
            Larger responses are returned but never persisted. Default is 1,000,000.
        poll_interval: Seconds between store reads while waiting on an in-flight
            original. Default is 0.05.

    Note:
        This class is immutable (frozen=True). Create a new instance if you need
        different settings.
    """

    ttl: int = Field(
        default=DEFAULT_TTL,
        description="Time-to-live in seconds for completed records",
    )
    header: str = Field(
        default=DEFAULT_HEADER,
        description="Request header carrying the idempotency key",
    )
    methods: list[str] | str = Field(
        default=DEFAULT_METHODS,
        description="HTTP methods subject to idempotency",
    )
    wait_timeout: float = Field(
        default=DEFAULT_WAIT_TIMEOUT,
        description="Seconds to wait for an in-flight request before returning 409",
    )
    lock_ttl: int = Field(
        default=DEFAULT_LOCK_TTL,
        description="Time-to-live in seconds for in-flight records",
    )
    max_body_bytes: int = Field(
        default=DEFAULT_MAX_BODY_BYTES,
        description="Largest response body in bytes eligible for replay",
    )
    poll_interval: float = Field(
        default=DEFAULT_POLL_INTERVAL,
        description="Seconds between store reads while waiting",
    )

    model_config = {"frozen": True}

    @field_validator("methods", mode="before")
    @classmethod
    def validate_methods(cls, v: Any) -> list[str]:
        """Validate and normalize HTTP methods.

        Args:
            v: List of HTTP method strings or comma-separated string.

        Returns:
            List of uppercase, validated HTTP methods.

        Raises:
            ValueError: If any method is not a valid HTTP method.

        Example:
            >>> IdempotencyConfig(methods=["post", "put"]).methods
            ['POST', 'PUT']
        """
        if isinstance(v, str):
            # Comma-separated string (from environment variables)
            v = [method.strip() for method in v.split(",") if method.strip()]

        if isinstance(v, (set, tuple, frozenset)):
            v = list(v)

        if not isinstance(v, list):
            raise ValueError("methods must be a list or comma-separated string")

        methods = [str(method).upper() for method in v]

        invalid_methods = set(methods) - VALID_HTTP_METHODS
        if invalid_methods:
            raise ValueError(
                f"Invalid HTTP methods: {', '.join(sorted(invalid_methods))}. "
                f"Valid methods are: {', '.join(sorted(VALID_HTTP_METHODS))}"
            )

        return methods

    @field_validator("header")
    @classmethod
    def validate_header(cls, v: str) -> str:
        """Strip the header name and reject blank values."""
        v = v.strip()
        if not v:
            raise ValueError("header must not be blank")
        return v

    @field_validator("ttl", "lock_ttl")
    @classmethod
    def validate_positive_ttl(cls, v: int) -> int:
        """Validate that TTLs are positive.

        Raises:
            ValueError: If the TTL is zero or negative.
        """
        if v <= 0:
            raise ValueError(f"TTL must be a positive number of seconds, got {v}")
        return v

    @field_validator("wait_timeout")
    @classmethod
    def validate_wait_timeout(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"wait_timeout must be >= 0, got {v}")
        return v

    @field_validator("poll_interval")
    @classmethod
    def validate_poll_interval(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"poll_interval must be > 0, got {v}")
        return v

    @field_validator("max_body_bytes")
    @classmethod
    def validate_max_body_bytes(cls, v: int) -> int:
        """Validate max body bytes is non-negative.

        Raises:
            ValueError: If value is negative.
        """
        if v < 0:
            raise ValueError(f"max_body_bytes must be >= 0, got {v}")
        return v

    def applies_to(self, method: str) -> bool:
        """Return True if requests with this method are subject to idempotency."""
        return method.upper() in self.methods

    @classmethod
    def from_env(cls, prefix: str = "IDEMPOTENCY_") -> "IdempotencyConfig":
        """Create configuration from environment variables.

        Variable names are uppercase field names with the prefix, e.g.
        ``IDEMPOTENCY_WAIT_TIMEOUT``. Missing variables keep their defaults.

        Args:
            prefix: Prefix for environment variable names. Default is "IDEMPOTENCY_".

        Returns:
            IdempotencyConfig instance populated from environment variables.
        """
        config_dict: dict[str, Any] = {}

        field_types = {
            "ttl": int,
            "header": str,
            "methods": list,
            "wait_timeout": float,
            "lock_ttl": int,
            "max_body_bytes": int,
            "poll_interval": float,
        }

        for field_name, field_type in field_types.items():
            env_value = os.environ.get(f"{prefix}{field_name.upper()}")
            if env_value is None:
                continue

            if field_type is int:
                config_dict[field_name] = int(env_value)
            elif field_type is float:
                config_dict[field_name] = float(env_value)
            else:
                # Lists stay comma-separated strings; the validator splits them
                config_dict[field_name] = env_value

        return cls(**config_dict)

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "IdempotencyConfig":
        """Create configuration from a dictionary.

        Raises:
            ValidationError: If the dictionary contains invalid values.
        """
        return cls(**config_dict)
