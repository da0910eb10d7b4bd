"""Custom exceptions for the idempotency middleware.

This module defines the exception hierarchy used throughout the middleware
to signal configuration problems, store failures, and the two kinds of
idempotency conflict a client can run into.

Examples:
    Handling a conflict error::

        from idempotency_kit.exceptions import ConflictError

        try:
            result = await process_request(...)
        except ConflictError as e:
            # Same key, different payload, or original still running
            return conflict_response(e.error_code)

    Handling a storage error::

        from idempotency_kit.exceptions import StorageError

        try:
            record = await store.read(key)
        except StorageError as e:
            logger.error("store.unavailable", error=str(e))
            raise
"""


class IdempotencyError(Exception):
    """Base exception for all idempotency-related errors.

    All exceptions raised by the idempotency middleware inherit from this
    base class, allowing callers to catch all middleware-specific errors
    with a single except clause.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        """Initialize the exception with a message.

        Args:
            message: Human-readable error description.
        """
        self.message = message
        super().__init__(message)


class ConfigurationError(IdempotencyError):
    """The middleware cannot be constructed with the given settings.

    Raised once at construction time, for example when the supplied store
    exposes neither the cache-style (``read``/``write``) nor the
    remote-cache-style (``get``/``set``) calling convention.

    Examples:
        >>> adapter_for(object())
        Traceback (most recent call last):
        ...
        ConfigurationError: store must support read/write or get/set
    """


class StorageError(IdempotencyError):
    """Store backend operation failed.

    Raised by store adapters when the backing store errors out or returns
    a payload that cannot be decoded into an idempotency record. The
    coordinator never swallows it: a failed idempotency write must not
    look like a successful idempotent call.

    Attributes:
        message: Human-readable error description.
        cause: The underlying exception that caused the storage error.

    Examples:
        Raising a storage error::

            try:
                raw = await redis.get(key)
            except RedisError as e:
                raise StorageError(
                    message=f"Failed to read key from Redis: {e}",
                    cause=e,
                ) from e
    """

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        """Initialize the storage error with details.

        Args:
            message: Human-readable error description.
            cause: The underlying exception that caused the storage error.
        """
        super().__init__(message)
        self.cause = cause


class ConflictError(IdempotencyError):
    """The request cannot be admitted under its idempotency key.

    The middleware turns every ConflictError into an HTTP 409 response whose
    JSON body is ``{"error": error_code}``.

    Attributes:
        message: Human-readable error description.
        key: The idempotency key that conflicted.
        error_code: Machine-readable code sent back to the client.
    """

    error_code = "idempotency_conflict"

    def __init__(self, message: str, key: str) -> None:
        """Initialize the conflict error.

        Args:
            message: Human-readable error description.
            key: The idempotency key that conflicted.
        """
        super().__init__(message)
        self.key = key


class FingerprintMismatchError(ConflictError):
    """Same key, different request.

    Raised when a record already exists for the key but its fingerprint does
    not match the incoming request. The client reused a key for a different
    payload and should not retry with this body under this key.

    Attributes:
        stored_fingerprint: The fingerprint stored in the backend.
        request_fingerprint: The fingerprint of the incoming request.
    """

    error_code = "idempotency_key_conflict"

    def __init__(self, key: str, stored_fingerprint: str, request_fingerprint: str) -> None:
        """Initialize the mismatch error with both fingerprints.

        Args:
            key: The idempotency key that conflicted.
            stored_fingerprint: The fingerprint stored in the backend.
            request_fingerprint: The fingerprint of the incoming request.
        """
        super().__init__(f"Request fingerprint mismatch for key {key}", key)
        self.stored_fingerprint = stored_fingerprint
        self.request_fingerprint = request_fingerprint


class RequestInFlightError(ConflictError):
    """The original request is still executing.

    Raised when the record for the key stayed ``in_flight`` (or vanished)
    for the whole wait window. The client may retry after a backoff.

    Attributes:
        waited_seconds: How long the request polled before giving up.
    """

    error_code = "idempotency_key_in_flight"

    def __init__(self, key: str, waited_seconds: float) -> None:
        """Initialize the in-flight error.

        Args:
            key: The idempotency key still in flight.
            waited_seconds: How long the request polled before giving up.
        """
        super().__init__(
            f"Request with key {key} still in flight after {waited_seconds:.2f}s",
            key,
        )
        self.waited_seconds = waited_seconds
