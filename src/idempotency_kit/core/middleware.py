"""Framework-agnostic core middleware for idempotency handling.

This module provides the main middleware logic that orchestrates the
idempotency flow. It is framework-agnostic and can be wrapped by adapters
for different web frameworks.

The middleware:
1. Passes through requests whose method is not tracked or that carry no key
2. Computes the request fingerprint
3. Delegates to the state machine for replay, conflict or execution
4. Turns idempotency conflicts into HTTP 409 JSON responses

Examples:
    Using the middleware directly::

        from idempotency_kit.core.middleware import IdempotencyMiddleware, Request
        from idempotency_kit.storage.memory import MemoryCache

        middleware = IdempotencyMiddleware(MemoryCache())

        async def handler(request):
            return 201, {"content-type": "application/json"}, b'{"id": "pay_1"}'

        request = Request(
            method="POST",
            path="/payments",
            query_string="",
            headers={"Idempotency-Key": "pay-1"},
            body=b'{"amount": 100}',
        )
        response = await middleware.process(request, handler)
"""

import io
from collections.abc import Mapping, MutableMapping
from typing import IO, Any

from idempotency_kit.config import IdempotencyConfig
from idempotency_kit.core.replay import ReplayedResponse, conflict_response
from idempotency_kit.core.state_machine import Handler, process_request, run_handler
from idempotency_kit.exceptions import ConflictError, RequestInFlightError
from idempotency_kit.fingerprint import compute_fingerprint
from idempotency_kit.observability.logging import get_logger
from idempotency_kit.observability.metrics import record_request
from idempotency_kit.storage.factory import adapter_for
from idempotency_kit.utils.headers import get_header_value, header_env_key, headers_from_environ

logger = get_logger(__name__)


class Request:
    """Abstract request representation.

    Framework adapters convert their framework-specific request objects into
    this format.

    Attributes:
        method: HTTP method (GET, POST, etc.)
        path: URL path
        query_string: Query string without leading '?'
        headers: Request headers
        body: Request body, either bytes or a readable, seekable stream
        environ: The environ mapping for requests built by from_environ
    """

    def __init__(
        self,
        method: str,
        path: str,
        query_string: str,
        headers: Mapping[str, str],
        body: bytes | IO[bytes] = b"",
    ) -> None:
        self.method = method
        self.path = path
        self.query_string = query_string
        self.headers = headers
        self.body = body
        self.environ: Mapping[str, Any] | None = None

    @classmethod
    def from_environ(cls, environ: Mapping[str, Any]) -> "Request":
        """Build a request from WSGI/CGI-style metadata.

        Headers are read from their ``HTTP_<UPPER_SNAKE>`` keys. The path is
        ``SCRIPT_NAME`` followed by ``PATH_INFO``. ``CONTENT_LENGTH`` bytes are
        read from ``wsgi.input`` into a rewindable buffer, which also replaces
        ``wsgi.input`` in a mutable environ so the application reads the same
        bytes.
        """
        request = cls(
            method=environ.get("REQUEST_METHOD", "GET"),
            path=(environ.get("SCRIPT_NAME", "") + environ.get("PATH_INFO", "")) or "/",
            query_string=environ.get("QUERY_STRING", ""),
            headers=headers_from_environ(environ),
            body=_buffer_input(environ),
        )
        request.environ = environ
        return request

    def header(self, name: str) -> str | None:
        """Return a request header by name, case-insensitively.

        Requests built from an environ look the header up under its
        ``HTTP_<UPPER_SNAKE>`` key first.
        """
        if self.environ is not None:
            env_key = header_env_key(name)
            if env_key in self.environ:
                return str(self.environ[env_key])
        return get_header_value(self.headers, name)

    def read_body(self) -> bytes:
        """Return the full request body.

        Stream bodies are read to the end and rewound, so the downstream
        handler can still consume them.
        """
        if isinstance(self.body, (bytes, bytearray)):
            return bytes(self.body)

        data = self.body.read()
        self.body.seek(0)
        return data


class IdempotencyMiddleware:
    """Framework-agnostic idempotency middleware.

    Attributes:
        store: Store adapter for idempotency records
        config: Configuration object
    """

    def __init__(self, store: Any, config: IdempotencyConfig | None = None) -> None:
        """Initialize the middleware.

        Args:
            store: A StoreAdapter, a cache-style store (read/write) or a
                remote string cache (get/set)
            config: Configuration object (uses defaults if not provided)

        Raises:
            ConfigurationError: If the store exposes neither calling convention
        """
        self.store = adapter_for(store)
        self.config = config or IdempotencyConfig()

    async def process(self, request: Request, handler: Handler) -> ReplayedResponse:
        """Process a request with idempotency handling.

        Args:
            request: The incoming request
            handler: Async function returning ``(status, headers, body)``

        Returns:
            ReplayedResponse object

        Raises:
            StorageError: If the store fails
            Exception: Anything the handler raises
        """
        key = self.extract_key(request)
        if key is None:
            logger.debug("idempotency.passthrough", method=request.method, path=request.path)
            response = await run_handler(handler, request)
            record_request("passthrough", response.status)
            return response

        fingerprint = compute_fingerprint(
            method=request.method,
            path=request.path,
            query_string=request.query_string,
            body=request.read_body(),
        )

        try:
            result = await process_request(
                store=self.store,
                key=key,
                fingerprint=fingerprint,
                handler=handler,
                request=request,
                config=self.config,
            )
        except ConflictError as e:
            response = conflict_response(e.error_code)
            result_label = "in_flight" if isinstance(e, RequestInFlightError) else "conflict"
            record_request(result_label, response.status)
            return response

        record_request(result.outcome, result.response.status)
        return result.response

    def extract_key(self, request: Request) -> str | None:
        """Return the idempotency key if this request is subject to idempotency.

        Returns None for untracked methods and for a missing or blank header.
        """
        if not self.config.applies_to(request.method):
            return None

        key = request.header(self.config.header)
        if key is None or not key.strip():
            return None

        return key


def _buffer_input(environ: Mapping[str, Any]) -> IO[bytes]:
    # WSGI input streams are not seekable and must not be read past CONTENT_LENGTH
    try:
        length = int(environ.get("CONTENT_LENGTH") or 0)
    except ValueError:
        length = 0

    stream = environ.get("wsgi.input")
    data = stream.read(length) if stream is not None and length > 0 else b""

    buffered = io.BytesIO(data)
    if isinstance(environ, MutableMapping):
        environ["wsgi.input"] = buffered
    return buffered
