"""ASGI middleware adapter for FastAPI and Starlette applications.

This module provides an ASGI middleware wrapper around the core idempotency
middleware, making it easy to integrate with ASGI frameworks like FastAPI
and Starlette.

The middleware:
1. Lets untracked requests through untouched (streaming preserved)
2. Converts tracked ASGI requests to the internal Request format
3. Processes them through the core middleware
4. Converts internal responses back to Starlette responses

Examples:
    FastAPI integration::

        from fastapi import FastAPI
        from redis.asyncio import Redis
        from idempotency_kit.adapters.asgi import ASGIIdempotencyMiddleware
        from idempotency_kit.config import IdempotencyConfig

        app = FastAPI()

        app.add_middleware(
            ASGIIdempotencyMiddleware,
            store=Redis.from_url("redis://localhost:6379/0"),
            config=IdempotencyConfig(wait_timeout=5.0),
        )

        @app.post("/api/payments")
        async def create_payment(data: PaymentData):
            # This endpoint is now idempotent
            return {"status": "success"}

    Starlette integration::

        from starlette.applications import Starlette
        from starlette.middleware import Middleware

        middleware = [
            Middleware(ASGIIdempotencyMiddleware, store=MemoryCache()),
        ]

        app = Starlette(middleware=middleware)
"""

from collections.abc import Awaitable, Callable
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request as StarletteRequest
from starlette.responses import Response

from idempotency_kit.config import IdempotencyConfig
from idempotency_kit.core.middleware import IdempotencyMiddleware, Request
from idempotency_kit.core.replay import ReplayedResponse
from idempotency_kit.core.state_machine import HandlerResult


class ASGIIdempotencyMiddleware(BaseHTTPMiddleware):
    """ASGI middleware for idempotency handling.

    Attributes:
        config: Configuration object
        middleware: Core middleware instance
    """

    def __init__(
        self,
        app: Any,
        store: Any,
        config: IdempotencyConfig | None = None,
    ) -> None:
        """Initialize the ASGI middleware.

        Args:
            app: The ASGI application
            store: A StoreAdapter, a cache-style store or a Redis client
            config: Configuration object (uses defaults if not provided)

        Raises:
            ConfigurationError: If the store exposes neither calling convention
        """
        super().__init__(app)
        self.config = config or IdempotencyConfig()
        self.middleware = IdempotencyMiddleware(store, self.config)

    async def dispatch(
        self,
        request: StarletteRequest,
        call_next: Callable[[StarletteRequest], Awaitable[Response]],
    ) -> Response:
        """Process an ASGI request with idempotency handling.

        Args:
            request: The Starlette request object
            call_next: Function to call the next middleware/handler

        Returns:
            Starlette Response object
        """
        internal_request = self._convert_request(request)
        if self.middleware.extract_key(internal_request) is None:
            return await call_next(request)

        # Starlette caches the body and hands it to the downstream app as well
        internal_request.body = await request.body()

        async def handler(_req: Request) -> HandlerResult:
            response = await call_next(request)
            body = getattr(response, "body_iterator", None)
            if body is None:
                body = getattr(response, "body", b"")
            return response.status_code, dict(response.headers), body

        result = await self.middleware.process(internal_request, handler)
        return self._convert_response(result)

    def _convert_request(self, request: StarletteRequest) -> Request:
        """Convert a Starlette request to the internal Request format.

        The body is left empty; it is only read for requests that are
        subject to idempotency.
        """
        return Request(
            method=request.method,
            path=request.url.path,
            query_string=request.scope.get("query_string", b"").decode("latin-1"),
            headers=dict(request.headers),
        )

    def _convert_response(self, response: ReplayedResponse) -> Response:
        return Response(
            content=response.body,
            status_code=response.status,
            headers=response.headers,
        )
