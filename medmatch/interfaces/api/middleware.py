"""
API Middleware - Request/response processing.

Provides:
- Request ID tracking
- Response latency measurement
- Error handling into the response envelope
- Rate limiting
"""

from __future__ import annotations

import logging
import time
import uuid
from collections import defaultdict
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from medmatch.config.errors import ErrorCode, MedmatchError, validation_entry

logger = logging.getLogger(__name__)


def error_response(
    status_code: int,
    errors: list[dict[str, Any]],
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Render the error envelope."""
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "errors": errors},
        headers=headers,
    )


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Attach request ID for tracing across logs and responses."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        # Store in request state for access in handlers
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id

        return response


class LatencyMiddleware(BaseHTTPMiddleware):
    """Track and log request latency."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        start_time = time.perf_counter()

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        response.headers["X-Response-Time-Ms"] = f"{duration_ms:.2f}"

        request_id = getattr(request.state, "request_id", "unknown")
        logger.info(
            "%s %s status=%d latency_ms=%.2f request_id=%s",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            request_id,
        )

        return response


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Convert exceptions to the error envelope. Single boundary for all routes."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        try:
            return await call_next(request)
        except MedmatchError as e:
            request_id = getattr(request.state, "request_id", "unknown")
            logger.info(
                "%s status=%d request_id=%s",
                e,
                e.status_code,
                request_id,
            )
            return error_response(e.status_code, e.to_entries())
        except Exception as e:
            request_id = getattr(request.state, "request_id", "unknown")
            logger.exception("Unhandled error: %s request_id=%s", str(e), request_id)
            return error_response(
                500,
                [
                    {
                        "type": "http",
                        "details": "Internal server error",
                        "code": ErrorCode.INTERNAL_SERVER_ERROR.value,
                    }
                ],
            )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render pydantic request validation failures as 400 validation entries."""
    errors = []
    for err in exc.errors():
        loc = err.get("loc", ())
        where = str(loc[0]) if loc else "other"
        names = [str(part) for part in loc[1:] if isinstance(part, str)]
        field = names[-1] if names else "no_field"
        errors.append(validation_entry(where, field, err.get("msg", "Invalid value")))

    logger.info("Validation failed on %s: %d errors", request.url.path, len(errors))
    return error_response(400, errors)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Simple in-memory rate limiting per client IP."""

    def __init__(self, app: ASGIApp, requests_per_minute: int = 60) -> None:
        super().__init__(app)
        self.requests_per_minute = requests_per_minute
        self.buckets: dict[str, dict[str, Any]] = defaultdict(
            lambda: {"window": 0, "tokens": 0}
        )
        self.window = 0

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        # Skip rate limiting for health checks
        if request.url.path == "/health":
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        window = int(time.time() // 60)  # 1-minute windows

        # Buckets only live for the current window
        if window != self.window:
            self.window = window
            self.buckets.clear()

        bucket = self.buckets[client_ip]

        # Reset bucket if new window
        if bucket["window"] != window:
            bucket["window"] = window
            bucket["tokens"] = self.requests_per_minute

        if bucket["tokens"] <= 0:
            request_id = getattr(request.state, "request_id", "unknown")
            logger.warning(
                "Rate limit exceeded for %s request_id=%s",
                client_ip,
                request_id,
            )
            return error_response(
                429,
                [
                    {
                        "type": "http",
                        "details": "Too many requests. Please retry after 60 seconds.",
                        "code": ErrorCode.RATE_LIMITED.value,
                    }
                ],
                headers={"Retry-After": "60"},
            )

        bucket["tokens"] -= 1

        response = await call_next(request)
        response.headers["X-RateLimit-Remaining"] = str(bucket["tokens"])
        response.headers["X-RateLimit-Limit"] = str(self.requests_per_minute)

        return response
