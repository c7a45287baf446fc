"""
API Middleware - Request context, failure envelopes and rate limiting.

Failures leave the API in the same envelope successes use, so the frontend
only ever reads ``{success, message, ...}``:
- invalid request body: 400, "Query is required" when the query is absent
- BuilderSearchError: status derived from its error code
- unexpected exception on a search route: 500, "Search failed"
- per-IP quota exhausted: 429 with Retry-After
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from buildersearch.config.errors import BuilderSearchError, ErrorCode

logger = logging.getLogger(__name__)

QUERY_REQUIRED_MESSAGE = "Query is required"
VALIDATION_MESSAGE = "Validation error"

_STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.SEARCH_INVALID_QUERY: 400,
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.SECURITY_RATE_LIMITED: 429,
    ErrorCode.SEARCH_INDEX_UNAVAILABLE: 503,
    ErrorCode.STORAGE_CONNECTION_FAILED: 503,
    ErrorCode.STORAGE_READ_FAILED: 503,
}

# A falsy query is reported the same way whether it is absent, null or blank
_EMPTY_QUERY_ERRORS = frozenset({"missing", "string_too_short", "string_type"})

_UNLIMITED_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})


def error_response(
    request: Request,
    status_code: int,
    code: ErrorCode,
    message: str,
    details: dict[str, Any] | None = None,
    **extra: Any,
) -> JSONResponse:
    """Build a failure envelope carrying the request ID."""
    content = {
        "success": False,
        "message": message,
        **extra,
        "error": {"code": code.value, "message": message, "details": details or {}},
        "request_id": getattr(request.state, "request_id", "unknown"),
    }
    return JSONResponse(status_code=status_code, content=content)


def _field_errors(exc: RequestValidationError) -> list[dict[str, str]]:
    """Flatten pydantic errors to ``{field, message}`` pairs on the body."""
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        errors.append({"field": ".".join(loc), "message": err.get("msg", "")})
    return errors


def _query_missing(exc: RequestValidationError) -> bool:
    for err in exc.errors():
        loc = tuple(err.get("loc", ()))
        if loc in (("body",), ("body", "query")) and err.get("type") in _EMPTY_QUERY_ERRORS:
            return True
    return False


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report invalid search bodies as 400 with per-field errors."""
    errors = _field_errors(exc)
    message = QUERY_REQUIRED_MESSAGE if _query_missing(exc) else VALIDATION_MESSAGE
    logger.info("Rejected %s %s: %s", request.method, request.url.path, errors)
    return error_response(
        request,
        400,
        ErrorCode.VALIDATION_ERROR,
        message,
        {"errors": errors},
        errors=errors,
    )


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assign a request ID and log the request with its latency."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        start_time = time.perf_counter()

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time-Ms"] = f"{duration_ms:.2f}"
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
    """Turn exceptions escaping the routes into failure envelopes."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        try:
            return await call_next(request)
        except BuilderSearchError as e:
            logger.error(
                "%s on %s: %s details=%s",
                e.code.value,
                request.url.path,
                e.message,
                e.details,
            )
            return error_response(
                request, _STATUS_BY_CODE.get(e.code, 500), e.code, e.message, e.details
            )
        except Exception:
            logger.exception("Unhandled error on %s", request.url.path)
            message = (
                "Search failed"
                if request.url.path.startswith("/api/search")
                else "Internal server error"
            )
            return error_response(request, 500, ErrorCode.INTERNAL_ERROR, message)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Fixed one-minute window request quota per client IP."""

    def __init__(self, app: ASGIApp, requests_per_minute: int = 60) -> None:
        super().__init__(app)
        self.requests_per_minute = requests_per_minute
        self._windows: dict[str, tuple[int, int]] = {}

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if request.url.path in _UNLIMITED_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = int(time.time())
        window = now // 60

        seen_window, used = self._windows.get(client_ip, (window, 0))
        if seen_window != window:
            used = 0

        if used >= self.requests_per_minute:
            retry_after = 60 - now % 60
            logger.warning("Rate limit exceeded for %s", client_ip)
            response = error_response(
                request,
                429,
                ErrorCode.SECURITY_RATE_LIMITED,
                "Too many requests from this IP, please try again later.",
                {"retry_after": retry_after},
            )
            response.headers["Retry-After"] = str(retry_after)
            return response

        self._windows[client_ip] = (window, used + 1)

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.requests_per_minute)
        response.headers["X-RateLimit-Remaining"] = str(self.requests_per_minute - used - 1)
        return response
