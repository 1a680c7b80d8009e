"""Global exception handlers for consistent error responses.

This module provides FastAPI exception handlers that intercept all errors
(domain, routing and unexpected) and return consistent JSON responses with
proper HTTP status codes and traceability.

Design:
- AppError subclasses → appropriate HTTP status (400, 404, 429, 500)
- Starlette HTTP errors (unmatched route, wrong method) → same JSON shape
- Unexpected Exception → generic 500 (safety net)
- All responses include request_id for distributed tracing
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.errors import (
    AppError,
    NotFoundAppError,
    RateLimitedAppError,
    UpstreamAppError,
)
from app.core.logging import get_request_id

logger = logging.getLogger(__name__)

AVAILABLE_ENDPOINTS = ["/prompt/{prompt}", "/models", "/health"]


def status_code_for(exc: AppError) -> int:
    """Map a domain error to its HTTP status code."""
    if isinstance(exc, RateLimitedAppError):
        return 429
    if isinstance(exc, NotFoundAppError):
        return 404
    if isinstance(exc, UpstreamAppError):
        return 500
    return 400


def _error_body(code: str, message: str, details: dict | None = None) -> dict:
    error_content: dict = {
        "code": code,
        "message": message,
        "request_id": get_request_id(),
    }
    # Include details only if present (optional structured context)
    if details:
        error_content["details"] = details
    return {"error": error_content}


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors with consistent JSON format.

    Rate limited responses additionally carry a top-level ``retryAfter``
    (seconds, rounded up) and, when enabled, a ``Retry-After`` header.

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with appropriate status code and error details.
    """
    status_code = status_code_for(exc)

    log = logger.error if status_code >= 500 else logger.warning
    log(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "has_details": bool(exc.details),
            "request_path": request.url.path,
        },
    )

    content = _error_body(exc.code, exc.message, dict(exc.details) if exc.details else None)
    headers: dict[str, str] = {}

    if isinstance(exc, RateLimitedAppError):
        content["retryAfter"] = exc.retry_after_seconds
        if settings.app.rate_limit_include_headers:
            headers["Retry-After"] = str(exc.retry_after_seconds)

    return JSONResponse(status_code=status_code, content=content, headers=headers or None)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render framework HTTP errors (404, 405, ...) in the application error shape."""
    if exc.status_code == 404:
        not_found = NotFoundAppError(
            code="not_found",
            message="The requested endpoint was not found",
            details={"available_endpoints": AVAILABLE_ENDPOINTS},
        )
        return await app_error_handler(request, not_found)

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body("http_error", str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors (safety net).

    Logs detailed information for debugging while returning a generic
    message. No stack traces or exception text reach the client.

    Args:
        request: FastAPI request object.
        exc: Exception instance (unexpected).

    Returns:
        JSONResponse with generic error (no implementation details leaked).
    """
    logger.error(
        "unhandled_exception",
        exc_info=(type(exc), exc, exc.__traceback__),
        extra={
            "error_type": type(exc).__name__,
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )

    return JSONResponse(
        status_code=500,
        content=_error_body(
            "internal_server_error",
            "An unexpected error occurred. Please try again later.",
        ),
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with FastAPI app.

    Args:
        app: FastAPI application instance.
    """
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(StarletteHTTPException)(http_exception_handler)
    app.exception_handler(Exception)(general_exception_handler)
