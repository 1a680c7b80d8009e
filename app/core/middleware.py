"""HTTP middleware for request correlation and CORS.

- ``request_id_middleware`` accepts an incoming X-Request-ID header or
  generates a UUID, keeps it in contextvars for log correlation and echoes it
  back together with the request duration.
- ``cors_middleware`` attaches permissive CORS headers to every response,
  answers ``OPTIONS`` directly and renders unexpected exceptions as the
  generic 500 JSON body so error responses keep their CORS headers.

Usage (last registered runs first):
    app.middleware("http")(cors_middleware)
    app.middleware("http")(request_id_middleware)
"""

from __future__ import annotations

import time
import uuid

from fastapi import Request, Response

from app.core.config import settings
from app.core.exception_handlers import general_exception_handler
from app.core.logging import clear_request_id, set_request_id

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


async def request_id_middleware(request: Request, call_next) -> Response:
    """HTTP middleware for request ID generation and propagation.

    If the client provides the configured request id header (X-Request-ID by
    default), that value is used. Otherwise a new UUID is generated.

    Side Effects:
        - Sets request_id in contextvars (accessible via get_request_id())
        - Clears request_id from contextvars after request completes
        - Adds the request id header and X-Request-Duration-ms to the response
    """

    header_name = settings.log.request_id_header
    request_id = request.headers.get(header_name) or str(uuid.uuid4())
    set_request_id(request_id)
    start = time.perf_counter()
    try:
        response: Response = await call_next(request)
    finally:
        clear_request_id()

    duration_ms = (time.perf_counter() - start) * 1000
    response.headers[header_name] = request_id
    response.headers.setdefault("X-Request-Duration-ms", f"{duration_ms:.2f}")
    return response


async def cors_middleware(request: Request, call_next) -> Response:
    """Attach CORS headers to every response and short-circuit preflight."""

    if request.method == "OPTIONS":
        response = Response(status_code=200)
    else:
        try:
            response = await call_next(request)
        except Exception as exc:
            response = await general_exception_handler(request, exc)

    response.headers.update(CORS_HEADERS)
    return response
