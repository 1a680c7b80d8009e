"""Rate limiting glue between HTTP requests and the limiter adapter.

The limiter instance is owned by the application (``app.state.rate_limiter``)
so its lifetime matches the service and the cleanup task can share it.

Client identity (best effort, in order):
- first value of ``X-Forwarded-For``
- ``X-Real-IP``
- transport peer address
- the literal ``"unknown"``, which makes all such callers share one bucket
"""

from __future__ import annotations

import logging

from fastapi import Request

from app.adapters.rate_limit.base import AbstractRateLimiter
from app.adapters.rate_limit.in_memory import InMemoryIntervalRateLimiter
from app.core.config import AppSettings, settings
from app.core.errors import RateLimitedAppError
from app.core.logging import hash_identifier

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"


def build_rate_limiter(app_settings: AppSettings | None = None) -> AbstractRateLimiter:
    """Create the limiter configured by settings."""

    cfg = app_settings or settings.app
    return InMemoryIntervalRateLimiter(interval_seconds=cfg.rate_limit_interval_seconds)


def get_rate_limiter(request: Request) -> AbstractRateLimiter:
    """Return the limiter owned by the running application."""

    return request.app.state.rate_limiter


def get_client_identifier(request: Request) -> str:
    """Derive the rate limit key for the current request."""

    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host

    return UNKNOWN_CLIENT


def enforce_rate_limit(request: Request) -> None:
    """Consume the caller's slot or raise when it is still cooling down.

    The decision is taken and the limiter lock released before returning, so
    the slow upstream call never runs while the lock is held.

    Raises:
        RateLimitedAppError: When the client asked again too soon.
    """

    if not settings.app.rate_limit_enabled:
        return

    limiter = get_rate_limiter(request)
    client_id = get_client_identifier(request)
    decision = limiter.check_and_record(client_id)

    if decision.allowed:
        logger.info(
            "rate_limit.allowed",
            extra={"client_hash": hash_identifier(client_id)},
        )
        return

    retry_after = decision.retry_after_seconds
    logger.warning(
        "rate_limit.exceeded",
        extra={
            "client_hash": hash_identifier(client_id),
            "wait_ms": round(decision.wait_time_seconds * 1000),
            "retry_after_s": retry_after,
        },
    )
    raise RateLimitedAppError(
        code="rate_limited",
        message=f"Please wait {retry_after} seconds before making another request",
        details={"retry_after": retry_after},
        wait_time_seconds=decision.wait_time_seconds,
    )
