"""Application-level exception types.

Errors raised by the gateway routes, services and the upstream image client.
Each carries a stable code; the HTTP status is derived from the class by the
exception handlers.

Taxonomy:
- ValidationAppError: missing/invalid client input (400)
- RateLimitedAppError: admission denied, carries the wait time (429)
- NotFoundAppError: unmatched route or resource (404)
- UpstreamAppError and subclasses: the image API failed or answered with
  something that is not an image (500)
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TypedDict


class ErrorDetails(TypedDict, total=False):
    """Optional structured context rendered under ``error.details``."""

    hint: str
    retry_after: int
    upstream_status: int
    content_type: str
    cause: str
    available_endpoints: list[str]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input/config validation fails."""


class NotFoundAppError(AppError):
    """Raised when the requested endpoint or resource does not exist."""


@dataclass
class RateLimitedAppError(AppError):
    """Raised when a client asks again before its admission interval elapsed."""

    wait_time_seconds: float = 0.0

    @property
    def retry_after_seconds(self) -> int:
        return max(0, math.ceil(self.wait_time_seconds))


@dataclass
class UpstreamAppError(AppError):
    """Raised when the upstream image API fails or misbehaves.

    Attributes:
        upstream_status: HTTP status returned upstream, when one was received.
        upstream_body: Response body text, when one was received.
    """

    upstream_status: int | None = None
    upstream_body: str | None = None


class UpstreamStatusError(UpstreamAppError):
    """Upstream answered with a non-success HTTP status."""


class UpstreamTimeoutError(UpstreamAppError):
    """Upstream did not answer within the configured bound."""


class ContentTypeMismatchError(UpstreamAppError):
    """Upstream answered with a payload that is not an image."""


class EmptyPayloadError(UpstreamAppError):
    """Upstream answered with an empty body."""


class ImageGenerationAppError(UpstreamAppError):
    """Uniform failure raised by image clients.

    The specific cause (status, content type, empty payload, timeout,
    transport error) is chained as ``__cause__``.
    """
