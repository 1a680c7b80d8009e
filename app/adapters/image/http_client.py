"""HTTP image client adapter for prompt-in-path image APIs."""

from __future__ import annotations

import asyncio
import logging
from urllib.parse import quote

import httpx

from app.adapters.image.base import AbstractImageClient, GeneratedImage
from app.core.errors import (
    ContentTypeMismatchError,
    EmptyPayloadError,
    ErrorDetails,
    ImageGenerationAppError,
    UpstreamAppError,
    UpstreamStatusError,
    UpstreamTimeoutError,
)
from app.schemas.generation import GenerationParams

logger = logging.getLogger(__name__)

# Upstream error bodies can be whole HTML pages; keep what is useful.
MAX_ERROR_BODY_CHARS = 2000


class HttpImageClient(AbstractImageClient):
    """Client for APIs addressed as ``GET {base_url}/{prompt}?width=...``.

    Uses a shared ``httpx.AsyncClient`` so connections are pooled across
    requests. The client is owned by the application lifespan.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str,
        *,
        timeout_seconds: float = 120.0,
        user_agent: str = "prompt-image-gateway/1.0",
    ) -> None:
        """Initialize the client.

        Args:
            http_client: Shared async HTTP client.
            base_url: Endpoint the encoded prompt is appended to.
            timeout_seconds: Upper bound for one upstream call.
            user_agent: User-Agent header value.
        """
        self._http = http_client
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.user_agent = user_agent

    def build_url(self, prompt: str) -> str:
        """Embed the URL-encoded prompt as the last path segment."""
        return f"{self.base_url}/{quote(prompt, safe='')}"

    async def fetch_image(self, prompt: str, params: GenerationParams) -> GeneratedImage:
        """Request an image and validate the upstream answer.

        Raises:
            ImageGenerationAppError: On transport errors, timeouts, non-success
                status, non-image content type or empty body. The specific
                error is chained as ``__cause__``.
        """
        try:
            image = await self._request(prompt, params)
        except UpstreamAppError as exc:
            details: ErrorDetails = {"cause": exc.code}
            if exc.upstream_status is not None:
                details["upstream_status"] = exc.upstream_status
            logger.error(
                "image_client.failed",
                extra={
                    "error_code": exc.code,
                    "upstream_status": exc.upstream_status,
                    "error_msg": exc.message,
                },
            )
            raise ImageGenerationAppError(
                code="image_generation_failed",
                message=f"Failed to generate image: {exc.message}",
                details=details,
                upstream_status=exc.upstream_status,
                upstream_body=exc.upstream_body,
            ) from exc
        except Exception as exc:
            logger.error(
                "image_client.failed",
                extra={"error_code": "unexpected_error", "error_type": type(exc).__name__},
            )
            raise ImageGenerationAppError(
                code="image_generation_failed",
                message=f"Failed to generate image: {exc}",
                details={"cause": type(exc).__name__},
            ) from exc

        logger.info(
            "image_client.success",
            extra={"bytes": image.size, "content_type": image.content_type},
        )
        return image

    async def _request(self, prompt: str, params: GenerationParams) -> GeneratedImage:
        url = self.build_url(prompt)
        logger.info(
            "image_client.request",
            extra={
                "upstream": self.base_url,
                "prompt": prompt,
                "prompt_chars": len(prompt),
                "params": params.model_dump(),
            },
        )

        # httpx timeouts are per phase; the deadline bounds the whole exchange.
        try:
            async with asyncio.timeout(self.timeout_seconds):
                response = await self._http.get(
                    url,
                    params=params.to_query(),
                    headers={"User-Agent": self.user_agent},
                    timeout=self.timeout_seconds,
                )
        except (httpx.TimeoutException, TimeoutError) as exc:
            raise UpstreamTimeoutError(
                code="upstream_timeout",
                message=f"Upstream did not answer within {self.timeout_seconds:g} seconds",
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamAppError(
                code="upstream_unreachable",
                message=f"Upstream request failed: {exc}",
            ) from exc

        if not response.is_success:
            body = response.text[:MAX_ERROR_BODY_CHARS]
            raise UpstreamStatusError(
                code="upstream_error",
                message=f"{response.status_code} {response.reason_phrase}\n{body}".rstrip(),
                upstream_status=response.status_code,
                upstream_body=body,
            )

        content_type = response.headers.get("content-type", "")
        if not content_type.lower().startswith("image/"):
            raise ContentTypeMismatchError(
                code="unexpected_content_type",
                message=f"Expected image response, got {content_type or 'no content type'}",
                details={"content_type": content_type},
                upstream_status=response.status_code,
            )

        content = response.content
        if not content:
            raise EmptyPayloadError(
                code="empty_image_payload",
                message="Received empty image payload",
                upstream_status=response.status_code,
            )

        return GeneratedImage(content=content, content_type=content_type.split(";", 1)[0].strip())
