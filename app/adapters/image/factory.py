"""Factory for creating image client instances."""

import httpx

from app.adapters.image.base import AbstractImageClient
from app.adapters.image.http_client import HttpImageClient
from app.core.config import ImageAPISettings, settings
from app.core.errors import ValidationAppError


def create_image_client(
    http_client: httpx.AsyncClient,
    image_settings: ImageAPISettings | None = None,
) -> AbstractImageClient:
    """Instantiate the upstream image client from configuration.

    Args:
        http_client: Shared async HTTP client owned by the application.
        image_settings: Optional override; defaults to global settings.

    Returns:
        AbstractImageClient: Configured client instance.

    Raises:
        ValidationAppError: If the upstream URL is not an absolute http(s) URL.
    """
    cfg = image_settings or settings.image_api

    try:
        url = httpx.URL(cfg.url)
    except httpx.InvalidURL:
        url = None

    if url is None or url.scheme not in {"http", "https"} or not url.host:
        raise ValidationAppError(
            code="image_api_invalid_url",
            message=f"IMAGE_API_URL must be an absolute http(s) URL, got '{cfg.url}'",
        )

    return HttpImageClient(
        http_client,
        cfg.url,
        timeout_seconds=cfg.timeout_seconds,
        user_agent=cfg.user_agent,
    )
