from __future__ import annotations

"""Application factory for FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers,
lifespan-owned resources) so tests can build isolated instances.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI

from app.adapters.image.factory import create_image_client
from app.adapters.rate_limit.base import AbstractRateLimiter
from app.api.routes import health_router, images_router
from app.api.routes.health import SERVICE_VERSION
from app.core.config import settings
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import cors_middleware, request_id_middleware
from app.core.openapi import apply_openapi_customizations
from app.core.rate_limit import build_rate_limiter
from app.core.scheduler import PeriodicTask

logger = logging.getLogger(__name__)


def _build_lifespan(rate_limiter: AbstractRateLimiter):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Open the shared HTTP client and run the rate limiter sweep.

        Shutdown runs after the server stopped accepting connections and
        drained in-flight requests.
        """
        cleanup_task = PeriodicTask(
            "rate_limit_cleanup",
            settings.app.rate_limit_cleanup_interval_seconds,
            rate_limiter.cleanup,
        )

        async with httpx.AsyncClient(timeout=settings.image_api.timeout_seconds) as http_client:
            app.state.image_client = create_image_client(http_client)
            app.state.cleanup_task = cleanup_task
            await cleanup_task.start()

            logger.info(
                "app.startup",
                extra={
                    "port": settings.app.port,
                    "rate_limit_interval_ms": settings.app.rate_limit_interval_ms,
                    "rate_limit_enabled": settings.app.rate_limit_enabled,
                    "models": settings.image_api.model_names,
                    "upstream": settings.image_api.url,
                },
            )
            try:
                yield
            finally:
                await cleanup_task.stop()
                logger.info("app.shutdown")

    return lifespan


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    rate_limiter = build_rate_limiter(settings.app)

    app = FastAPI(
        title="Prompt Image Gateway",
        description=(
            "Forwards text prompts to an upstream image generation API and "
            "returns the image bytes. Each client may trigger one generation "
            "per configured interval."
        ),
        version=SERVICE_VERSION,
        license_info={
            "name": "MIT License",
            "url": "https://opensource.org/licenses/MIT",
        },
        lifespan=_build_lifespan(rate_limiter),
        redirect_slashes=False,
    )
    app.state.rate_limiter = rate_limiter

    # Middleware (last registered is outermost)
    app.middleware("http")(cors_middleware)
    app.middleware("http")(request_id_middleware)

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(health_router)
    app.include_router(images_router)

    # OpenAPI customizations (tags, rate limit response)
    apply_openapi_customizations(app)

    return app
