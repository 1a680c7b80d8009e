from __future__ import annotations

from fastapi import APIRouter

from app.core.config import settings
from app.schemas.generation import HealthResponse

SERVICE_NAME = "Prompt Image Gateway - Image Generation API"
SERVICE_VERSION = "1.0.0"

router = APIRouter(tags=["Health"])


@router.get("/", response_model=HealthResponse)
@router.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Health check endpoint.

    Returns the service status and a map of the public endpoints. Used by
    load balancers and monitoring systems to determine service health.
    """

    return HealthResponse(
        status="ok",
        message=SERVICE_NAME,
        endpoints={
            "generate": "/prompt/{your_prompt}",
            "models": "/models",
        },
        version=SERVICE_VERSION,
    )


@router.get("/models", response_model=list[str], tags=["Images"])
def list_models() -> list[str]:
    """List the model names accepted by the ``model`` query parameter."""

    return settings.image_api.model_names
