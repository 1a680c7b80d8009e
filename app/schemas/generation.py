"""Pydantic schemas for image generation parameters and service metadata."""

from __future__ import annotations

from pydantic import BaseModel, Field


class GenerationParams(BaseModel):
    """Options forwarded to the upstream image API."""

    width: int = Field(1024, ge=1, description="Image width in pixels.")
    height: int = Field(1024, ge=1, description="Image height in pixels.")
    seed: int = Field(
        ...,
        description="Generation seed. Callers pick a random one so identical prompts are not deduplicated upstream.",
    )
    model: str = Field("flux", description="Upstream model name.")
    enhance: bool = Field(False, description="Ask upstream to enhance the prompt.")

    def to_query(self) -> dict[str, str]:
        """Render the upstream query string parameters."""
        query = {
            "width": str(self.width),
            "height": str(self.height),
            "seed": str(self.seed),
            "model": self.model,
            "nologo": "true",
        }
        if self.enhance:
            query["enhance"] = "true"
        return query


class HealthResponse(BaseModel):
    """Service status and a map of the public endpoints."""

    status: str = Field("ok", description="Always 'ok' while the process serves requests.")
    message: str = Field(..., description="Human-readable service name.")
    endpoints: dict[str, str] = Field(default_factory=dict)
    version: str = Field(..., description="Service version.")
