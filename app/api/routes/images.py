from fastapi import APIRouter, Depends, Request, Response

from app.adapters.image.base import AbstractImageClient
from app.core.rate_limit import enforce_rate_limit
from app.services.generation_service import (
    ImageGenerationService,
    parse_generation_params,
    require_prompt,
)

router = APIRouter(tags=["Images"])

CACHE_CONTROL = "public, max-age=31536000, immutable"


def get_image_client(request: Request) -> AbstractImageClient:
    """Return the upstream image client owned by the running application."""
    return request.app.state.image_client


def get_generation_service(
    client: AbstractImageClient = Depends(get_image_client),
) -> ImageGenerationService:
    return ImageGenerationService(client)


@router.get(
    "/prompt/{prompt:path}",
    response_class=Response,
    responses={200: {"content": {"image/*": {}}, "description": "Generated image bytes."}},
)
async def generate_image(
    request: Request,
    prompt: str,
    width: str | None = None,
    height: str | None = None,
    seed: str | None = None,
    model: str | None = None,
    enhance: str | None = None,
    service: ImageGenerationService = Depends(get_generation_service),
) -> Response:
    """Generate an image from the URL-encoded prompt in the path.

    Query parameters are parsed leniently: bad numbers fall back to defaults,
    a missing seed becomes a random one, unknown models use the default.

    Raises:
        ValidationAppError: 400 when the prompt is missing or blank.
        RateLimitedAppError: 429 when the client asked again too soon.
        ImageGenerationAppError: 500 when the upstream call fails.
    """
    # Validate first so a request without a prompt does not burn the slot.
    clean_prompt = require_prompt(prompt)
    enforce_rate_limit(request)

    params = parse_generation_params(
        width=width,
        height=height,
        seed=seed,
        model=model,
        enhance=enhance,
    )
    result = await service.generate(clean_prompt, params)

    return Response(
        content=result.image.content,
        media_type=result.image.content_type,
        headers={
            "Content-Disposition": f'inline; filename="{result.filename}"',
            "Cache-Control": CACHE_CONTROL,
        },
    )
