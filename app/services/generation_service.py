"""Image generation service turning raw request input into an image download.

It handles:
- Lenient parsing of query parameters into GenerationParams
- Prompt sanitization and validation
- Delegation to the upstream image client
- Download filename derivation
"""

from __future__ import annotations

import logging
import random
import re
from dataclasses import dataclass

from app.adapters.image.base import AbstractImageClient, GeneratedImage
from app.core.config import ImageAPISettings, settings
from app.core.errors import ValidationAppError
from app.schemas.generation import GenerationParams
from app.utils.text_normalizer import extension_for_content_type, sanitize_prompt, slugify_filename

logger = logging.getLogger(__name__)

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def parse_int(value: str | None) -> int | None:
    """Parse the leading integer of a query value, ``None`` when there is none.

    Examples:
        >>> parse_int("512px")
        512
        >>> parse_int("abc") is None
        True
    """
    if value is None:
        return None
    match = _LEADING_INT_RE.match(value)
    return int(match.group(1)) if match else None


def parse_generation_params(
    *,
    width: str | None = None,
    height: str | None = None,
    seed: str | None = None,
    model: str | None = None,
    enhance: str | None = None,
    image_settings: ImageAPISettings | None = None,
    rng: random.Random | None = None,
) -> GenerationParams:
    """Build GenerationParams from raw query values without ever failing.

    - width/height: missing, unparseable or non-positive values use the defaults
    - seed: missing or unparseable values become a random seed
    - model: unknown names fall back silently to the default model
    - enhance: only the literal ``"true"`` enables it
    """
    cfg = image_settings or settings.image_api
    rng = rng or random

    parsed_width = parse_int(width)
    parsed_height = parse_int(height)
    parsed_seed = parse_int(seed)

    return GenerationParams(
        width=parsed_width if parsed_width and parsed_width > 0 else cfg.default_width,
        height=parsed_height if parsed_height and parsed_height > 0 else cfg.default_height,
        seed=parsed_seed if parsed_seed is not None else rng.randrange(cfg.max_seed),
        model=model if model in cfg.model_names else cfg.default_model,
        enhance=enhance == "true",
    )


def require_prompt(raw_prompt: str | None) -> str:
    """Sanitize the prompt, rejecting requests that carry none.

    Raises:
        ValidationAppError: If nothing remains after sanitization.
    """
    prompt = sanitize_prompt(raw_prompt)
    if not prompt:
        raise ValidationAppError(
            code="bad_request",
            message="Prompt is required. Use /prompt/{your_prompt}",
            details={"hint": "URL-encode the prompt as the last path segment"},
        )
    return prompt


@dataclass(frozen=True)
class GenerationResult:
    """Image payload plus the filename offered to the client."""

    image: GeneratedImage
    filename: str


class ImageGenerationService:
    """Orchestrates a single prompt-to-image request.

    Attributes:
        client: Upstream image client adapter.
    """

    def __init__(self, client: AbstractImageClient) -> None:
        self.client = client

    async def generate(self, prompt: str, params: GenerationParams) -> GenerationResult:
        """Generate an image for a sanitized prompt.

        Args:
            prompt: Prompt already passed through :func:`require_prompt`.
            params: Generation options.

        Returns:
            GenerationResult with the image bytes and a download filename.

        Raises:
            ImageGenerationAppError: If the upstream call fails.
        """
        logger.info(
            "generation.started",
            extra={
                "prompt": prompt,
                "prompt_chars": len(prompt),
                "model": params.model,
                "width": params.width,
                "height": params.height,
                "seed": params.seed,
                "enhance": params.enhance,
            },
        )

        image = await self.client.fetch_image(prompt, params)
        filename = f"{slugify_filename(prompt)}.{extension_for_content_type(image.content_type)}"

        logger.info(
            "generation.completed",
            extra={"bytes": image.size, "content_type": image.content_type},
        )
        return GenerationResult(image=image, filename=filename)
