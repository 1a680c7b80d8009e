"""OpenAPI metadata and customization utilities.

Adds tags metadata and documents the rate limit response of the generation
endpoint, keeping documentation concerns decoupled from the app factory.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

TAGS_METADATA = [
    {
        "name": "Images",
        "description": "Prompt-to-image generation through the upstream image API.",
    },
    {
        "name": "Health",
        "description": "Liveness check and endpoint discovery.",
    },
]


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add tags and rate limit docs.

    - Adds tags metadata if not present
    - Documents the 429 response on the generation endpoint
    """

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        schema = original_openapi()

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        for tag in TAGS_METADATA:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        for path, methods in schema.get("paths", {}).items():
            if not path.startswith("/prompt/"):
                continue
            for method_obj in methods.values():
                if isinstance(method_obj, dict):
                    method_obj.setdefault("responses", {}).setdefault(
                        "429",
                        {
                            "description": "Too many requests; retry after `retryAfter` seconds.",
                            "headers": {"Retry-After": {"schema": {"type": "integer"}}},
                        },
                    )

        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
