"""Image adapter layer - abstracts over upstream image generation APIs."""

from app.adapters.image.base import AbstractImageClient, GeneratedImage
from app.adapters.image.factory import create_image_client
from app.adapters.image.http_client import HttpImageClient

__all__ = [
    "AbstractImageClient",
    "GeneratedImage",
    "HttpImageClient",
    "create_image_client",
]
