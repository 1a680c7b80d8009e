"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before any app import so settings resolve to
the test upstream and never load a developer .env file.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["APP_ENV"] = "testing"

os.environ.setdefault("IMAGE_API_URL", "https://images.test/prompt")
os.environ.setdefault("IMAGE_API_MODELS", "flux,turbo")
os.environ.setdefault("APP_RATE_LIMIT_ENABLED", "true")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import httpx  # noqa: E402
import pytest  # noqa: E402

UPSTREAM_URL = os.environ["IMAGE_API_URL"]
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture
def png_response() -> httpx.Response:
    """A minimal successful upstream answer."""
    return httpx.Response(200, content=PNG_BYTES, headers={"Content-Type": "image/png"})
