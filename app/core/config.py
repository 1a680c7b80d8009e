"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Map environments to their respective .env files (relative to PROJECT_ROOT)
ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

# Select the .env file for the current environment
_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def parse_csv(value: str | None) -> list[str]:
    """Split a comma-separated setting into trimmed, non-empty items.

    Examples:
        >>> parse_csv("flux, turbo")
        ['flux', 'turbo']
        >>> parse_csv(None)
        []
    """
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _build_image_api_settings() -> "ImageAPISettings":
    """Build upstream image API settings from environment."""

    return ImageAPISettings()


def _build_app_settings() -> "AppSettings":
    """Build app settings from environment."""

    return AppSettings()


def _build_log_settings() -> "LogSettings":
    """Build logging settings from environment."""

    return LogSettings()


class ImageAPISettings(BaseSettings):
    """Upstream image generation API configuration."""

    url: str = Field(
        "https://image.pollinations.ai/prompt",
        description="Base URL of the upstream image API; the prompt is appended as a path segment",
    )
    timeout_seconds: float = Field(
        120.0,
        description="Upper bound for a single upstream generation call",
        gt=0,
    )
    user_agent: str = Field(
        "prompt-image-gateway/1.0",
        description="User-Agent header sent upstream",
    )
    models: str = Field(
        "flux,turbo",
        description="Comma-separated list of model names clients may select",
    )
    default_model: str = Field(
        "flux",
        description="Model used when the client asks for none or an unknown one",
    )
    default_width: int = Field(1024, ge=1)
    default_height: int = Field(1024, ge=1)
    max_seed: int = Field(
        1_000_000,
        description="Random seeds are drawn from [0, max_seed)",
        ge=1,
    )

    model_config = SettingsConfigDict(
        env_prefix="IMAGE_API_",
        case_sensitive=False,
    )

    @property
    def model_names(self) -> list[str]:
        """Allowed model names, always including the default model."""
        names = parse_csv(self.models)
        if self.default_model not in names:
            names.insert(0, self.default_model)
        return names


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    host: str = Field(
        "0.0.0.0",
        description="Interface the HTTP server binds to",
    )
    port: int = Field(
        16384,
        description="Listening port",
        validation_alias=AliasChoices("APP_PORT", "PORT"),
    )
    graceful_shutdown_timeout_seconds: int = Field(
        30,
        description="How long in-flight requests may run after a termination signal",
        ge=0,
    )

    rate_limit_enabled: bool = Field(
        True,
        description="Enable per-client rate limiting on the generation endpoint",
    )
    rate_limit_interval_ms: int = Field(
        30000,
        description="Minimum interval between two admitted requests from one client",
        ge=1,
        validation_alias=AliasChoices("APP_RATE_LIMIT_INTERVAL_MS", "RATE_LIMIT_INTERVAL"),
    )
    rate_limit_cleanup_interval_seconds: float = Field(
        3600.0,
        description="Period of the sweep that evicts stale client records",
        gt=0,
    )
    rate_limit_include_headers: bool = Field(
        True,
        description="Include a Retry-After header when throttling",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
        populate_by_name=True,
    )

    @property
    def rate_limit_interval_seconds(self) -> float:
        return self.rate_limit_interval_ms / 1000


class LogSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="'json' or 'plain'")
    output: str = Field("stdout", description="'stdout' or 'file'")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(10 * 1024 * 1024, description="Rotate file after N bytes (0 disables rotation)")
    backup_count: int = Field(5, description="Rotated files to keep")
    request_id_header: str = Field("X-Request-ID", description="Header carrying the correlation id")

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if settings are invalid.
    """

    app_env: str = APP_ENV
    image_api: ImageAPISettings = Field(default_factory=_build_image_api_settings)
    app: AppSettings = Field(default_factory=_build_app_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
# Nested settings are created via default_factory so env loading works.
settings = Settings()
