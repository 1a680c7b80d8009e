"""Tests for environment-driven settings."""

import pytest

from app.core.config import AppSettings, ImageAPISettings, parse_csv


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("flux,turbo", ["flux", "turbo"]),
        (" flux , turbo ,", ["flux", "turbo"]),
        ("", []),
        (None, []),
    ],
)
def test_parse_csv(raw, expected):
    assert parse_csv(raw) == expected


def test_model_names_always_include_default():
    cfg = ImageAPISettings(models="turbo", default_model="flux")

    assert cfg.model_names == ["flux", "turbo"]


def test_model_names_keep_configured_order():
    cfg = ImageAPISettings(models="turbo,flux", default_model="flux")

    assert cfg.model_names == ["turbo", "flux"]


def test_app_defaults(monkeypatch):
    for name in ("APP_PORT", "PORT", "APP_RATE_LIMIT_INTERVAL_MS", "RATE_LIMIT_INTERVAL"):
        monkeypatch.delenv(name, raising=False)

    cfg = AppSettings()

    assert cfg.port == 16384
    assert cfg.rate_limit_interval_ms == 30000
    assert cfg.rate_limit_interval_seconds == 30.0


def test_plain_port_and_interval_variables_are_accepted(monkeypatch):
    monkeypatch.delenv("APP_PORT", raising=False)
    monkeypatch.delenv("APP_RATE_LIMIT_INTERVAL_MS", raising=False)
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("RATE_LIMIT_INTERVAL", "1500")

    cfg = AppSettings()

    assert cfg.port == 8080
    assert cfg.rate_limit_interval_ms == 1500
    assert cfg.rate_limit_interval_seconds == 1.5


def test_prefixed_variables_win_over_plain_ones(monkeypatch):
    monkeypatch.setenv("APP_PORT", "9000")
    monkeypatch.setenv("PORT", "8080")

    assert AppSettings().port == 9000


def test_invalid_interval_is_rejected(monkeypatch):
    monkeypatch.setenv("RATE_LIMIT_INTERVAL", "0")
    monkeypatch.delenv("APP_RATE_LIMIT_INTERVAL_MS", raising=False)

    with pytest.raises(ValueError):
        AppSettings()


def test_app_settings_expose_only_used_options():
    assert set(AppSettings.model_fields) == {
        "host",
        "port",
        "graceful_shutdown_timeout_seconds",
        "rate_limit_enabled",
        "rate_limit_interval_ms",
        "rate_limit_cleanup_interval_seconds",
        "rate_limit_include_headers",
    }
