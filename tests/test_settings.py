from __future__ import annotations

import importlib

import pytest

from config import get_settings_module


@pytest.mark.parametrize(
    "env, expected",
    [
        ("production", "config.production"),
        ("PROD", "config.production"),
        ("test", "config.testing"),
        ("staging", "config.development"),
    ],
)
def test_app_env_selects_settings(monkeypatch, env, expected):
    monkeypatch.delenv("TIMECLOCK_SETTINGS", raising=False)
    monkeypatch.setenv("APP_ENV", env)
    assert get_settings_module() == expected


def test_explicit_settings_module_wins(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.setenv("TIMECLOCK_SETTINGS", "config.testing")
    assert get_settings_module() == "config.testing"


def test_testing_settings():
    settings = importlib.import_module("config.testing")

    assert settings.TESTING is True
    assert settings.TIMEZONE == "America/Chicago"
    assert settings.MAX_PUNCH_HOURS == 24.0
