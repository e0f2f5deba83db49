"""
Configuration Tests
====================
Validates defaults, environment overrides and field validation.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from procsim.core.config import Environment, Settings, get_settings


def test_defaults(monkeypatch):
    for name in (
        "PROCSIM_TICK_INTERVAL_SECONDS",
        "PROCSIM_MAX_BACKGROUND_WORKERS",
        "PROCSIM_MONITOR_AUTOSTART",
        "PROCSIM_REPORT_TOP_FIRST",
    ):
        monkeypatch.delenv(name, raising=False)
    settings = Settings(_env_file=None)

    assert settings.app_name == "procsim"
    assert settings.tick_interval_seconds == 2.0
    assert settings.max_background_workers == 4
    assert settings.monitor_autostart is True
    assert settings.report_top_first is True


def test_env_overrides(settings):
    assert settings.environment is Environment.DEVELOPMENT
    assert settings.log_format == "console"
    assert settings.monitor_autostart is False
    assert settings.max_background_workers == 2


def test_get_settings_is_cached(settings):
    assert get_settings() is settings


@pytest.mark.parametrize(
    ("field", "value"),
    [
        ("tick_interval_seconds", 0),
        ("tick_interval_seconds", -1.5),
        ("max_background_workers", 0),
        ("log_format", "xml"),
        ("log_level", "LOUD"),
        ("port", 70000),
    ],
)
def test_invalid_values_rejected(field, value):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **{field: value})
