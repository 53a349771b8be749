"""
Unit tests for settings loading and validation.
"""

import os
from unittest.mock import patch
from zoneinfo import ZoneInfo

import pytest
from pydantic import ValidationError

from config import Settings, load_settings


def test_defaults(monkeypatch):
    monkeypatch.delenv("API_BASE_URL", raising=False)
    settings = Settings(_env_file=None)

    assert settings.api_base_url == "http://localhost:5224/api"
    assert settings.reminder_offset_minutes == 60
    assert settings.date_options_days == 14
    assert settings.tzinfo == ZoneInfo("UTC")


def test_environment_variables(monkeypatch):
    monkeypatch.setenv("API_BASE_URL", "https://booking.example.com/api")
    monkeypatch.setenv("REMINDER_OFFSET_MINUTES", "30")
    monkeypatch.setenv("BOOKING_REMINDERS_ENABLED", "false")

    settings = Settings(_env_file=None)

    assert settings.api_base_url == "https://booking.example.com/api"
    assert settings.reminder_offset_minutes == 30
    assert settings.booking_reminders_enabled is False


def test_settings_are_frozen(settings):
    with pytest.raises(ValidationError):
        settings.api_token = "other"


def test_validate_all_required_passes(settings):
    settings.validate_all_required()


@pytest.mark.parametrize(
    "overrides",
    [
        {"api_base_url": ""},
        {"api_base_url": "your_api_url"},
        {"api_base_url": "ftp://files.example.com"},
        {"log_level": "VERBOSE"},
        {"reminder_offset_minutes": -1},
        {"api_max_retries": 0},
    ],
)
def test_validate_all_required_rejects(overrides):
    settings = Settings(_env_file=None, **overrides)

    with pytest.raises(ValueError):
        settings.validate_all_required()


def test_load_settings_reads_env_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("API_TOKEN=from_env_file\n")

    # load_dotenv writes to os.environ; restore it afterwards
    with patch.dict(os.environ, {}):
        os.environ.pop("API_TOKEN", None)
        settings = load_settings(str(env_file))

    assert settings.api_token == "from_env_file"


def test_load_settings_overrides(monkeypatch):
    monkeypatch.setenv("TIMEZONE", "UTC")

    settings = load_settings("/nonexistent/.env", timezone="Europe/Prague")

    assert settings.timezone == "Europe/Prague"
