"""
Configuration module for the beauty-service booking flow.
Loads environment variables and provides typed, immutable configuration.

Settings are built once at startup with ``load_settings()`` and passed to
the components that need them.
"""

from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.constants import (
    DATE_OPTIONS_DAYS,
    DEFAULT_REMINDER_OFFSET_MINUTES,
    PLATFORM_FEE_RATE,
    TAX_RATE,
)

_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Booking API
    api_base_url: str = "http://localhost:5224/api"
    api_token: Optional[str] = None
    api_timeout_seconds: float = 30.0
    api_max_retries: int = 3
    api_retry_delay_seconds: float = 1.0
    api_retry_backoff: float = 2.0  # exponential backoff multiplier

    # Booking flow
    timezone: str = "UTC"
    platform_fee_rate: float = PLATFORM_FEE_RATE
    tax_rate: float = TAX_RATE
    reminder_offset_minutes: int = DEFAULT_REMINDER_OFFSET_MINUTES
    date_options_days: int = DATE_OPTIONS_DAYS

    # Notification preferences
    booking_confirmations_enabled: bool = True
    booking_reminders_enabled: bool = True

    # Logging
    log_level: str = "INFO"
    log_dir: str = "logs"

    environment: str = "development"  # development, staging, production

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    @property
    def tzinfo(self) -> ZoneInfo:
        """Timezone used to place selected slots on the calendar."""
        return ZoneInfo(self.timezone)

    def validate_all_required(self) -> None:
        """
        Validate that all required settings are present.

        Raises:
            ValueError: If required fields are missing or invalid
        """
        problems = []

        base_url = (self.api_base_url or "").strip()
        if not base_url or base_url.lower().startswith("your_"):
            problems.append("api_base_url")
        elif not base_url.startswith(("http://", "https://")):
            problems.append("api_base_url (must be http or https)")

        if self.log_level.upper() not in _VALID_LOG_LEVELS:
            problems.append("log_level")

        if self.reminder_offset_minutes < 0:
            problems.append("reminder_offset_minutes")

        if self.api_max_retries < 1:
            problems.append("api_max_retries")

        if problems:
            raise ValueError(
                f"Missing or invalid required configuration: {', '.join(problems)}. "
                "Please check your .env file."
            )


def load_settings(env_file: Optional[str] = None, **overrides) -> Settings:
    """
    Build the application settings.

    Args:
        env_file: Optional path to a .env file to load before reading the
            environment
        **overrides: Explicit values that take precedence over the environment

    Returns:
        Frozen Settings instance
    """
    env_path = Path(env_file) if env_file else Path(__file__).parent / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path)
    return Settings(**overrides)
