"""
Pytest configuration and shared fixtures.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock

import pytest

from booking.ports import AuthPort, AvailabilityPort, BookingPort, NotificationPort
from config import Settings
from models.service import ProviderRef, ServiceRef

# Monday 2026-10-19, 09:00 UTC
FROZEN_NOW = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)


class FakeBackend(AvailabilityPort, BookingPort):
    """In-memory booking API; every call is an AsyncMock for assertions."""

    def __init__(self, slots: Optional[List[Any]] = None, booking: Optional[Dict] = None):
        self.get_available_slots = AsyncMock(
            return_value=["09:00", "10:00", "14:00"] if slots is None else slots
        )
        self.create_booking = AsyncMock(
            return_value=booking or {"booking": {"id": "bk_1234567890", "status": "pending"}}
        )
        # Empty window: callers fall back to the next N days
        self.get_available_days = AsyncMock(return_value=[])

    async def get_available_slots(self, provider_id, day):  # replaced in __init__
        raise NotImplementedError

    async def get_available_days(self, provider_id, service_id, start, days_count):  # replaced in __init__
        raise NotImplementedError

    async def create_booking(self, request):  # replaced in __init__
        raise NotImplementedError


class FakeAuth(AuthPort):
    def __init__(self, authenticated: bool = True):
        self.authenticated = authenticated
        self.login = AsyncMock()

    @property
    def is_authenticated(self) -> bool:
        return self.authenticated

    async def login(self) -> None:  # replaced in __init__
        raise NotImplementedError


class FakeNotifications(NotificationPort):
    """Records scheduled notifications instead of showing them."""

    def __init__(self):
        self.scheduled: List[Dict[str, Any]] = []
        self.cancelled: List[str] = []
        self.fail = False

    async def schedule_local_notification(self, title, body, data=None, trigger_at=None):
        if self.fail:
            raise RuntimeError("Notification permission denied")
        handle = f"notif_{len(self.scheduled) + 1}"
        self.scheduled.append(
            {"handle": handle, "title": title, "body": body, "data": data, "trigger_at": trigger_at}
        )
        return handle

    async def cancel(self, handle):
        pending = any(n["handle"] == handle for n in self.scheduled)
        if pending:
            self.cancelled.append(handle)
        return pending

    @property
    def immediate(self) -> List[Dict[str, Any]]:
        return [n for n in self.scheduled if n["trigger_at"] is None]

    @property
    def reminders(self) -> List[Dict[str, Any]]:
        return [n for n in self.scheduled if n["trigger_at"] is not None]


@pytest.fixture
def frozen_clock():
    """Clock returning a fixed 'now'."""
    return lambda: FROZEN_NOW


@pytest.fixture
def settings():
    """Settings independent of the environment and any .env file."""
    return Settings(
        _env_file=None,
        api_base_url="https://api.test/api",
        api_token="test_token",
        api_max_retries=3,
        api_retry_delay_seconds=0,
        timezone="UTC",
        log_level="INFO",
        environment="test",
    )


@pytest.fixture
def service():
    return ServiceRef(id=12, name="Silk Press", price=80.0, duration_minutes=90)


@pytest.fixture
def provider():
    return ProviderRef(id="prov-42", business_name="Glow Studio")


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def auth():
    return FakeAuth()


@pytest.fixture
def notifications():
    return FakeNotifications()
