"""Capabilities the booking flow consumes from its collaborators."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Any, Mapping, Sequence, Union

from models.booking import BookingRequest


class AvailabilityPort(ABC):
    @abstractmethod
    async def get_available_slots(
        self, provider_id: str, day: date
    ) -> Sequence[Union[str, Mapping[str, Any]]]:
        """Return bookable start times ("HH:MM" strings or slot objects) for a day."""
        raise NotImplementedError

    @abstractmethod
    async def get_available_days(
        self, provider_id: str, service_id: int, start: date, days_count: int
    ) -> Sequence[Mapping[str, Any]]:
        """Return the booking window as {date, dayOfWeek, isAvailable, workingHours?} entries."""
        raise NotImplementedError


class BookingPort(ABC):
    @abstractmethod
    async def create_booking(self, request: BookingRequest) -> Mapping[str, Any]:
        """Create a booking. Returns {booking: {id, ...}, loyaltyPoints?}."""
        raise NotImplementedError


class AuthPort(ABC):
    @property
    @abstractmethod
    def is_authenticated(self) -> bool:
        raise NotImplementedError

    @property
    def access_token(self) -> str | None:
        return None

    @abstractmethod
    async def login(self) -> None:
        """Ask the user to complete authentication."""
        raise NotImplementedError


class NotificationPort(ABC):
    @abstractmethod
    async def schedule_local_notification(
        self,
        title: str,
        body: str,
        data: Mapping[str, Any] | None = None,
        trigger_at: datetime | None = None,
    ) -> str:
        """Schedule a local notification. Immediate when trigger_at is None. Returns a handle."""
        raise NotImplementedError

    @abstractmethod
    async def cancel(self, handle: str) -> bool:
        """Cancel a pending notification. Returns True if one was removed."""
        raise NotImplementedError
