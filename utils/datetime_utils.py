"""
Datetime utilities for consistent timezone handling across the application.
All datetime operations should use timezone-aware datetimes.
"""

from datetime import date, datetime, time, timezone
from typing import Optional
from zoneinfo import ZoneInfo


def utc_now() -> datetime:
    """
    Get current UTC time as timezone-aware datetime.

    Returns:
        Current UTC datetime with timezone info
    """
    return datetime.now(timezone.utc)


def parse_slot_time(value: str) -> time:
    """
    Parse an "HH:MM" slot string.

    Also accepts full ISO datetimes (the time part is used), which some
    availability responses return instead of bare times.

    Raises:
        ValueError: If the string is not a recognisable time
    """
    if not value or not isinstance(value, str):
        raise ValueError(f"Invalid slot time: {value!r}")

    text = value.strip()
    if "T" in text:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).time().replace(
            second=0, microsecond=0, tzinfo=None
        )

    try:
        hours, minutes = text.split(":")[:2]
        return time(int(hours), int(minutes))
    except ValueError as e:
        raise ValueError(f"Invalid slot time: {value!r}") from e


def normalize_slot_time(value: str) -> str:
    """Normalize a slot time to zero-padded "HH:MM"."""
    return parse_slot_time(value).strftime("%H:%M")


def combine_local(day: date, slot_time: str, tz: Optional[ZoneInfo] = None) -> datetime:
    """
    Build an aware datetime from a date and an "HH:MM" slot.

    Args:
        day: Appointment date
        slot_time: Start time as "HH:MM"
        tz: Timezone of the provider (UTC if omitted)

    Returns:
        Timezone-aware appointment datetime
    """
    return datetime.combine(day, parse_slot_time(slot_time), tzinfo=tz or timezone.utc)
