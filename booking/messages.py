"""
User-facing labels and messages for the booking wizard.
"""

from datetime import date, datetime, timedelta
from typing import List, Optional

from models.booking import BookingResult
from utils.constants import BOOKING_ID_DISPLAY_LENGTH, DATE_OPTIONS_DAYS, MAX_NOTES_LENGTH
from utils.datetime_utils import parse_slot_time
from utils.validation import sanitize_text


def date_options(today: date, days: int = DATE_OPTIONS_DAYS) -> List[date]:
    """Upcoming dates offered on the date step, starting today."""
    return [today + timedelta(days=offset) for offset in range(days)]


def format_date_label(day: date, today: Optional[date] = None) -> str:
    """'Today', 'Tomorrow', or e.g. 'Tuesday, October 20, 2026'."""
    if today is not None:
        if day == today:
            return "Today"
        if day == today + timedelta(days=1):
            return "Tomorrow"
    return f"{day.strftime('%A, %B')} {day.day}, {day.year}"


def format_time_label(slot_time: str) -> str:
    """'14:00' -> '2:00 PM'."""
    parsed = parse_slot_time(slot_time)
    hour = parsed.hour % 12 or 12
    suffix = "PM" if parsed.hour >= 12 else "AM"
    return f"{hour}:{parsed.minute:02d} {suffix}"


def when_label(day: date, slot_time: str, today: Optional[date] = None) -> str:
    return f"{format_date_label(day, today)} at {format_time_label(slot_time)}"


def end_time(start: str, duration_minutes: int) -> str:
    """End time of an appointment as HH:MM."""
    started = datetime.combine(date.min, parse_slot_time(start))
    return (started + timedelta(minutes=duration_minutes)).strftime("%H:%M")


def booking_notes(notes: str, service_name: str) -> str:
    """Sanitized notes, defaulting to a short description of the booking."""
    cleaned = sanitize_text(notes, max_length=MAX_NOTES_LENGTH)
    return cleaned or f"Booking for {service_name}"


def confirmation_message(
    result: BookingResult,
    service_name: str,
    provider_name: str,
    when: str,
) -> str:
    """Confirmation text; enhanced when loyalty points were earned."""
    short_id = result.booking_id[:BOOKING_ID_DISPLAY_LENGTH]
    if result.loyalty_points:
        points = result.loyalty_points
        return (
            f"🎉 Booking confirmed! Your {service_name} appointment with "
            f"{provider_name} is set for {when}.\n\n"
            f"You earned {points.points_earned} loyalty points "
            f"({points.total_points} total).\n"
            f"Booking ID: {short_id}"
        )
    return (
        f"✅ Booking confirmed! Your {service_name} appointment with "
        f"{provider_name} is set for {when}.\n"
        f"Booking ID: {short_id}"
    )


# Notice texts
NO_SLOTS_TITLE = "No available times"
NO_SLOTS_MESSAGE = "There are no open times on this date. Please choose another date."
AVAILABILITY_ERROR_TITLE = "Error"
AVAILABILITY_ERROR_MESSAGE = "Failed to load available time slots. Select the date again to retry."
SUBMISSION_ERROR_TITLE = "❌ Booking Failed"
AUTH_REQUIRED_TITLE = "Authentication Required"
AUTH_REQUIRED_MESSAGE = "Please log in to book appointments."
CONFIRMED_TITLE = "Booking Confirmed!"


def submission_error_message(detail: str) -> str:
    return f"There was an error creating your booking: {detail}. Please try again."
