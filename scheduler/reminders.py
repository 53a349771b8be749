"""
Booking confirmations and appointment reminders.
Reminders fire a configurable number of minutes before the appointment
(60 by default) and are only created when that moment is still ahead.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from booking.ports import NotificationPort
from models.notification import NotificationPreferences, ReminderSchedule
from utils.constants import DEFAULT_REMINDER_OFFSET_MINUTES
from utils.datetime_utils import utc_now
from utils.exceptions import NotificationSchedulingError

logger = logging.getLogger(__name__)

CONFIRMATION_TITLE = "Booking Confirmed! ✅"
REMINDER_TITLE = "Upcoming Appointment Reminder"


class NotificationScheduler:
    """Schedules booking notifications through the device notification center."""

    def __init__(
        self,
        notifications: NotificationPort,
        preferences: Optional[NotificationPreferences] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._notifications = notifications
        self._preferences = preferences or NotificationPreferences()
        self._clock = clock

    async def notify_confirmation(
        self, provider_name: str, service_name: str, when_label: str
    ) -> Optional[str]:
        """
        Show an immediate booking confirmation.

        Args:
            provider_name: Provider display name
            service_name: Booked service
            when_label: Human readable appointment time

        Returns:
            Notification handle, or None if confirmations are turned off

        Raises:
            NotificationSchedulingError: If the notification center fails
        """
        if not self._preferences.booking_confirmations:
            logger.info("Booking confirmations disabled, skipping confirmation notice")
            return None

        try:
            handle = await self._notifications.schedule_local_notification(
                CONFIRMATION_TITLE,
                f"Your {service_name} appointment with {provider_name} is confirmed for {when_label}",
                {"type": "booking_confirmation"},
            )
        except Exception as e:
            logger.error(f"Failed to show booking confirmation: {e}", exc_info=True)
            raise NotificationSchedulingError(f"Confirmation notice failed: {e}") from e

        logger.info(f"Booking confirmation shown ({handle})")
        return handle

    async def schedule_reminder(
        self,
        booking_id: str,
        provider_name: str,
        service_name: str,
        appointment_at: datetime,
        offset_minutes: int = DEFAULT_REMINDER_OFFSET_MINUTES,
    ) -> Optional[ReminderSchedule]:
        """
        Schedule a reminder offset_minutes before the appointment.

        Args:
            booking_id: Booking ID
            provider_name: Provider display name
            service_name: Booked service
            appointment_at: Appointment start (naive values are taken as UTC)
            offset_minutes: Minutes before the appointment to remind

        Returns:
            ReminderSchedule, or None when the reminder time has already
            passed or reminders are turned off

        Raises:
            ValueError: If offset_minutes is negative
            NotificationSchedulingError: If the notification center fails
        """
        if offset_minutes < 0:
            raise ValueError(f"Invalid reminder offset: {offset_minutes} minutes")

        if appointment_at.tzinfo is None:
            appointment_at = appointment_at.replace(tzinfo=timezone.utc)

        fire_at = appointment_at - timedelta(minutes=offset_minutes)
        if fire_at <= self._clock():
            logger.warning(
                f"Reminder time {fire_at.isoformat()} for booking {booking_id} "
                "is in the past, not scheduling"
            )
            return None

        if not self._preferences.booking_reminders:
            logger.info(f"Booking reminders disabled, skipping reminder for {booking_id}")
            return None

        try:
            handle = await self._notifications.schedule_local_notification(
                REMINDER_TITLE,
                f"You have a {service_name} appointment with {provider_name} "
                f"in {offset_minutes} minutes",
                {
                    "type": "booking_reminder",
                    "bookingId": booking_id,
                    "providerName": provider_name,
                    "serviceName": service_name,
                },
                trigger_at=fire_at,
            )
        except Exception as e:
            logger.error(f"Failed to schedule reminder for booking {booking_id}: {e}", exc_info=True)
            raise NotificationSchedulingError(f"Reminder scheduling failed: {e}") from e

        logger.info(f"Reminder for booking {booking_id} scheduled at {fire_at.isoformat()}")
        return ReminderSchedule(
            booking_id=booking_id,
            fire_at=fire_at,
            offset_minutes=offset_minutes,
            handle=handle,
        )

    async def cancel_reminder(self, schedule: ReminderSchedule) -> bool:
        """Cancel a scheduled reminder. Returns True if it was still pending."""
        try:
            cancelled = await self._notifications.cancel(schedule.handle)
        except Exception as e:
            logger.error(f"Failed to cancel reminder {schedule.handle}: {e}", exc_info=True)
            raise NotificationSchedulingError(f"Reminder cancellation failed: {e}") from e

        if cancelled:
            logger.info(f"Reminder for booking {schedule.booking_id} cancelled")
        return cancelled
