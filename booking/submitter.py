"""Submits a booking draft exactly once per user intent."""

import logging
from datetime import datetime
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from booking import messages
from booking.ports import AuthPort, BookingPort
from models.booking import BookingDraft, BookingRequest, BookingResult
from payments.validation import is_payment_valid
from scheduler.reminders import NotificationScheduler
from utils.constants import DEFAULT_REMINDER_OFFSET_MINUTES
from utils.datetime_utils import combine_local, utc_now
from utils.exceptions import (
    AuthRequiredError,
    BackendError,
    NotificationSchedulingError,
    SubmissionError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class BookingSubmitter:
    """
    Creates the booking and schedules its notifications.

    A single-flight latch keeps at most one booking-create call outstanding;
    submit() calls made while it is set return None without doing anything.
    """

    def __init__(
        self,
        booking: BookingPort,
        auth: AuthPort,
        notifications: NotificationScheduler,
        timezone: Optional[ZoneInfo] = None,
        reminder_offset_minutes: int = DEFAULT_REMINDER_OFFSET_MINUTES,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._booking = booking
        self._auth = auth
        self._notifications = notifications
        self._timezone = timezone or ZoneInfo("UTC")
        self._reminder_offset_minutes = reminder_offset_minutes
        self._clock = clock
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @staticmethod
    def build_request(draft: BookingDraft) -> BookingRequest:
        """
        Build the booking API payload from a draft.

        Raises:
            ValidationError: If the draft has no date or time slot
        """
        if draft.selected_date is None or draft.selected_slot is None:
            raise ValidationError("A date and time slot are required")

        try:
            return BookingRequest(
                provider_id=draft.provider.id,
                service_id=draft.service.id,
                booking_date=draft.selected_date,
                start_time=draft.selected_slot.time,
                notes=messages.booking_notes(draft.notes, draft.service.name),
            )
        except ValueError as e:
            raise ValidationError(f"Invalid booking request: {e}") from e

    async def submit(self, draft: BookingDraft) -> Optional[BookingResult]:
        """
        Submit a booking.

        Args:
            draft: Completed booking draft

        Returns:
            BookingResult, or None if a submission is already in progress

        Raises:
            AuthRequiredError: If the user is not authenticated
            ValidationError: If the draft is incomplete or payment is invalid
            SubmissionError: If the booking could not be created
        """
        if self._in_flight:
            logger.info("Booking submission already in progress, ignoring duplicate request")
            return None

        if not self._auth.is_authenticated:
            raise AuthRequiredError("Please log in to book appointments")

        if not is_payment_valid(draft.payment_method):
            raise ValidationError("Payment method is incomplete")

        request = self.build_request(draft)

        self._in_flight = True
        try:
            result = await self._create(request)
            logger.info(
                f"Booking {result.booking_id} created for provider {request.provider_id} "
                f"on {request.booking_date} at {request.start_time}"
            )
            await self._schedule_notifications(draft, result)
            return result
        finally:
            self._in_flight = False

    async def _create(self, request: BookingRequest) -> BookingResult:
        try:
            response = await self._booking.create_booking(request)
        except BackendError as e:
            logger.error(f"Booking creation failed: {e}")
            raise SubmissionError(e.message) from e
        except Exception as e:
            logger.error(f"Unexpected error creating booking: {e}", exc_info=True)
            raise SubmissionError("Unknown error occurred") from e

        try:
            return BookingResult.from_response(response)
        except (TypeError, ValueError) as e:
            logger.error(f"Unexpected booking response: {e}")
            raise SubmissionError("The booking service returned an invalid response") from e

    async def _schedule_notifications(self, draft: BookingDraft, result: BookingResult) -> None:
        """Best effort: notification failures never undo the booking."""
        slot_time = draft.selected_slot.time
        provider_name = draft.provider.display_name
        service_name = draft.service.name
        today = self._clock().astimezone(self._timezone).date()

        try:
            await self._notifications.notify_confirmation(
                provider_name,
                service_name,
                messages.when_label(draft.selected_date, slot_time, today),
            )
        except NotificationSchedulingError as e:
            logger.error(f"Confirmation notice failed for booking {result.booking_id}: {e}")

        try:
            await self._notifications.schedule_reminder(
                result.booking_id,
                provider_name,
                service_name,
                combine_local(draft.selected_date, slot_time, self._timezone),
                self._reminder_offset_minutes,
            )
        except NotificationSchedulingError as e:
            logger.error(f"Reminder scheduling failed for booking {result.booking_id}: {e}")
