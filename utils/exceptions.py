"""
Exception taxonomy for the booking flow.
Network and scheduling failures are translated into these types at the
point of the failing call so the wizard can turn them into notices.
"""

from typing import Optional


class BookingFlowError(Exception):
    """Base exception for booking flow operations."""

    pass


class ValidationError(BookingFlowError):
    """Raised when a step is incomplete or payment fields are invalid."""

    pass


class InvalidTransitionError(ValidationError):
    """Raised when a wizard transition is not allowed from the current state."""

    pass


class AvailabilityError(BookingFlowError):
    """Raised when time slots cannot be loaded for the selected date."""

    pass


class SubmissionError(BookingFlowError):
    """Raised when the booking capability rejects or fails a booking."""

    pass


class AuthRequiredError(BookingFlowError):
    """Raised when a booking is attempted without an authenticated session."""

    pass


class NotificationSchedulingError(BookingFlowError):
    """Raised when a local notification cannot be scheduled."""

    pass


class BackendError(Exception):
    """Raised when the booking API returns an error or cannot be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def is_client_error(self) -> bool:
        return self.status_code is not None and 400 <= self.status_code < 500
