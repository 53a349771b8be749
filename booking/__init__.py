"""Booking workflow: pricing, availability, submission and the wizard."""

from .availability import AvailabilityLoader
from .pricing import format_money, pricing
from .states import NoticeKind, RetryAction, WizardNotice, WizardState, WizardStep
from .submitter import BookingSubmitter
from .wizard import BookingWizard

__all__ = [
    "AvailabilityLoader",
    "BookingSubmitter",
    "BookingWizard",
    "NoticeKind",
    "RetryAction",
    "WizardNotice",
    "WizardState",
    "WizardStep",
    "format_money",
    "pricing",
]
