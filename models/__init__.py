"""Pydantic models for data validation and serialization."""

from .booking import (
    BookingDraft,
    BookingRequest,
    BookingResult,
    BookingStatus,
    LoyaltyPoints,
)
from .notification import LocalNotification, NotificationPreferences, ReminderSchedule
from .payment import ApplePay, CreditCard, GooglePay, PaymentMethod, PayPal
from .pricing import PricingBreakdown
from .service import ProviderRef, ServiceRef
from .slot import AvailableDay, TimeSlot

__all__ = [
    "ApplePay",
    "AvailableDay",
    "BookingDraft",
    "BookingRequest",
    "BookingResult",
    "BookingStatus",
    "CreditCard",
    "GooglePay",
    "LocalNotification",
    "LoyaltyPoints",
    "NotificationPreferences",
    "PaymentMethod",
    "PayPal",
    "PricingBreakdown",
    "ProviderRef",
    "ReminderSchedule",
    "ServiceRef",
    "TimeSlot",
]
