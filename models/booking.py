"""Booking models for the booking wizard and the booking API."""

from datetime import date
from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.payment import CreditCard, PaymentMethod
from models.service import ProviderRef, ServiceRef
from models.slot import TimeSlot


class BookingStatus(str, Enum):
    """Booking status reported by the backend."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    NO_SHOW = "no_show"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> "BookingStatus":
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.UNKNOWN


class BookingDraft(BaseModel):
    """In-progress booking owned by a single wizard."""

    service: ServiceRef
    provider: ProviderRef
    selected_date: Optional[date] = None
    selected_slot: Optional[TimeSlot] = None
    notes: str = ""
    payment_method: PaymentMethod = Field(default_factory=CreditCard)

    model_config = ConfigDict(frozen=True)


class BookingRequest(BaseModel):
    """Payload for POST /bookings."""

    provider_id: str = Field(..., alias="providerId", min_length=1)
    service_id: int = Field(..., alias="serviceId")
    booking_date: date = Field(..., alias="bookingDate")
    start_time: str = Field(..., alias="startTime", pattern=r"^\d{2}:\d{2}$")
    notes: Optional[str] = None

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "providerId": "prov-42",
                "serviceId": 12,
                "bookingDate": "2026-10-21",
                "startTime": "14:00",
                "notes": "Booking for Silk Press",
            }
        },
    )

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class LoyaltyPoints(BaseModel):
    """Loyalty points earned with a booking."""

    points_earned: int = Field(..., alias="pointsEarned")
    total_points: int = Field(..., alias="totalPoints")
    provider_name: Optional[str] = Field(default=None, alias="providerName")
    service_name: Optional[str] = Field(default=None, alias="serviceName")

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class BookingResult(BaseModel):
    """Outcome of a successful booking submission."""

    booking_id: str
    status: BookingStatus = BookingStatus.PENDING
    loyalty_points: Optional[LoyaltyPoints] = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_response(cls, data: Mapping[str, Any]) -> "BookingResult":
        """
        Parse a booking creation response.

        Accepts ``{booking: {id, status, ...}, loyaltyPoints?}`` as well as a
        bare booking object.

        Raises:
            ValueError: If the response carries no booking ID
        """
        booking = data.get("booking", data) if isinstance(data, Mapping) else None
        if not isinstance(booking, Mapping) or booking.get("id") in (None, ""):
            raise ValueError("Booking response has no booking ID")

        loyalty = data.get("loyaltyPoints")
        return cls(
            booking_id=str(booking["id"]),
            status=BookingStatus.parse(booking.get("status", "pending")),
            loyalty_points=LoyaltyPoints.model_validate(loyalty) if loyalty else None,
        )
