"""Slot models for appointment time slots and bookable days."""

from datetime import date
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from utils.datetime_utils import normalize_slot_time


class TimeSlot(BaseModel):
    """Bookable start time for a provider on the selected date."""

    time: str = Field(..., description="Start time as HH:MM")
    available: bool = True
    price: float = Field(..., ge=0)
    unavailable_reason: Optional[str] = None

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {"time": "14:00", "available": True, "price": 80.0}
        },
    )

    @field_validator("time")
    @classmethod
    def _normalize_time(cls, value: str) -> str:
        return normalize_slot_time(value)

    @classmethod
    def from_api(
        cls, raw: Union[str, Mapping[str, Any]], default_price: float
    ) -> "TimeSlot":
        """
        Build a slot from an availability response entry.

        Entries are either bare "HH:MM" strings (always available, priced at
        the service price) or objects with ``startTime``, ``isAvailable`` and
        an optional ``price``.
        """
        if isinstance(raw, str):
            return cls(time=raw, available=True, price=default_price)

        price = raw.get("price")
        return cls(
            time=raw.get("startTime") or raw.get("time"),
            available=bool(raw.get("isAvailable", raw.get("available", True))),
            price=default_price if price is None else price,
            unavailable_reason=raw.get("unavailableReason"),
        )


class AvailableDay(BaseModel):
    """A date in the provider's booking window and whether it can be booked."""

    day: date
    day_of_week: str = ""
    is_available: bool = True
    working_hours: Optional[Any] = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_api(cls, raw: Mapping[str, Any]) -> "AvailableDay":
        """Build a day from an available-days response entry (``date`` may be a full ISO datetime)."""
        value = raw.get("date")
        if isinstance(value, str):
            day = date.fromisoformat(value.split("T")[0])
        elif isinstance(value, date):
            day = value
        else:
            raise ValueError(f"Invalid available day: {value!r}")
        return cls(
            day=day,
            day_of_week=raw.get("dayOfWeek") or day.strftime("%A"),
            is_available=bool(raw.get("isAvailable", True)),
            working_hours=raw.get("workingHours"),
        )
