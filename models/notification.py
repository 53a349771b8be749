"""Notification models for confirmations and appointment reminders."""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class LocalNotification(BaseModel):
    """Notification content handed to the device notification center."""

    handle: str
    title: str
    body: str
    data: Dict[str, Any] = Field(default_factory=dict)
    trigger_at: Optional[datetime] = None  # None means deliver immediately

    model_config = ConfigDict(frozen=True)


class ReminderSchedule(BaseModel):
    """Reminder created for a booking. Only exists when fire_at is in the future."""

    booking_id: str
    fire_at: datetime
    offset_minutes: int = Field(..., ge=0)
    handle: str

    model_config = ConfigDict(frozen=True)


class NotificationPreferences(BaseModel):
    """Per-type notification toggles chosen by the user."""

    booking_confirmations: bool = True
    booking_reminders: bool = True

    model_config = ConfigDict(frozen=True)
