"""Loads a provider's bookable days and time slots."""

import logging
from datetime import date
from typing import Any, List, Mapping, Sequence, Union

from booking import messages
from booking.ports import AvailabilityPort
from models.slot import AvailableDay, TimeSlot
from utils.constants import DATE_OPTIONS_DAYS, PROVIDER_DONE_FOR_TODAY
from utils.exceptions import AvailabilityError, BackendError

logger = logging.getLogger(__name__)


def _is_done_for_today(raw_slots: Sequence[Union[str, Mapping[str, Any]]]) -> bool:
    """A single slot carrying the closed-day marker means nothing is bookable."""
    if len(raw_slots) != 1 or not isinstance(raw_slots[0], Mapping):
        return False
    return PROVIDER_DONE_FOR_TODAY in (raw_slots[0].get("unavailableReason") or "")


class AvailabilityLoader:
    """Fetches and normalizes a provider's availability."""

    def __init__(self, availability: AvailabilityPort):
        self._availability = availability

    async def load_days(
        self,
        provider_id: str,
        service_id: int,
        start: date,
        days: int = DATE_OPTIONS_DAYS,
    ) -> List[AvailableDay]:
        """
        Load the provider's booking window.

        Falls back to every day from ``start`` on, all marked available,
        when the days cannot be loaded.

        Returns:
            Days ordered by date
        """
        try:
            raw_days = await self._availability.get_available_days(
                provider_id, service_id, start, days
            )
            loaded = sorted(
                (AvailableDay.from_api(raw) for raw in raw_days or []),
                key=lambda day: day.day,
            )
        except Exception as e:
            logger.warning(
                f"Failed to load available days for {provider_id}, showing all days: {e}"
            )
            return [AvailableDay(day=day) for day in messages.date_options(start, days)]

        logger.info(
            f"Loaded {len(loaded)} days for provider {provider_id} "
            f"({sum(day.is_available for day in loaded)} available)"
        )
        return loaded

    async def load_slots(
        self, provider_id: str, day: date, default_price: float
    ) -> List[TimeSlot]:
        """
        Load the slot list for a date.

        Args:
            provider_id: Provider ID
            day: Selected date
            default_price: Price for slots that don't carry their own

        Returns:
            Slots ordered by start time (possibly empty)

        Raises:
            AvailabilityError: If the slots could not be loaded or parsed.
                Nothing is returned partially.
        """
        try:
            raw_slots = await self._availability.get_available_slots(provider_id, day)
        except BackendError as e:
            logger.error(f"Failed to load slots for {provider_id} on {day}: {e}")
            raise AvailabilityError(e.message) from e
        except Exception as e:
            logger.error(
                f"Unexpected error loading slots for {provider_id} on {day}: {e}",
                exc_info=True,
            )
            raise AvailabilityError("Failed to load available time slots") from e

        raw_slots = raw_slots or []
        if _is_done_for_today(raw_slots):
            logger.info(f"Provider {provider_id} is done for {day}")
            return []

        try:
            slots = [TimeSlot.from_api(raw, default_price) for raw in raw_slots]
        except (TypeError, ValueError) as e:
            logger.error(f"Malformed availability response for {provider_id} on {day}: {e}")
            raise AvailabilityError("Received an invalid availability response") from e

        slots.sort(key=lambda slot: slot.time)
        logger.info(f"Loaded {len(slots)} slots for provider {provider_id} on {day}")
        return slots
