"""
Booking wizard.

Drives one booking from date selection to submission. Each user action
applies a transition from ``booking.states``; async work (slot loading,
submission) runs through the loader and submitter, and its result is
applied only while it is still relevant.
"""

import asyncio
import logging
from datetime import date, datetime
from typing import Callable, List, Optional, Set, Union
from zoneinfo import ZoneInfo

from booking import messages, states
from booking.availability import AvailabilityLoader
from booking.ports import AuthPort
from booking.pricing import pricing
from booking.states import NoticeKind, WizardNotice, WizardState, WizardStep
from booking.submitter import BookingSubmitter
from models.booking import BookingDraft, BookingResult
from models.payment import PaymentMethod
from models.pricing import PricingBreakdown
from models.service import ProviderRef, ServiceRef
from models.slot import TimeSlot
from utils.constants import DATE_OPTIONS_DAYS
from utils.datetime_utils import utc_now
from utils.exceptions import (
    AuthRequiredError,
    AvailabilityError,
    InvalidTransitionError,
    SubmissionError,
    ValidationError,
)

logger = logging.getLogger(__name__)

StateListener = Callable[[WizardState], None]


class BookingWizard:
    """Stateful booking flow for one service with one provider."""

    def __init__(
        self,
        service: ServiceRef,
        provider: ProviderRef,
        *,
        loader: AvailabilityLoader,
        submitter: BookingSubmitter,
        auth: Optional[AuthPort] = None,
        timezone: Optional[ZoneInfo] = None,
        clock: Callable[[], datetime] = utc_now,
        date_options_days: int = DATE_OPTIONS_DAYS,
    ):
        self._service = service
        self._provider = provider
        self._loader = loader
        self._submitter = submitter
        self._auth = auth
        self._timezone = timezone or ZoneInfo("UTC")
        self._clock = clock
        self._date_options_days = date_options_days
        self._state = states.initial_state(service, provider)
        self._listeners: List[StateListener] = []
        self._slot_tasks: Set[asyncio.Future] = set()
        self._closed = False

    # ========== State ==========

    @property
    def state(self) -> WizardState:
        return self._state

    @property
    def step(self) -> WizardStep:
        return self._state.step

    @property
    def draft(self) -> Optional[BookingDraft]:
        return self._state.draft

    @property
    def slots(self) -> List[TimeSlot]:
        return list(self._state.slots)

    @property
    def notice(self) -> Optional[WizardNotice]:
        return self._state.notice

    @property
    def result(self) -> Optional[BookingResult]:
        return self._state.result

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def pricing(self) -> PricingBreakdown:
        return pricing(self._service.price)

    @property
    def can_submit(self) -> bool:
        return not self._closed and self._state.can_submit

    @property
    def can_choose_another_date(self) -> bool:
        return self._state.can_choose_another_date

    def today(self) -> date:
        return self._clock().astimezone(self._timezone).date()

    def date_options(self) -> List[date]:
        """Bookable dates: the provider's open days once loaded, else the next N days."""
        if self._state.available_days:
            return [day.day for day in self._state.available_days if day.is_available]
        return messages.date_options(self.today(), self._date_options_days)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Register a callback invoked with each new state.

        Returns:
            Callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _dispatch(self, transition, *args) -> bool:
        """Apply a transition. Returns False if it was rejected."""
        if self._closed:
            logger.debug(f"Wizard closed, ignoring {transition.__name__}")
            return False

        try:
            new_state = transition(self._state, *args)
        except InvalidTransitionError as e:
            logger.debug(f"Rejected {transition.__name__}: {e}")
            return False

        if new_state is self._state:
            return True

        self._state = new_state
        for listener in list(self._listeners):
            try:
                listener(new_state)
            except Exception as e:
                logger.error(f"State listener failed: {e}", exc_info=True)
        return True

    # ========== Date & Time ==========

    async def load_available_days(self, preselect: bool = True) -> List[date]:
        """
        Load the provider's booking window.

        When ``preselect`` is set and no date has been chosen yet, the first
        open day is selected and its slots are loaded.

        Returns:
            Open dates, falling back to the next N days if the window could
            not be loaded
        """
        days = await self._loader.load_days(
            self._provider.id, self._service.id, self.today(), self._date_options_days
        )
        if not self._dispatch(states.days_loaded, days):
            return []

        options = self.date_options()
        draft = self._state.draft
        if preselect and options and draft is not None and draft.selected_date is None:
            await self.select_date(options[0])
        return options

    async def select_date(self, day: date) -> bool:
        """
        Select a date and load its slots.

        A newer selection supersedes this one; its result is then ignored.

        Returns:
            True if the slots of this selection were applied
        """
        if not self._dispatch(states.select_date, day):
            return False

        token = self._state.slots_request_token
        task = asyncio.ensure_future(
            self._loader.load_slots(self._provider.id, day, self._service.price)
        )
        self._slot_tasks.add(task)
        try:
            slots = await task
        except AvailabilityError as e:
            if not self._state.is_current(token):
                logger.info(f"Ignoring stale slot failure for {day}")
                return False
            return self._dispatch(states.slots_failed, token, str(e))
        except asyncio.CancelledError:
            if self._closed:
                return False
            raise
        finally:
            self._slot_tasks.discard(task)

        if not self._state.is_current(token):
            logger.info(f"Ignoring stale slots for {day}")
            return False
        return self._dispatch(states.slots_loaded, token, slots)

    def select_slot(self, slot: Union[TimeSlot, str]) -> bool:
        return self._dispatch(states.select_slot, slot)

    # ========== Review & Payment ==========

    def confirm_review(self) -> bool:
        return self._dispatch(states.confirm_review)

    def back(self) -> bool:
        return self._dispatch(states.back)

    def set_notes(self, notes: str) -> bool:
        return self._dispatch(states.set_notes, notes)

    def select_payment_method(self, method: Union[str, PaymentMethod]) -> bool:
        return self._dispatch(states.select_payment_method, method)

    def update_card_field(self, field: str, raw: str) -> bool:
        return self._dispatch(states.update_card_field, field, raw)

    def dismiss_notice(self) -> bool:
        return self._dispatch(states.dismiss_notice)

    # ========== Submission ==========

    async def submit(self) -> Optional[BookingResult]:
        """
        Submit the booking.

        Returns:
            BookingResult on success; None if the wizard was not ready, a
            submission was already running, or the booking failed (see
            ``notice``)
        """
        if not self._dispatch(states.submit_started):
            logger.info("Booking not ready to submit or already submitting")
            return None

        draft = self._state.draft
        try:
            result = await self._submitter.submit(draft)
        except AuthRequiredError:
            logger.warning("Booking blocked: user is not authenticated")
            self._dispatch(states.submit_blocked)
            return None
        except (SubmissionError, ValidationError) as e:
            logger.error(f"Booking submission failed: {e}")
            self._dispatch(states.submit_failed, str(e))
            return None
        except asyncio.CancelledError:
            logger.warning("Booking submission cancelled")
            self._dispatch(states.submit_skipped)
            raise
        except Exception as e:
            logger.error(f"Unexpected error submitting booking: {e}", exc_info=True)
            self._dispatch(states.submit_failed, "Unknown error occurred")
            return None

        if result is None:
            self._dispatch(states.submit_skipped)
            return None

        if self._closed:
            logger.info(f"Wizard closed before booking {result.booking_id} completed")
            return result

        confirmation = messages.confirmation_message(
            result,
            draft.service.name,
            draft.provider.display_name,
            messages.when_label(draft.selected_date, draft.selected_slot.time, self.today()),
        )
        self._dispatch(states.submit_succeeded, result, confirmation)
        return result

    async def login(self) -> bool:
        """
        Ask the user to authenticate after a blocked submission.

        Returns:
            True if the session is now authenticated; the login notice is
            then dismissed so the booking can be submitted again
        """
        if self._auth is None or self._closed:
            return False

        try:
            await self._auth.login()
        except AuthRequiredError as e:
            logger.warning(f"Login did not complete: {e}")
            return False

        if not self._auth.is_authenticated:
            return False
        notice = self._state.notice
        if notice is not None and notice.kind == NoticeKind.AUTH_REQUIRED:
            self._dispatch(states.dismiss_notice)
        return True

    # ========== Lifecycle ==========

    def close(self) -> None:
        """Unmount the wizard. Pending slot loads are cancelled and late results ignored."""
        if self._closed:
            return
        self._closed = True
        for task in list(self._slot_tasks):
            task.cancel()
        self._listeners.clear()
        logger.debug("Booking wizard closed")
