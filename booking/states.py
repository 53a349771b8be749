"""
Booking wizard states and transitions.

The wizard state is immutable. Every user action or async completion is a
transition function taking the current state and returning a new one, or
raising InvalidTransitionError when the action is not allowed.
"""

from datetime import date
from enum import Enum, IntEnum
from typing import Iterable, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict

from booking import messages
from models.booking import BookingDraft, BookingResult
from models.payment import PAYMENT_METHODS, CreditCard, PaymentMethod
from models.service import ProviderRef, ServiceRef
from models.slot import AvailableDay, TimeSlot
from payments.validation import is_payment_valid
from payments.validation import update_card_field as apply_card_field
from utils.datetime_utils import normalize_slot_time
from utils.exceptions import InvalidTransitionError


class WizardStep(IntEnum):
    """Steps of the booking flow."""

    DATE = 1
    TIME = 2
    REVIEW = 3
    PAYMENT = 4
    SUBMITTED = 5


class NoticeKind(str, Enum):
    NO_SLOTS = "no_slots"
    AVAILABILITY_ERROR = "availability_error"
    SUBMISSION_ERROR = "submission_error"
    AUTH_REQUIRED = "auth_required"
    BOOKING_CONFIRMED = "booking_confirmed"


class RetryAction(str, Enum):
    RESELECT_DATE = "reselect_date"
    SUBMIT = "submit"
    LOGIN = "login"


class WizardNotice(BaseModel):
    """Dismissible message surfaced to the user."""

    kind: NoticeKind
    title: str
    message: str
    dismissible: bool = True
    retry_action: Optional[RetryAction] = None

    model_config = ConfigDict(frozen=True)


class WizardState(BaseModel):
    """Snapshot of a booking wizard."""

    step: WizardStep = WizardStep.DATE
    draft: Optional[BookingDraft] = None
    available_days: Tuple[AvailableDay, ...] = ()
    slots: Tuple[TimeSlot, ...] = ()
    slots_loading: bool = False
    slots_request_token: int = 0
    submitting: bool = False
    result: Optional[BookingResult] = None
    notice: Optional[WizardNotice] = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_submitted(self) -> bool:
        return self.step == WizardStep.SUBMITTED

    @property
    def payment_valid(self) -> bool:
        return self.draft is not None and is_payment_valid(self.draft.payment_method)

    @property
    def can_submit(self) -> bool:
        return (
            self.step == WizardStep.PAYMENT
            and not self.submitting
            and self.draft is not None
            and self.draft.selected_date is not None
            and self.draft.selected_slot is not None
            and self.payment_valid
        )

    @property
    def can_choose_another_date(self) -> bool:
        """True when the selected date has nothing bookable to offer."""
        return (
            WizardStep.TIME <= self.step < WizardStep.SUBMITTED
            and self.draft is not None
            and self.draft.selected_slot is None
            and not self.slots_loading
            and not any(slot.available for slot in self.slots)
        )

    def is_current(self, token: int) -> bool:
        return token == self.slots_request_token

    def is_day_closed(self, day: date) -> bool:
        """True only for days the provider reported as unavailable."""
        return any(d.day == day and not d.is_available for d in self.available_days)


def initial_state(service: ServiceRef, provider: ProviderRef) -> WizardState:
    return WizardState(draft=BookingDraft(service=service, provider=provider))


def _editable(state: WizardState, action: str) -> BookingDraft:
    if state.draft is None or state.is_submitted:
        raise InvalidTransitionError(f"Cannot {action}: booking already submitted")
    if state.submitting:
        raise InvalidTransitionError(f"Cannot {action} while a booking is being submitted")
    return state.draft


def _update(state: WizardState, draft: BookingDraft, **changes) -> WizardState:
    return state.model_copy(update={"draft": draft, **changes})


# ========== Date & Time ==========


def days_loaded(state: WizardState, days: Iterable[AvailableDay]) -> WizardState:
    """Store the provider's booking window."""
    if state.is_submitted:
        return state
    return state.model_copy(update={"available_days": tuple(days)})


def select_date(state: WizardState, day: date) -> WizardState:
    """
    Select a date and start loading its slots.

    Clears the selected slot. Advances from the date step to the time step;
    later steps keep their step number.
    """
    draft = _editable(state, "select a date")
    if state.is_day_closed(day):
        raise InvalidTransitionError(f"Provider is not available on {day}")
    step = WizardStep.TIME if state.step == WizardStep.DATE else state.step
    notice = state.notice
    if notice is not None and notice.kind in (NoticeKind.NO_SLOTS, NoticeKind.AVAILABILITY_ERROR):
        notice = None

    return _update(
        state,
        draft.model_copy(update={"selected_date": day, "selected_slot": None}),
        step=step,
        slots=(),
        slots_loading=True,
        slots_request_token=state.slots_request_token + 1,
        notice=notice,
    )


def slots_loaded(state: WizardState, token: int, slots: Iterable[TimeSlot]) -> WizardState:
    """Replace the slot list with a completed load. Stale tokens are ignored."""
    if not state.is_current(token) or state.is_submitted:
        return state

    loaded = tuple(slots)
    notice = state.notice
    if not any(slot.available for slot in loaded):
        notice = WizardNotice(
            kind=NoticeKind.NO_SLOTS,
            title=messages.NO_SLOTS_TITLE,
            message=messages.NO_SLOTS_MESSAGE,
            retry_action=RetryAction.RESELECT_DATE,
        )
    return state.model_copy(update={"slots": loaded, "slots_loading": False, "notice": notice})


def slots_failed(state: WizardState, token: int, detail: str = "") -> WizardState:
    """Record a failed load. The slot list stays empty."""
    if not state.is_current(token) or state.is_submitted:
        return state

    return state.model_copy(
        update={
            "slots": (),
            "slots_loading": False,
            "notice": WizardNotice(
                kind=NoticeKind.AVAILABILITY_ERROR,
                title=messages.AVAILABILITY_ERROR_TITLE,
                message=messages.AVAILABILITY_ERROR_MESSAGE,
                retry_action=RetryAction.RESELECT_DATE,
            ),
        }
    )


def select_slot(state: WizardState, slot: Union[TimeSlot, str]) -> WizardState:
    """Select a loaded, available slot. Always lands on the review step."""
    draft = _editable(state, "select a time")
    if draft.selected_date is None:
        raise InvalidTransitionError("Cannot select a time before a date")
    if state.slots_loading:
        raise InvalidTransitionError("Time slots are still loading")

    try:
        wanted = slot.time if isinstance(slot, TimeSlot) else normalize_slot_time(slot)
    except ValueError as e:
        raise InvalidTransitionError(str(e)) from e
    match = next((s for s in state.slots if s.time == wanted), None)
    if match is None:
        raise InvalidTransitionError(f"Slot {wanted} is not in the loaded list")
    if not match.available:
        raise InvalidTransitionError(f"Slot {wanted} is not available")

    return _update(
        state,
        draft.model_copy(update={"selected_slot": match}),
        step=WizardStep.REVIEW,
    )


# ========== Review & Navigation ==========


def confirm_review(state: WizardState) -> WizardState:
    draft = _editable(state, "confirm the review")
    if state.step != WizardStep.REVIEW:
        raise InvalidTransitionError(f"Cannot confirm review from step {state.step.name}")
    if draft.selected_slot is None:
        raise InvalidTransitionError("Cannot confirm review without a time slot")
    return state.model_copy(update={"step": WizardStep.PAYMENT})


def back(state: WizardState) -> WizardState:
    """Go back one step: review -> time, payment -> review."""
    _editable(state, "go back")
    previous = {WizardStep.REVIEW: WizardStep.TIME, WizardStep.PAYMENT: WizardStep.REVIEW}
    if state.step not in previous:
        raise InvalidTransitionError(f"Cannot go back from step {state.step.name}")
    return state.model_copy(update={"step": previous[state.step]})


def set_notes(state: WizardState, notes: str) -> WizardState:
    draft = _editable(state, "edit notes")
    return _update(state, draft.model_copy(update={"notes": notes or ""}))


# ========== Payment ==========


def select_payment_method(
    state: WizardState, method: Union[str, PaymentMethod]
) -> WizardState:
    """Select a payment method. Re-selecting card keeps typed card fields."""
    draft = _editable(state, "change the payment method")

    if isinstance(method, str):
        method_cls = PAYMENT_METHODS.get(method)
        if method_cls is None:
            raise InvalidTransitionError(f"Unknown payment method: {method}")
        if isinstance(draft.payment_method, method_cls):
            return state
        method = method_cls()

    return _update(state, draft.model_copy(update={"payment_method": method}))


def update_card_field(state: WizardState, field: str, raw: str) -> WizardState:
    """Apply raw input to a card field, formatting it for display."""
    draft = _editable(state, "edit card details")
    if not isinstance(draft.payment_method, CreditCard):
        raise InvalidTransitionError("Card fields apply only to credit card payments")
    try:
        card = apply_card_field(draft.payment_method, field, raw)
    except ValueError as e:
        raise InvalidTransitionError(str(e)) from e
    return _update(state, draft.model_copy(update={"payment_method": card}))


# ========== Submission ==========


def submit_started(state: WizardState) -> WizardState:
    if state.submitting:
        raise InvalidTransitionError("A booking is already being submitted")
    if not state.can_submit:
        raise InvalidTransitionError("Booking is not ready to submit")
    return state.model_copy(update={"submitting": True, "notice": None})


def submit_succeeded(state: WizardState, result: BookingResult, confirmation: str) -> WizardState:
    """Terminal state: the draft is discarded."""
    return state.model_copy(
        update={
            "step": WizardStep.SUBMITTED,
            "draft": None,
            "slots": (),
            "submitting": False,
            "result": result,
            "notice": WizardNotice(
                kind=NoticeKind.BOOKING_CONFIRMED,
                title=messages.CONFIRMED_TITLE,
                message=confirmation,
            ),
        }
    )


def submit_failed(state: WizardState, detail: str) -> WizardState:
    """Stay on the payment step with the draft intact so the user can retry."""
    return state.model_copy(
        update={
            "submitting": False,
            "notice": WizardNotice(
                kind=NoticeKind.SUBMISSION_ERROR,
                title=messages.SUBMISSION_ERROR_TITLE,
                message=messages.submission_error_message(detail),
                retry_action=RetryAction.SUBMIT,
            ),
        }
    )


def submit_blocked(state: WizardState) -> WizardState:
    return state.model_copy(
        update={
            "submitting": False,
            "notice": WizardNotice(
                kind=NoticeKind.AUTH_REQUIRED,
                title=messages.AUTH_REQUIRED_TITLE,
                message=messages.AUTH_REQUIRED_MESSAGE,
                retry_action=RetryAction.LOGIN,
            ),
        }
    )


def submit_skipped(state: WizardState) -> WizardState:
    return state.model_copy(update={"submitting": False})


def dismiss_notice(state: WizardState) -> WizardState:
    return state.model_copy(update={"notice": None})
