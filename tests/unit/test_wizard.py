"""
Unit tests for the booking wizard.
Drives the full flow against in-memory collaborators.
"""

import asyncio
from collections import defaultdict
from datetime import date, datetime, timezone

from unittest.mock import AsyncMock

import pytest

from booking.availability import AvailabilityLoader
from booking.pricing import format_money
from booking.states import NoticeKind, RetryAction, WizardStep
from booking.submitter import BookingSubmitter
from booking.wizard import BookingWizard
from scheduler.reminders import NotificationScheduler
from utils.exceptions import AuthRequiredError, BackendError

TOMORROW = date(2026, 10, 20)
CARD_INPUT = [
    ("number", "4111111111111111"),
    ("expiry", "1228"),
    ("cvv", "123"),
    ("holder_name", "Ana Diaz"),
]


@pytest.fixture
def wizard(service, provider, backend, auth, notifications, frozen_clock):
    submitter = BookingSubmitter(
        backend,
        auth,
        NotificationScheduler(notifications, clock=frozen_clock),
        clock=frozen_clock,
    )
    return BookingWizard(
        service,
        provider,
        loader=AvailabilityLoader(backend),
        submitter=submitter,
        auth=auth,
        clock=frozen_clock,
    )


async def _ready_to_pay(wizard):
    await wizard.select_date(TOMORROW)
    wizard.select_slot("14:00")
    wizard.confirm_review()
    for field, raw in CARD_INPUT:
        wizard.update_card_field(field, raw)


def _gated_backend(backend):
    """Availability calls block until their date's gate is opened."""
    gates = defaultdict(asyncio.Event)

    async def get_slots(provider_id, day):
        await gates[day].wait()
        return ["09:00"] if day == TOMORROW else ["16:00"]

    backend.get_available_slots.side_effect = get_slots
    return gates


@pytest.mark.asyncio
async def test_full_booking_flow(wizard, backend, notifications):
    assert format_money(wizard.pricing.total) == "$91.14"
    assert wizard.step == WizardStep.DATE

    await wizard.select_date(TOMORROW)
    assert wizard.step == WizardStep.TIME
    assert [slot.time for slot in wizard.slots] == ["09:00", "10:00", "14:00"]

    assert wizard.select_slot("14:00")
    assert wizard.step == WizardStep.REVIEW
    assert wizard.confirm_review()
    assert wizard.step == WizardStep.PAYMENT
    assert not wizard.can_submit

    for field, raw in CARD_INPUT:
        assert wizard.update_card_field(field, raw)
    assert wizard.can_submit

    result = await wizard.submit()

    assert result.booking_id == "bk_1234567890"
    assert wizard.step == WizardStep.SUBMITTED
    assert wizard.draft is None
    assert wizard.notice.kind == NoticeKind.BOOKING_CONFIRMED
    assert wizard.notice.message.startswith("✅ Booking confirmed!")
    assert "bk_12345" in wizard.notice.message
    backend.create_booking.assert_awaited_once()
    assert len(notifications.immediate) == 1
    assert len(notifications.reminders) == 1
    assert notifications.reminders[0]["trigger_at"] == datetime(
        2026, 10, 20, 13, 0, tzinfo=timezone.utc
    )


@pytest.mark.asyncio
async def test_loyalty_confirmation(wizard, backend):
    backend.create_booking.return_value = {
        "booking": {"id": "bk_99", "status": "confirmed"},
        "loyaltyPoints": {"pointsEarned": 91, "totalPoints": 300},
    }
    await _ready_to_pay(wizard)

    await wizard.submit()

    assert wizard.notice.message.startswith("🎉 Booking confirmed!")
    assert "You earned 91 loyalty points (300 total)" in wizard.notice.message


@pytest.mark.asyncio
async def test_date_options_start_today(wizard):
    options = wizard.date_options()

    assert options[0] == date(2026, 10, 19)
    assert len(options) == 14


@pytest.mark.asyncio
async def test_stale_slot_response_is_ignored(wizard, backend):
    gates = _gated_backend(backend)
    other_day = date(2026, 10, 21)

    first = asyncio.ensure_future(wizard.select_date(TOMORROW))
    await asyncio.sleep(0)
    second = asyncio.ensure_future(wizard.select_date(other_day))
    await asyncio.sleep(0)

    gates[other_day].set()
    assert await second is True
    gates[TOMORROW].set()
    assert await first is False

    assert wizard.draft.selected_date == other_day
    assert [slot.time for slot in wizard.slots] == ["16:00"]
    assert not wizard.state.slots_loading


@pytest.mark.asyncio
async def test_empty_day_offers_another_date(wizard, backend):
    backend.get_available_slots.return_value = []

    await wizard.select_date(TOMORROW)

    assert wizard.slots == []
    assert wizard.can_choose_another_date
    assert wizard.notice.kind == NoticeKind.NO_SLOTS
    assert wizard.notice.retry_action == RetryAction.RESELECT_DATE
    assert not wizard.back()

    backend.get_available_slots.return_value = ["11:00"]
    await wizard.select_date(date(2026, 10, 21))
    assert wizard.notice is None
    assert wizard.select_slot("11:00")


@pytest.mark.asyncio
async def test_availability_failure_sets_notice(wizard, backend):
    backend.get_available_slots.side_effect = BackendError("Service unavailable", 503)

    await wizard.select_date(TOMORROW)

    assert wizard.notice.kind == NoticeKind.AVAILABILITY_ERROR
    assert wizard.slots == []
    assert wizard.step == WizardStep.TIME


@pytest.mark.asyncio
async def test_rejected_actions_leave_state_unchanged(wizard):
    before = wizard.state

    assert not wizard.select_slot("09:00")
    assert not wizard.confirm_review()
    assert wizard.state is before
    assert await wizard.submit() is None


@pytest.mark.asyncio
async def test_submission_failure_allows_retry(wizard, backend):
    backend.create_booking.side_effect = BackendError("Slot no longer available", 409)
    await _ready_to_pay(wizard)

    assert await wizard.submit() is None
    assert wizard.step == WizardStep.PAYMENT
    assert wizard.notice.kind == NoticeKind.SUBMISSION_ERROR
    assert wizard.notice.retry_action == RetryAction.SUBMIT
    assert wizard.draft.selected_slot.time == "14:00"

    backend.create_booking.side_effect = None
    result = await wizard.submit()
    assert result is not None
    assert backend.create_booking.await_count == 2


@pytest.mark.asyncio
async def test_unauthenticated_submit_shows_login_notice(wizard, backend, auth):
    auth.authenticated = False
    await _ready_to_pay(wizard)

    assert await wizard.submit() is None
    assert wizard.notice.kind == NoticeKind.AUTH_REQUIRED
    assert wizard.notice.retry_action == RetryAction.LOGIN
    backend.create_booking.assert_not_awaited()


@pytest.mark.asyncio
async def test_double_submit_creates_one_booking(wizard, backend):
    release = asyncio.Event()

    async def slow_create(request):
        await release.wait()
        return {"booking": {"id": "bk_1"}}

    backend.create_booking.side_effect = slow_create
    await _ready_to_pay(wizard)

    first = asyncio.ensure_future(wizard.submit())
    await asyncio.sleep(0)
    assert wizard.state.submitting
    assert not wizard.can_submit

    assert await wizard.submit() is None

    release.set()
    assert (await first).booking_id == "bk_1"
    assert backend.create_booking.await_count == 1


@pytest.mark.asyncio
async def test_close_cancels_slot_load(wizard, backend):
    gates = _gated_backend(backend)
    pending = asyncio.ensure_future(wizard.select_date(TOMORROW))
    await asyncio.sleep(0)
    before = wizard.state

    wizard.close()

    assert await pending is False
    assert wizard.is_closed
    assert wizard.state is before
    gates[TOMORROW].set()
    assert not await wizard.select_date(TOMORROW)


@pytest.mark.asyncio
async def test_late_submission_after_close_does_not_mutate(wizard, backend):
    release = asyncio.Event()

    async def slow_create(request):
        await release.wait()
        return {"booking": {"id": "bk_1"}}

    backend.create_booking.side_effect = slow_create
    await _ready_to_pay(wizard)

    pending = asyncio.ensure_future(wizard.submit())
    await asyncio.sleep(0)
    submitting = wizard.state

    wizard.close()
    release.set()

    assert (await pending).booking_id == "bk_1"
    assert wizard.state is submitting
    assert wizard.step == WizardStep.PAYMENT


@pytest.mark.asyncio
async def test_subscribers_see_each_transition(wizard):
    seen = []
    unsubscribe = wizard.subscribe(lambda state: seen.append(state.step))

    await wizard.select_date(TOMORROW)
    wizard.select_slot("09:00")
    unsubscribe()
    wizard.confirm_review()

    assert seen == [WizardStep.TIME, WizardStep.TIME, WizardStep.REVIEW]


@pytest.mark.asyncio
async def test_back_and_notes(wizard, backend):
    await wizard.select_date(TOMORROW)
    wizard.select_slot("09:00")
    wizard.confirm_review()

    assert wizard.back()
    assert wizard.step == WizardStep.REVIEW
    assert wizard.set_notes("Please use fragrance-free products")
    assert wizard.confirm_review()
    assert wizard.select_payment_method("google-pay")

    await wizard.submit()

    request = backend.create_booking.await_args.args[0]
    assert request.notes == "Please use fragrance-free products"


@pytest.mark.asyncio
async def test_timed_out_submit_can_be_retried(wizard, backend):
    never = asyncio.Event()

    async def hanging_create(request):
        await never.wait()

    backend.create_booking.side_effect = hanging_create
    await _ready_to_pay(wizard)

    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(wizard.submit(), 0.05)

    assert not wizard.state.submitting
    assert not wizard._submitter.in_flight
    assert wizard.can_submit
    assert wizard.step == WizardStep.PAYMENT

    backend.create_booking.side_effect = None
    result = await wizard.submit()
    assert result.booking_id == "bk_1234567890"
    assert wizard.step == WizardStep.SUBMITTED


@pytest.mark.asyncio
async def test_unexpected_submit_error_allows_retry(wizard, backend, monkeypatch):
    await _ready_to_pay(wizard)
    monkeypatch.setattr(
        wizard._submitter, "submit", AsyncMock(side_effect=RuntimeError("event loop hiccup"))
    )

    assert await wizard.submit() is None
    assert wizard.notice.kind == NoticeKind.SUBMISSION_ERROR
    assert not wizard.state.submitting
    assert wizard.can_submit


@pytest.mark.asyncio
async def test_select_slot_from_payment_returns_to_review(wizard):
    await _ready_to_pay(wizard)
    assert wizard.step == WizardStep.PAYMENT

    await wizard.select_date(date(2026, 10, 22))
    assert wizard.step == WizardStep.PAYMENT
    assert not wizard.can_submit

    assert wizard.select_slot("10:00")
    assert wizard.step == WizardStep.REVIEW
    assert wizard.draft.selected_date == date(2026, 10, 22)


@pytest.mark.asyncio
async def test_empty_day_at_review_offers_another_date(wizard, backend):
    await wizard.select_date(TOMORROW)
    wizard.select_slot("09:00")

    backend.get_available_slots.return_value = []
    await wizard.select_date(date(2026, 10, 22))

    assert wizard.step == WizardStep.REVIEW
    assert wizard.notice.kind == NoticeKind.NO_SLOTS
    assert wizard.can_choose_another_date


@pytest.mark.asyncio
async def test_provider_done_for_today(wizard, backend):
    backend.get_available_slots.return_value = [
        {"isAvailable": False, "unavailableReason": "Provider is done for today"}
    ]

    await wizard.select_date(date(2026, 10, 19))

    assert wizard.slots == []
    assert wizard.notice.kind == NoticeKind.NO_SLOTS
    assert wizard.can_choose_another_date


@pytest.mark.asyncio
async def test_available_days_preselect_first_open_day(wizard, backend):
    backend.get_available_days.return_value = [
        {"date": "2026-10-19", "isAvailable": False},
        {"date": "2026-10-20", "isAvailable": True},
        {"date": "2026-10-21", "isAvailable": True},
    ]

    options = await wizard.load_available_days()

    assert options == [TOMORROW, date(2026, 10, 21)]
    assert wizard.date_options() == options
    assert wizard.draft.selected_date == TOMORROW
    assert wizard.step == WizardStep.TIME
    assert [slot.time for slot in wizard.slots] == ["09:00", "10:00", "14:00"]
    backend.get_available_days.assert_awaited_once_with("prov-42", 12, date(2026, 10, 19), 14)

    assert not await wizard.select_date(date(2026, 10, 19))
    assert wizard.draft.selected_date == TOMORROW


@pytest.mark.asyncio
async def test_available_days_failure_falls_back(wizard, backend):
    backend.get_available_days.side_effect = BackendError("Service unavailable", 503)

    options = await wizard.load_available_days(preselect=False)

    assert len(options) == 14
    assert options[0] == date(2026, 10, 19)
    assert wizard.step == WizardStep.DATE


@pytest.mark.asyncio
async def test_available_days_keep_existing_selection(wizard, backend):
    backend.get_available_days.return_value = [{"date": "2026-10-20", "isAvailable": True}]
    await wizard.select_date(date(2026, 10, 23))

    await wizard.load_available_days()

    assert wizard.draft.selected_date == date(2026, 10, 23)
    backend.get_available_slots.assert_awaited_once()


@pytest.mark.asyncio
async def test_login_clears_auth_notice(wizard, backend, auth):
    auth.authenticated = False
    await _ready_to_pay(wizard)
    await wizard.submit()
    assert wizard.notice.retry_action == RetryAction.LOGIN

    async def complete_login():
        auth.authenticated = True

    auth.login.side_effect = complete_login

    assert await wizard.login() is True
    assert wizard.notice is None
    assert (await wizard.submit()).booking_id == "bk_1234567890"


@pytest.mark.asyncio
async def test_login_not_completed(wizard, auth):
    auth.authenticated = False
    auth.login.side_effect = AuthRequiredError("Please log in to book appointments")

    assert await wizard.login() is False
