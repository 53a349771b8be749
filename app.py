"""
Entry point for the booking flow.
Wires the wizard from explicit settings and runs a scripted booking
against the configured booking API.
"""

import argparse
import asyncio
import logging
import sys
from datetime import date
from typing import Optional, Sequence

from backend import BackendClient, TokenAuth
from booking import AvailabilityLoader, BookingSubmitter, BookingWizard, format_money
from booking.messages import end_time
from booking.ports import AuthPort, NotificationPort
from config import Settings, load_settings
from models.notification import NotificationPreferences
from models.service import ProviderRef, ServiceRef
from scheduler import LocalNotificationCenter, NotificationScheduler
from utils.logging_config import configure_app_logging

logger = logging.getLogger("app")


def build_wizard(
    settings: Settings,
    service: ServiceRef,
    provider: ProviderRef,
    *,
    auth: Optional[AuthPort] = None,
    backend: Optional[BackendClient] = None,
    notifications: Optional[NotificationPort] = None,
) -> BookingWizard:
    """
    Build a booking wizard and its collaborators.

    Args:
        settings: Application settings
        service: Service being booked
        provider: Provider offering the service
        auth: Authentication capability (defaults to the configured API token)
        backend: Availability and booking capability, any object implementing
            both ports (defaults to BackendClient)
        notifications: Local notification center (defaults to LocalNotificationCenter)

    Returns:
        BookingWizard at the date step
    """
    if auth is None:
        auth = TokenAuth(settings.api_token)
    if backend is None:
        backend = BackendClient.from_settings(settings, auth=auth)
    if notifications is None:
        notifications = LocalNotificationCenter()

    scheduler = NotificationScheduler(
        notifications,
        preferences=NotificationPreferences(
            booking_confirmations=settings.booking_confirmations_enabled,
            booking_reminders=settings.booking_reminders_enabled,
        ),
    )
    submitter = BookingSubmitter(
        backend,
        auth,
        scheduler,
        timezone=settings.tzinfo,
        reminder_offset_minutes=settings.reminder_offset_minutes,
    )
    return BookingWizard(
        service,
        provider,
        loader=AvailabilityLoader(backend),
        submitter=submitter,
        auth=auth,
        timezone=settings.tzinfo,
        date_options_days=settings.date_options_days,
    )


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Book a beauty service appointment")
    parser.add_argument("--env-file", help="Path to a .env file")
    parser.add_argument("--provider-id", required=True, help="Provider ID")
    parser.add_argument("--provider-name", help="Provider business name")
    parser.add_argument("--service-id", type=int, required=True, help="Service ID")
    parser.add_argument("--service-name", default="Appointment", help="Service name")
    parser.add_argument("--price", type=float, required=True, help="Service price in dollars")
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        help="Appointment date (YYYY-MM-DD, default first open day after today)",
    )
    parser.add_argument("--time", help="Start time HH:MM (default first available)")
    parser.add_argument("--notes", default="", help="Notes for the provider")
    parser.add_argument(
        "--payment",
        default="credit-card",
        choices=["credit-card", "paypal", "apple-pay", "google-pay"],
    )
    parser.add_argument("--card-number", default="")
    parser.add_argument("--card-expiry", default="")
    parser.add_argument("--card-cvv", default="")
    parser.add_argument("--card-holder", default="")
    return parser.parse_args(argv)


async def run_booking(wizard: BookingWizard, args: argparse.Namespace) -> bool:
    """Drive the wizard through one booking. Returns True on success."""
    options = await wizard.load_available_days(preselect=False)
    day = args.date or next((d for d in options if d > wizard.today()), None)
    if day is None:
        logger.error("Provider has no open days in the booking window")
        return False
    await wizard.select_date(day)
    if wizard.notice is not None:
        logger.error(f"{wizard.notice.title}: {wizard.notice.message}")
        return False

    available = [slot for slot in wizard.slots if slot.available]
    slot_time = args.time or available[0].time
    if not wizard.select_slot(slot_time):
        logger.error(f"Time {slot_time} is not available on {day}")
        return False

    start = wizard.draft.selected_slot.time
    end = end_time(start, wizard.draft.service.duration_minutes)
    price = wizard.pricing
    logger.info(
        f"{args.service_name} on {day} {start}-{end}: "
        f"{format_money(price.base_price)} + fee {format_money(price.platform_fee)} "
        f"+ tax {format_money(price.tax)} = {format_money(price.total)}"
    )
    wizard.set_notes(args.notes)
    wizard.confirm_review()

    wizard.select_payment_method(args.payment)
    if args.payment == "credit-card":
        wizard.update_card_field("number", args.card_number)
        wizard.update_card_field("expiry", args.card_expiry)
        wizard.update_card_field("cvv", args.card_cvv)
        wizard.update_card_field("holder_name", args.card_holder)

    if not wizard.can_submit:
        logger.error("Payment details are incomplete")
        return False

    result = await wizard.submit()
    if result is None:
        notice = wizard.notice
        logger.error(f"{notice.title}: {notice.message}" if notice else "Booking was not submitted")
        return False

    logger.info(wizard.notice.message)
    return True


async def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main async function to run a scripted booking."""
    args = parse_args(argv)
    settings = load_settings(args.env_file)

    # Validate configuration
    try:
        settings.validate_all_required()
    except ValueError as e:
        logging.basicConfig()
        logger.error(f"Configuration error: {e}")
        return 1

    configure_app_logging(settings.log_level, settings.log_dir)

    auth = TokenAuth(settings.api_token)
    notifications = LocalNotificationCenter()
    backend = BackendClient.from_settings(settings, auth=auth)
    wizard = build_wizard(
        settings,
        ServiceRef(id=args.service_id, name=args.service_name, price=args.price),
        ProviderRef(id=args.provider_id, business_name=args.provider_name),
        auth=auth,
        backend=backend,
        notifications=notifications,
    )

    try:
        logger.info("Starting booking flow...")
        notifications.start()
        ok = await run_booking(wizard, args)
        return 0 if ok else 1
    except asyncio.CancelledError:
        logger.info("Booking cancelled")
        return 1
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        raise
    finally:
        logger.info("Shutting down...")
        wizard.close()
        notifications.shutdown()
        await backend.close()
        logger.info("Shutdown complete")


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(0)
