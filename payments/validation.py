"""
Payment method validation and card field formatting.

The card form is a UI gate only: values are checked by length and format,
never tokenized or sent anywhere. Actual card handling belongs to a
certified payment provider.
"""

from typing import NamedTuple

from models.payment import CreditCard, PaymentMethod
from utils.constants import (
    CARD_NUMBER_GROUP_SIZE,
    CARD_NUMBER_MAX_DIGITS,
    CARD_NUMBER_MIN_DIGITS,
    CVV_MAX_LENGTH,
    CVV_MIN_LENGTH,
    EXPIRY_DISPLAY_LENGTH,
    HOLDER_NAME_MIN_LENGTH,
)
from utils.validation import digits_only

CARD_FIELDS = ("number", "expiry", "cvv", "holder_name")


class CardValidation(NamedTuple):
    """Field-level validity of a card form."""

    number: bool
    expiry: bool
    cvv: bool
    holder_name: bool

    @property
    def is_valid(self) -> bool:
        return all(self)


def format_card_number(raw: str) -> str:
    """
    Format card number input as space-separated groups of four digits.

    Args:
        raw: Raw user input

    Returns:
        Display string, at most 19 characters (16 digits + 3 separators)
    """
    digits = digits_only(raw)[:CARD_NUMBER_MAX_DIGITS]
    groups = [
        digits[i:i + CARD_NUMBER_GROUP_SIZE]
        for i in range(0, len(digits), CARD_NUMBER_GROUP_SIZE)
    ]
    return " ".join(groups)


def format_expiry(raw: str) -> str:
    """
    Format expiry input as MM/YY.

    The separator is inserted once two digits are present.

    Args:
        raw: Raw user input

    Returns:
        Display string, at most 5 characters
    """
    digits = digits_only(raw)[:4]
    if len(digits) < 2:
        return digits
    return f"{digits[:2]}/{digits[2:]}"


def format_cvv(raw: str) -> str:
    """Keep digits only, capped at four."""
    return digits_only(raw)[:CVV_MAX_LENGTH]


def format_holder_name(raw: str) -> str:
    """Holder names are kept as typed; trimming happens at validation."""
    return raw or ""


_FORMATTERS = {
    "number": format_card_number,
    "expiry": format_expiry,
    "cvv": format_cvv,
    "holder_name": format_holder_name,
}


def is_card_number_valid(number: str) -> bool:
    return len(digits_only(number)) >= CARD_NUMBER_MIN_DIGITS


def is_expiry_valid(expiry: str) -> bool:
    return len(expiry or "") == EXPIRY_DISPLAY_LENGTH


def is_cvv_valid(cvv: str) -> bool:
    return len(cvv or "") >= CVV_MIN_LENGTH


def is_holder_name_valid(holder_name: str) -> bool:
    return len((holder_name or "").strip()) >= HOLDER_NAME_MIN_LENGTH


def validate_card(card: CreditCard) -> CardValidation:
    """
    Check every card field.

    Args:
        card: Card form with formatted field values

    Returns:
        Per-field validity; ``is_valid`` is True only if all fields pass
    """
    return CardValidation(
        number=is_card_number_valid(card.number),
        expiry=is_expiry_valid(card.expiry),
        cvv=is_cvv_valid(card.cvv),
        holder_name=is_holder_name_valid(card.holder_name),
    )


def is_payment_valid(method: PaymentMethod) -> bool:
    """
    Whether the selected payment method allows submission.

    PayPal, Apple Pay and Google Pay are valid by selection alone.
    """
    if isinstance(method, CreditCard):
        return validate_card(method).is_valid
    return method is not None


def update_card_field(card: CreditCard, field: str, raw: str) -> CreditCard:
    """
    Apply raw input to one card field, formatting it for display.

    Args:
        card: Current card form
        field: One of number, expiry, cvv, holder_name
        raw: Raw user input

    Returns:
        New card form with the formatted value

    Raises:
        ValueError: If the field name is unknown
    """
    formatter = _FORMATTERS.get(field)
    if formatter is None:
        raise ValueError(f"Unknown card field: {field}. Expected one of: {', '.join(CARD_FIELDS)}")
    return card.model_copy(update={field: formatter(raw)})
