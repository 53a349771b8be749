"""Payment method validation and card field formatting."""

from .validation import (
    CardValidation,
    format_card_number,
    format_cvv,
    format_expiry,
    is_payment_valid,
    update_card_field,
    validate_card,
)

__all__ = [
    "CardValidation",
    "format_card_number",
    "format_cvv",
    "format_expiry",
    "is_payment_valid",
    "update_card_field",
    "validate_card",
]
