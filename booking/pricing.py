"""Price breakdown for a base service price."""

from functools import lru_cache

from models.pricing import PricingBreakdown
from utils.constants import PLATFORM_FEE_RATE, TAX_RATE


@lru_cache(maxsize=256)
def pricing(base_price: float) -> PricingBreakdown:
    """
    Compute the full price breakdown for a service.

    platform fee = base * 5%, subtotal = base + fee, tax = subtotal * 8.5%,
    total = subtotal + tax. Memoized per distinct base price; the returned
    breakdown is immutable.

    Args:
        base_price: Non-negative service price

    Returns:
        PricingBreakdown
    """
    base = float(base_price)
    platform_fee = base * PLATFORM_FEE_RATE
    subtotal = base + platform_fee
    tax = subtotal * TAX_RATE
    return PricingBreakdown(
        base_price=base,
        platform_fee=platform_fee,
        subtotal=subtotal,
        tax=tax,
        total=subtotal + tax,
    )


def format_money(amount: float) -> str:
    """Render an amount as dollars, e.g. $91.14."""
    return f"${amount:,.2f}"
