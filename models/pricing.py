"""Price breakdown shown on the review and payment steps."""

from pydantic import BaseModel, ConfigDict, Field

from utils.constants import PLATFORM_FEE_RATE, TAX_RATE


class PricingBreakdown(BaseModel):
    """Derived price breakdown for a base service price."""

    base_price: float = Field(..., ge=0)
    platform_fee: float
    subtotal: float
    tax: float
    total: float
    platform_fee_rate: float = PLATFORM_FEE_RATE
    tax_rate: float = TAX_RATE

    model_config = ConfigDict(frozen=True)
