"""Payment method models selected on the payment step."""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class CreditCard(BaseModel):
    """Card entry form. Field values are the formatted display strings."""

    method: Literal["credit-card"] = "credit-card"
    number: str = ""
    expiry: str = ""
    cvv: str = ""
    holder_name: str = ""

    model_config = ConfigDict(frozen=True)

    def __repr__(self) -> str:
        # Keep card data out of logs
        return f"CreditCard(number=****{self.number[-4:]}, holder_name={self.holder_name!r})"

    __str__ = __repr__


class PayPal(BaseModel):
    method: Literal["paypal"] = "paypal"

    model_config = ConfigDict(frozen=True)


class ApplePay(BaseModel):
    method: Literal["apple-pay"] = "apple-pay"

    model_config = ConfigDict(frozen=True)


class GooglePay(BaseModel):
    method: Literal["google-pay"] = "google-pay"

    model_config = ConfigDict(frozen=True)


PaymentMethod = Annotated[
    Union[CreditCard, PayPal, ApplePay, GooglePay],
    Field(discriminator="method"),
]

PAYMENT_METHODS = {
    "credit-card": CreditCard,
    "paypal": PayPal,
    "apple-pay": ApplePay,
    "google-pay": GooglePay,
}
