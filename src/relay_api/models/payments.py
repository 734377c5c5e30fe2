"""API models for payment endpoints.

Request models accept the provider's camelCase order fields. Fields not
modelled here are passed through to the provider unchanged.
"""

from typing import Any

from pydantic import ConfigDict, Field

from relay.models.base import CamelModel
from relay.models.callback import CallbackRegistration
from relay.models.events import CustomerInfo

MIN_ORDER_AMOUNT = 30
MAX_DYNAMIC_DESCRIPTOR_LENGTH = 13
MAX_CARD_TOKENS = 10
MIN_INSTALLMENTS = 1
MAX_INSTALLMENTS = 36


class OrderCustomer(CamelModel):
    """Customer details sent with a new order."""

    model_config = ConfigDict(extra="allow")

    email: str | None = None
    full_name: str | None = None
    phone: str | None = None
    country_code: str | None = None
    request_lang: str | None = None


class CreateOrderRequest(CamelModel):
    """Request to create a payment order, with optional callback registration."""

    model_config = ConfigDict(
        extra="allow",
        json_schema_extra={
            "examples": [
                {
                    "amount": 1500,
                    "customerTrns": "Order #42",
                    "merchantTrns": "ORDER-42",
                    "callback": {
                        "webhookUrl": "https://shop.example/webhooks/payments",
                        "secret": "whsec_shop",
                        "metadata": {"cartId": "42"},
                    },
                }
            ]
        },
    )

    amount: int | None = Field(default=None, description="Amount in cents (minimum 30)")
    customer_trns: str | None = Field(default=None, description="Description shown to customer")
    customer: OrderCustomer | None = None
    dynamic_descriptor: str | None = Field(default=None, description="Bank statement descriptor")
    currency_code: str | None = Field(default=None, description="ISO 4217 numeric code")
    payment_timeout: int | None = None
    preauth: bool | None = None
    allow_recurring: bool | None = None
    max_installments: int | None = None
    force_max_installments: bool | None = None
    payment_notification: bool | None = None
    tip_amount: int | None = None
    disable_exact_amount: bool | None = None
    disable_cash: bool | None = None
    disable_wallet: bool | None = None
    source_code: str | None = None
    merchant_trns: str | None = Field(default=None, description="Merchant reference")
    state_id: int | None = None
    url_fail: str | None = None
    tags: list[str] | None = None
    card_tokens: list[str] | None = None
    payment_method_fees: list[dict[str, Any]] | None = None
    is_card_verification: bool | None = None
    callback: CallbackRegistration | None = Field(
        default=None,
        description="Where to deliver events for this order; never sent to the provider",
    )

    def validation_errors(self) -> list[str]:
        """Business-rule violations of this request (empty when valid)."""
        errors: list[str] = []

        if self.is_card_verification:
            if self.amount != 0:
                errors.append("For card verification, amount must be 0")
        elif not self.amount or self.amount < MIN_ORDER_AMOUNT:
            errors.append(
                f"Amount is required and must be at least {MIN_ORDER_AMOUNT} (cents)"
            )

        if self.dynamic_descriptor and len(self.dynamic_descriptor) > MAX_DYNAMIC_DESCRIPTOR_LENGTH:
            errors.append(
                f"dynamicDescriptor must be {MAX_DYNAMIC_DESCRIPTOR_LENGTH} characters or less"
            )

        if self.card_tokens and len(self.card_tokens) > MAX_CARD_TOKENS:
            errors.append(f"Maximum {MAX_CARD_TOKENS} card tokens allowed")

        if self.max_installments is not None and not (
            MIN_INSTALLMENTS <= self.max_installments <= MAX_INSTALLMENTS
        ):
            errors.append(
                f"maxInstallments must be between {MIN_INSTALLMENTS} and {MAX_INSTALLMENTS}"
            )

        if (self.state_id is None) != (not self.url_fail):
            errors.append("stateId and urlFail must be used together")

        return errors

    def to_provider_body(self) -> dict[str, Any]:
        """Order body for the provider, without the callback registration."""
        return self.model_dump(
            mode="json", by_alias=True, exclude_none=True, exclude={"callback"}
        )

    def customer_info(self) -> CustomerInfo | None:
        """Customer details in canonical event form."""
        if self.customer is None:
            return None
        return CustomerInfo(
            email=self.customer.email,
            full_name=self.customer.full_name,
            phone=self.customer.phone,
        )


class CreateOrderResponse(CamelModel):
    """Result of creating a payment order."""

    success: bool = True
    order_code: int | str
    checkout_url: str
    callback_registered: bool
    message: str


class UpdateOrderRequest(CamelModel):
    """Changes to an existing order."""

    model_config = ConfigDict(extra="allow")

    amount: int | None = None
    is_canceled: bool | None = None
    disable_paid_state: bool | None = None
    expiration_date: str | None = None


class CreateTransactionRequest(CamelModel):
    """Recurring charge or pre-authorization capture."""

    model_config = ConfigDict(extra="allow")

    amount: int = Field(..., gt=0, description="Amount in cents")
    installments: int | None = None
    customer_trns: str | None = None
    merchant_trns: str | None = None
    source_code: str | None = None
    tip_amount: int | None = None


class RefundRequest(CamelModel):
    """Fast refund of a card transaction."""

    amount: int = Field(..., gt=0, description="Amount to refund in cents")
    source_code: str | None = None
    merchant_trns: str | None = None


class CardTokenRequest(CamelModel):
    """Save the card used in a transaction."""

    transaction_id: str = Field(..., min_length=1)
    group_id: str | None = None
