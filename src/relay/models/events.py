"""Inbound provider webhook payloads and the canonical outbound event envelope."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from relay.models.base import CamelModel
from relay.models.enums import CanonicalEventType

# === Provider (inbound) shapes ===


class ProviderEventData(BaseModel):
    """`EventData` object of a provider webhook. Every field is optional."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    transaction_id: str | None = Field(default=None, alias="TransactionId")
    order_code: int | str | None = Field(default=None, alias="OrderCode")
    status_id: str | None = Field(default=None, alias="StatusId")
    amount: int | float | None = Field(default=None, alias="Amount")
    currency_code: str | None = Field(default=None, alias="CurrencyCode")
    email: str | None = Field(default=None, alias="Email")
    full_name: str | None = Field(default=None, alias="FullName")
    phone: str | None = Field(default=None, alias="Phone")
    ins_date: str | None = Field(default=None, alias="InsDate")
    card_number: str | None = Field(default=None, alias="CardNumber")
    card_type_id: int | None = Field(default=None, alias="CardTypeId")
    source_code: str | None = Field(default=None, alias="SourceCode")
    merchant_trns: str | None = Field(default=None, alias="MerchantTrns")
    customer_trns: str | None = Field(default=None, alias="CustomerTrns")


class ProviderWebhookPayload(BaseModel):
    """Webhook body POSTed by the provider."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    event_type_id: int | None = Field(default=None, alias="EventTypeId")
    event_data: ProviderEventData = Field(
        default_factory=ProviderEventData, alias="EventData"
    )


# === Canonical (outbound) envelope ===


class CustomerInfo(CamelModel):
    """Customer details attached to a payment event."""

    email: str | None = None
    full_name: str | None = None
    phone: str | None = None


class CardInfo(CamelModel):
    """Masked card details attached to a payment event."""

    last_four: str | None = None
    brand: str | None = None


class EventData(CamelModel):
    """Payload of a canonical event."""

    order_code: int | str = Field(
        ..., description="Provider order code; routes the event to its registration"
    )
    transaction_id: str | None = None
    amount: int | float | None = None
    currency: str | None = None
    status: str | None = None
    customer: CustomerInfo | None = None
    card: CardInfo | None = None
    merchant_reference: str | None = None
    metadata: dict[str, Any] | None = None


class CanonicalEvent(CamelModel):
    """Provider-agnostic event delivered to tenant endpoints."""

    event_type: CanonicalEventType
    timestamp: str = Field(..., description="ISO-8601 generation time (not provider time)")
    data: EventData
    raw: Any = Field(
        default=None,
        description="Original provider payload when includeRawPayload was requested",
    )

    def to_json_bytes(self) -> bytes:
        """Serialize exactly as delivered; signatures are computed over these bytes."""
        return self.model_dump_json(by_alias=True, exclude_none=True).encode("utf-8")
