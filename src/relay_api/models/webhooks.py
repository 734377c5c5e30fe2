"""API models for webhook and debug endpoints."""

from pydantic import BaseModel, ConfigDict, Field

from relay.models.base import CamelModel


class WebhookAck(BaseModel):
    """Acknowledgement returned to the provider for every authenticated webhook."""

    received: bool = True
    result: str | None = None  # "forwarded", "unroutable", "ignored", "error"
    warning: str | None = None
    error: str | None = None


class SimulateWebhookRequest(CamelModel):
    """Synthetic provider event to run through the relay."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [{"orderCode": "1234567890123456", "eventType": "success"}]
        }
    )

    order_code: int | str = Field(..., description="Order the simulated event belongs to")
    event_type: str = Field(
        default="success",
        description='"success", "refund", or anything else for a failed payment',
    )
    amount: int | None = Field(default=None, description="Amount in cents (default 1000)")
    transaction_id: str | None = None


class SimulateWebhookResponse(CamelModel):
    """Outcome of a simulated webhook."""

    success: bool = True
    message: str
    forwarded: bool
    result: str
    deliveries: int = 0
