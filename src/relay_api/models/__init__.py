"""Request and response models for the gateway HTTP API."""

from .payments import (
    CardTokenRequest,
    CreateOrderRequest,
    CreateOrderResponse,
    CreateTransactionRequest,
    OrderCustomer,
    RefundRequest,
    UpdateOrderRequest,
)
from .webhooks import SimulateWebhookRequest, SimulateWebhookResponse, WebhookAck

__all__ = [
    "CardTokenRequest",
    "CreateOrderRequest",
    "CreateOrderResponse",
    "CreateTransactionRequest",
    "OrderCustomer",
    "RefundRequest",
    "UpdateOrderRequest",
    "SimulateWebhookRequest",
    "SimulateWebhookResponse",
    "WebhookAck",
]
