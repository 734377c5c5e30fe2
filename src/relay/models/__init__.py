"""Pydantic models for the payment gateway."""

from .base import CamelModel
from .callback import CallbackRegistration, CallbackSummary
from .enums import (
    CanonicalEventType,
    ProviderEnvironment,
    ProviderEventType,
    TransactionStatus,
)
from .errors import (
    ERROR_MESSAGES,
    ERROR_RECOVERY,
    ErrorCode,
    ErrorResponse,
    GatewayError,
    ProviderAuthenticationError,
    ProviderError,
    ProviderRequestError,
)
from .events import (
    CanonicalEvent,
    CardInfo,
    CustomerInfo,
    EventData,
    ProviderEventData,
    ProviderWebhookPayload,
)
from .tenant import ProviderCredentials, ProviderEndpoints, TenantConfig
from .token import TokenRecord

__all__ = [
    # Base
    "CamelModel",
    # Enums
    "CanonicalEventType",
    "ProviderEnvironment",
    "ProviderEventType",
    "TransactionStatus",
    # Tenants
    "ProviderCredentials",
    "ProviderEndpoints",
    "TenantConfig",
    "TokenRecord",
    # Callbacks
    "CallbackRegistration",
    "CallbackSummary",
    # Events
    "CanonicalEvent",
    "CardInfo",
    "CustomerInfo",
    "EventData",
    "ProviderEventData",
    "ProviderWebhookPayload",
    # Errors
    "ERROR_MESSAGES",
    "ERROR_RECOVERY",
    "ErrorCode",
    "ErrorResponse",
    "GatewayError",
    "ProviderAuthenticationError",
    "ProviderError",
    "ProviderRequestError",
]
