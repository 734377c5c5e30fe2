"""Gateway services: tenant registry, provider access and the webhook relay."""

from .callback_store import CallbackStore, normalize_order_code
from .event_normalizer import EventNormalizer
from .merchant_registry import DuplicateTenantError, MerchantRegistry
from .provider_client import PaymentProviderClient, TenantClients
from .token_cache import TokenCache
from .webhook_forwarder import DeliveryAttempt, ForwardResult, WebhookForwarder
from .webhook_relay import RelayOutcome, WebhookRelay, build_simulated_payload
from .webhook_verifier import (
    SIGNATURE_HEADER,
    WebhookVerifier,
    compute_signature,
    verify_signature,
)

__all__ = [
    "CallbackStore",
    "normalize_order_code",
    "EventNormalizer",
    "DuplicateTenantError",
    "MerchantRegistry",
    "PaymentProviderClient",
    "TenantClients",
    "TokenCache",
    "DeliveryAttempt",
    "ForwardResult",
    "WebhookForwarder",
    "RelayOutcome",
    "WebhookRelay",
    "build_simulated_payload",
    "SIGNATURE_HEADER",
    "WebhookVerifier",
    "compute_signature",
    "verify_signature",
]
