"""Inbound webhook pipeline: verify, parse, normalize, forward.

Provides the business logic behind the provider webhook endpoint separately
from HTTP routing, so the pipeline can be unit tested and reused by the debug
simulation endpoint.
"""

import json
import time
from typing import Any

from pydantic import BaseModel, ValidationError

from relay.models.enums import ProviderEventType, TransactionStatus
from relay.models.events import ProviderWebhookPayload
from relay.models.tenant import TenantConfig
from relay.services.event_normalizer import EventNormalizer
from relay.services.webhook_forwarder import ForwardResult, WebhookForwarder
from relay.services.webhook_verifier import WebhookVerifier
from relay.utils.logging import get_logger, log_webhook_event

logger = get_logger(__name__)

SIMULATED_EVENT_TYPES: dict[str, ProviderEventType] = {
    "success": ProviderEventType.TRANSACTION_PAYMENT_CREATED,
    "refund": ProviderEventType.TRANSACTION_REVERSAL_CREATED,
    "failed": ProviderEventType.TRANSACTION_FAILED,
}

DEFAULT_SIMULATED_AMOUNT = 1000


class RelayOutcome(BaseModel):
    """Result of processing one inbound webhook."""

    result: str  # "forwarded", "unroutable", "ignored", "error"
    event_type: str | None = None
    order_code: str | None = None
    error: str | None = None
    forward: ForwardResult | None = None


class WebhookRelay:
    """Orchestrates the inbound webhook pipeline for all tenants."""

    def __init__(
        self,
        verifier: WebhookVerifier,
        normalizer: EventNormalizer,
        forwarder: WebhookForwarder,
    ) -> None:
        self._verifier = verifier
        self._normalizer = normalizer
        self._forwarder = forwarder

    async def process(
        self, tenant: TenantConfig, raw_body: bytes, signature: str | None
    ) -> RelayOutcome:
        """Authenticate and relay a provider webhook.

        Args:
            tenant: Tenant owning the webhook path
            raw_body: Exact request body bytes
            signature: Provider signature header value, if any

        Returns:
            RelayOutcome. Failures after authentication are reported with
            result "error" rather than raised.

        Raises:
            GatewayError: If authentication fails.
        """
        self._verifier.authenticate(tenant, raw_body, signature)

        try:
            raw_payload = json.loads(raw_body)
            payload = ProviderWebhookPayload.model_validate(raw_payload)
        except (ValueError, ValidationError) as e:
            log_webhook_event(
                logger, "unknown", None, tenant_key=tenant.tenant_key, result="error", error=str(e)
            )
            return RelayOutcome(result="error", error="Malformed webhook payload")

        try:
            return await self._relay(payload, raw_payload, tenant.tenant_key)
        except Exception as e:
            logger.exception("Webhook processing failed for merchant %s", tenant.tenant_key)
            return RelayOutcome(result="error", error=str(e))

    async def simulate(
        self,
        order_code: int | str,
        kind: str,
        amount: int | None = None,
        transaction_id: str | None = None,
    ) -> RelayOutcome:
        """Synthesize a provider webhook and run it through normalize and forward.

        Args:
            order_code: Order the simulated event belongs to
            kind: "success", "refund" or anything else for a failed payment
            amount: Amount in cents (defaults to 1000)
            transaction_id: Transaction id (defaults to TEST-{epoch ms})

        Returns:
            RelayOutcome of the simulated event.
        """
        raw_payload = build_simulated_payload(order_code, kind, amount, transaction_id)
        payload = ProviderWebhookPayload.model_validate(raw_payload)
        logger.info("Simulating %s webhook for order %s", kind, order_code)
        return await self._relay(payload, raw_payload, None)

    async def _relay(
        self, payload: ProviderWebhookPayload, raw_payload: Any, tenant_key: str | None
    ) -> RelayOutcome:
        order_code = payload.event_data.order_code
        order_code = str(order_code) if order_code is not None else None

        event = self._normalizer.normalize(payload)
        if event is None:
            log_webhook_event(
                logger,
                str(payload.event_type_id),
                order_code,
                tenant_key=tenant_key,
                result="ignored",
            )
            return RelayOutcome(
                result="ignored", event_type=str(payload.event_type_id), order_code=order_code
            )

        forward = await self._forwarder.handle(event, raw_payload)
        result = "forwarded" if forward.routed else "unroutable"
        log_webhook_event(
            logger,
            event.event_type.value,
            forward.order_code,
            tenant_key=tenant_key,
            transaction_id=event.data.transaction_id,
            result=result,
            deliveries=len(forward.attempts),
        )
        return RelayOutcome(
            result=result,
            event_type=event.event_type.value,
            order_code=forward.order_code,
            forward=forward,
        )


def build_simulated_payload(
    order_code: int | str,
    kind: str,
    amount: int | None = None,
    transaction_id: str | None = None,
) -> dict[str, Any]:
    """Provider-shaped webhook body for a simulated event."""
    event_type = SIMULATED_EVENT_TYPES.get(kind, ProviderEventType.TRANSACTION_FAILED)
    status = (
        TransactionStatus.SUCCESS
        if event_type == ProviderEventType.TRANSACTION_PAYMENT_CREATED
        else TransactionStatus.ERROR
    )
    return {
        "EventTypeId": event_type.value,
        "EventData": {
            "TransactionId": transaction_id or f"TEST-{int(time.time() * 1000)}",
            "OrderCode": order_code,
            "StatusId": status.value,
            "Amount": amount if amount is not None else DEFAULT_SIMULATED_AMOUNT,
            "CurrencyCode": "EUR",
            "Email": "test@example.com",
            "FullName": "Test User",
            "Phone": "+306912345678",
            "CardNumber": "************4242",
            "CardTypeId": 0,
            "MerchantTrns": f"ORDER-{order_code}",
        },
    }
