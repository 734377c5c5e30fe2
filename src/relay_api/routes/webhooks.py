"""Inbound provider webhook endpoints.

One pair of endpoints per merchant, addressed by the merchant key in the
path. These endpoints do NOT use X-Api-Key authentication: POSTed events are
authenticated by their HMAC signature instead.
"""

from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from relay.context import GatewayContext
from relay.models.errors import ErrorCode, GatewayError, ProviderError
from relay.models.tenant import TenantConfig
from relay.services.webhook_relay import WebhookRelay
from relay.services.webhook_verifier import SIGNATURE_HEADER
from relay.utils.logging import get_logger
from relay_api.dependencies import get_context, get_webhook_relay, get_webhook_tenant
from relay_api.models.webhooks import WebhookAck

logger = get_logger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])

UNROUTABLE_WARNING = "No callback registered for this order"
PROCESSING_ERROR = "Processing error"


@router.get(
    "/{tenant_key}",
    summary="Webhook URL verification",
    description="""
Answer the provider's webhook URL ownership check.

The verification key is fetched from the provider with the merchant's legacy
credentials and returned verbatim.
""",
    responses={
        200: {"description": "Verification key from the provider"},
        404: {"description": "Unknown merchant key"},
        500: {"description": "Verification key could not be fetched"},
    },
)
async def verify_webhook_url(
    tenant: TenantConfig = Depends(get_webhook_tenant),
    context: GatewayContext = Depends(get_context),
) -> JSONResponse:
    """Fetch and echo the provider verification key."""
    client = context.clients.for_tenant(tenant.tenant_key)
    try:
        key: Any = await client.fetch_webhook_verification_key()
    except ProviderError as e:
        logger.error("Webhook verification failed for merchant %s: %s", tenant.tenant_key, e)
        raise GatewayError(ErrorCode.WEBHOOK_VERIFICATION_FAILED) from e

    logger.info("Webhook URL verification answered for merchant %s", tenant.tenant_key)
    return JSONResponse(content=key)


@router.post(
    "/{tenant_key}",
    summary="Receive provider webhook",
    description="""
Receive a payment event from the provider and relay it to the tenant.

**Notes:**
- The signature header is verified over the raw body when the merchant has a
  webhook secret
- Authenticated events are always acknowledged with 200, including events
  that cannot be routed or fail during processing
""",
    response_model=WebhookAck,
    response_model_exclude_none=True,
    responses={
        200: {"description": "Event acknowledged"},
        401: {"description": "Invalid or missing signature"},
        404: {"description": "Unknown merchant key"},
    },
)
async def receive_webhook(
    request: Request,
    tenant: TenantConfig = Depends(get_webhook_tenant),
    relay: WebhookRelay = Depends(get_webhook_relay),
) -> WebhookAck:
    """Verify, normalize and forward a provider event."""
    raw_body = await request.body()
    outcome = await relay.process(tenant, raw_body, request.headers.get(SIGNATURE_HEADER))

    if outcome.result == "error":
        return WebhookAck(result=outcome.result, error=PROCESSING_ERROR)
    if outcome.result == "unroutable":
        return WebhookAck(result=outcome.result, warning=UNROUTABLE_WARNING)
    return WebhookAck(result=outcome.result)
