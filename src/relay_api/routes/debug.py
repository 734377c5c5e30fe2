"""Debug endpoints for exercising the webhook relay (403 in production).

- Simulate a provider webhook for an order without involving the provider
- Inspect the (redacted) callback registration of an order
"""

from fastapi import APIRouter, Depends

from relay.models.callback import CallbackSummary
from relay.services.callback_store import CallbackStore, normalize_order_code
from relay.services.webhook_relay import WebhookRelay
from relay_api.dependencies import get_callback_store, get_webhook_relay, require_debug_enabled
from relay_api.models.webhooks import SimulateWebhookRequest, SimulateWebhookResponse

router = APIRouter(
    prefix="/debug",
    tags=["debug"],
    dependencies=[Depends(require_debug_enabled)],
    responses={403: {"description": "Disabled in production"}},
)


@router.post(
    "/webhooks/simulate",
    summary="Simulate provider webhook",
    response_model=SimulateWebhookResponse,
)
async def simulate_webhook(
    body: SimulateWebhookRequest,
    relay: WebhookRelay = Depends(get_webhook_relay),
) -> SimulateWebhookResponse:
    """Run a synthetic provider event through normalize and forward."""
    outcome = await relay.simulate(
        body.order_code, body.event_type, body.amount, body.transaction_id
    )
    deliveries = len(outcome.forward.attempts) if outcome.forward else 0
    return SimulateWebhookResponse(
        message=f"Simulated {body.event_type} webhook for order {body.order_code}",
        forwarded=outcome.result == "forwarded",
        result=outcome.result,
        deliveries=deliveries,
    )


@router.get(
    "/callbacks/{order_code}",
    summary="Inspect callback registration",
    response_model=CallbackSummary,
    response_model_exclude_none=True,
)
async def get_callback(
    order_code: str,
    store: CallbackStore = Depends(get_callback_store),
) -> CallbackSummary:
    """Show whether an order has a callback registered, without URLs or secret."""
    key = normalize_order_code(order_code)
    return CallbackSummary.from_registration(key, store.get(key))
