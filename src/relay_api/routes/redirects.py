"""Landing endpoints the provider's hosted checkout redirects customers to.

The provider appends `t` (transaction id) and `s` (order code). These pages
are informational only: payment state is settled by webhooks, never here.
"""

from typing import Any

from fastapi import APIRouter, Query

from relay.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/payment", tags=["redirects"])


@router.get("/success", summary="Checkout success redirect")
async def payment_success(
    transaction_id: str | None = Query(default=None, alias="t"),
    order_code: str | None = Query(default=None, alias="s"),
    lang: str | None = Query(default=None),
) -> dict[str, Any]:
    """Acknowledge a successful checkout redirect."""
    logger.info(
        "Payment success redirect: order %s, transaction %s, lang %s",
        order_code,
        transaction_id,
        lang,
    )
    return {
        "success": True,
        "message": "Payment completed successfully!",
        "transactionId": transaction_id,
        "orderCode": order_code,
    }


@router.get("/failure", summary="Checkout failure redirect")
async def payment_failure(
    transaction_id: str | None = Query(default=None, alias="t"),
    order_code: str | None = Query(default=None, alias="s"),
    lang: str | None = Query(default=None),
) -> dict[str, Any]:
    """Acknowledge a failed or cancelled checkout redirect."""
    logger.info(
        "Payment failure redirect: order %s, transaction %s, lang %s",
        order_code,
        transaction_id,
        lang,
    )
    return {
        "success": False,
        "message": "Payment failed or was cancelled.",
        "transactionId": transaction_id,
        "orderCode": order_code,
    }
