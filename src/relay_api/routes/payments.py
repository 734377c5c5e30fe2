"""Payment endpoints for orders, transactions and saved cards.

All endpoints require the tenant's X-Api-Key and act against the provider
with that tenant's credentials. Provider failures surface as 502 through the
ProviderError exception handler.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query
from starlette.status import HTTP_201_CREATED

from relay.context import GatewayContext
from relay.models.errors import ErrorCode, GatewayError, ProviderRequestError
from relay.services.provider_client import PaymentProviderClient
from relay.utils.logging import get_logger
from relay_api.dependencies import get_context, get_provider_client, parse_order_code
from relay_api.models.payments import (
    CardTokenRequest,
    CreateOrderRequest,
    CreateOrderResponse,
    CreateTransactionRequest,
    RefundRequest,
    UpdateOrderRequest,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post(
    "/orders",
    summary="Create payment order",
    description="""
Create a payment order with the provider and return the checkout URL.

**Requires X-Api-Key.**

An optional `callback` object registers where events for this order are
delivered. It is never sent to the provider. When present, an `order.created`
event is announced to its `webhookUrl` (or the default callback URL).

**Validation:**
- `amount` at least 30 cents, or exactly 0 with `isCardVerification`
- `dynamicDescriptor` at most 13 characters
- at most 10 `cardTokens`
- `maxInstallments` between 1 and 36
- `stateId` and `urlFail` only together
""",
    response_model=CreateOrderResponse,
    status_code=HTTP_201_CREATED,
    responses={
        201: {"description": "Order created"},
        400: {"description": "Invalid order request"},
        401: {"description": "Missing or invalid X-Api-Key"},
        502: {"description": "Provider request failed"},
    },
)
async def create_order(
    body: CreateOrderRequest,
    client: PaymentProviderClient = Depends(get_provider_client),
    context: GatewayContext = Depends(get_context),
) -> CreateOrderResponse:
    """Create an order and register its callback."""
    errors = body.validation_errors()
    if errors:
        raise GatewayError(ErrorCode.INVALID_ORDER_REQUEST, details={"errors": errors})

    result = await client.create_order(body.to_provider_body())
    if not result or "orderCode" not in result:
        raise ProviderRequestError("Provider response is missing orderCode")
    order_code = result["orderCode"]

    if body.callback is not None:
        context.callbacks.register(order_code, body.callback)
        event = context.normalizer.order_created(
            order_code,
            amount=body.amount,
            currency=body.currency_code,
            merchant_reference=body.merchant_trns,
            customer=body.customer_info(),
        )
        await context.forwarder.announce_order_created(event, body.callback)

    message = (
        "Payment notification email sent to customer"
        if body.payment_notification
        else "Redirect customer to checkoutUrl to complete payment"
    )
    return CreateOrderResponse(
        order_code=order_code,
        checkout_url=client.get_checkout_url(order_code),
        callback_registered=body.callback is not None,
        message=message,
    )


@router.get(
    "/orders/{order_code}",
    summary="Get order",
    responses={400: {"description": "Invalid order code"}},
)
async def get_order(
    order_code: int = Depends(parse_order_code),
    client: PaymentProviderClient = Depends(get_provider_client),
) -> dict[str, Any]:
    """Retrieve order details from the provider."""
    order = await client.get_order(order_code)
    return {"success": True, "order": order}


@router.patch(
    "/orders/{order_code}",
    summary="Update order",
    responses={400: {"description": "Invalid order code"}},
)
async def update_order(
    body: UpdateOrderRequest,
    order_code: int = Depends(parse_order_code),
    client: PaymentProviderClient = Depends(get_provider_client),
) -> dict[str, Any]:
    """Update amount, expiry or cancellation flags of an order."""
    await client.update_order(order_code, body.to_wire())
    return {"success": True, "message": "Order updated successfully"}


@router.delete(
    "/orders/{order_code}",
    summary="Cancel order",
    responses={400: {"description": "Invalid order code"}},
)
async def cancel_order(
    order_code: int = Depends(parse_order_code),
    client: PaymentProviderClient = Depends(get_provider_client),
) -> dict[str, Any]:
    """Cancel an unpaid order."""
    await client.cancel_order(order_code)
    return {"success": True, "message": "Order cancelled successfully"}


@router.get(
    "/checkout-url/{order_code}",
    summary="Get checkout URL",
    responses={400: {"description": "Invalid order code"}},
)
async def get_checkout_url(
    order_code: int = Depends(parse_order_code),
    color: str | None = Query(default=None, description="Checkout brand color"),
    payment_method: str | None = Query(default=None, alias="paymentMethod"),
    client: PaymentProviderClient = Depends(get_provider_client),
) -> dict[str, Any]:
    """Build the hosted checkout URL for an order."""
    url = client.get_checkout_url(order_code, color=color, payment_method=payment_method)
    return {"success": True, "checkoutUrl": url}


@router.get("/transactions/{transaction_id}", summary="Get transaction")
async def get_transaction(
    transaction_id: str,
    client: PaymentProviderClient = Depends(get_provider_client),
) -> dict[str, Any]:
    """Retrieve transaction details from the provider."""
    transaction = await client.get_transaction(transaction_id)
    return {"success": True, "transaction": transaction}


@router.post(
    "/transactions/{transaction_id}",
    summary="Charge recurring payment or capture pre-authorization",
    status_code=HTTP_201_CREATED,
)
async def create_transaction(
    transaction_id: str,
    body: CreateTransactionRequest,
    client: PaymentProviderClient = Depends(get_provider_client),
) -> dict[str, Any]:
    """Create a new transaction based on an existing one."""
    transaction = await client.create_transaction(transaction_id, body.to_wire())
    return {"success": True, "transaction": transaction}


@router.delete("/transactions/{transaction_id}", summary="Cancel or refund transaction")
async def cancel_transaction(
    transaction_id: str,
    amount: int | None = Query(default=None, gt=0),
    source_code: str | None = Query(default=None, alias="sourceCode"),
    client: PaymentProviderClient = Depends(get_provider_client),
) -> dict[str, Any]:
    """Cancel a transaction, fully or partially."""
    result = await client.cancel_transaction(transaction_id, amount, source_code)
    return {"success": True, "result": result}


@router.post("/transactions/{transaction_id}/refund", summary="Fast refund")
async def refund_transaction(
    transaction_id: str,
    body: RefundRequest,
    client: PaymentProviderClient = Depends(get_provider_client),
) -> dict[str, Any]:
    """Refund a card transaction."""
    result = await client.fast_refund(
        transaction_id, body.amount, body.source_code, body.merchant_trns
    )
    return {"success": True, "refund": result}


@router.post("/card-tokens", summary="Save card", status_code=HTTP_201_CREATED)
async def create_card_token(
    body: CardTokenRequest,
    client: PaymentProviderClient = Depends(get_provider_client),
) -> dict[str, Any]:
    """Save the card used in a transaction as a reusable token."""
    result = await client.create_card_token(body.transaction_id, body.group_id)
    return {"success": True, "token": result.get("token") if result else None}
