"""Per-tenant client for the payment provider's REST API.

Bearer-authenticated endpoints (orders, transactions lookup, card tokens,
wallets, fast refunds) use the tenant's TokenCache. Legacy endpoints (order
lookup/update/cancel, recurring charges, cancellations, webhook verification
key) use HTTP Basic auth built from the tenant's merchant id and legacy key.
"""

from typing import Any
from urllib.parse import urlencode

import httpx

from relay.models.errors import ProviderRequestError
from relay.models.tenant import TenantConfig
from relay.services.token_cache import TokenCache
from relay.utils.logging import get_logger

logger = get_logger(__name__)


class PaymentProviderClient:
    """Async client bound to one tenant's provider credentials.

    Usage:
        client = PaymentProviderClient(tenant, http_client)
        result = await client.create_order({"amount": 1500})
        checkout_url = client.get_checkout_url(result["orderCode"])
    """

    def __init__(
        self,
        tenant: TenantConfig,
        http_client: httpx.AsyncClient,
        token_cache: TokenCache | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            tenant: Tenant configuration (credentials and endpoints)
            http_client: Shared async HTTP client
            token_cache: Token cache for bearer calls (created if omitted)
        """
        self._tenant = tenant
        self._http = http_client
        self.token_cache = token_cache or TokenCache(tenant, http_client)

    @property
    def tenant(self) -> TenantConfig:
        """Tenant this client acts for."""
        return self._tenant

    # === Auth helpers ===

    def _basic_auth(self) -> httpx.BasicAuth:
        credentials = self._tenant.credentials
        return httpx.BasicAuth(credentials.merchant_id, credentials.api_key)

    async def _bearer_headers(self) -> dict[str, str]:
        token = await self.token_cache.get_token()
        return {"Authorization": f"Bearer {token}"}

    async def _send(
        self,
        method: str,
        url: str,
        context: str,
        *,
        bearer: bool,
        json: Any = None,
    ) -> Any:
        """Issue a request and decode the JSON body.

        Raises:
            ProviderAuthenticationError: If a bearer token cannot be obtained.
            ProviderRequestError: If the provider call fails.
        """
        kwargs: dict[str, Any] = {}
        if bearer:
            kwargs["headers"] = await self._bearer_headers()
        else:
            kwargs["auth"] = self._basic_auth()
        if json is not None:
            kwargs["json"] = json

        try:
            response = await self._http.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                "%s for merchant %s: status %s",
                context,
                self._tenant.tenant_key,
                e.response.status_code,
            )
            if bearer and e.response.status_code == httpx.codes.UNAUTHORIZED:
                # Token revoked before its stated expiry
                self.token_cache.invalidate()
            raise ProviderRequestError(context, status_code=e.response.status_code) from e
        except httpx.HTTPError as e:
            logger.error("%s for merchant %s: %s", context, self._tenant.tenant_key, e)
            raise ProviderRequestError(context) from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ProviderRequestError(f"{context}: malformed response") from e

    # === Orders ===

    async def create_order(self, order: dict[str, Any]) -> dict[str, Any]:
        """Create a payment order.

        Args:
            order: Provider order request body (camelCase fields)

        Returns:
            Provider response containing `orderCode`.
        """
        body = dict(order)
        if not body.get("sourceCode") and self._tenant.credentials.source_code:
            body["sourceCode"] = self._tenant.credentials.source_code

        logger.info(
            "Creating payment order for merchant %s, amount %s",
            self._tenant.tenant_key,
            body.get("amount"),
        )
        return await self._send(
            "POST",
            f"{self._tenant.endpoints.api_url}/checkout/v2/orders",
            "Failed to create payment order",
            bearer=True,
            json=body,
        )

    def get_checkout_url(
        self,
        order_code: int | str,
        *,
        color: str | None = None,
        payment_method: str | None = None,
    ) -> str:
        """Build the hosted checkout URL a customer is redirected to."""
        params: dict[str, str] = {"ref": str(order_code)}
        if color:
            params["color"] = color
        if payment_method:
            params["paymentMethod"] = payment_method
        return f"{self._tenant.endpoints.checkout_url}/web/checkout?{urlencode(params)}"

    async def get_order(self, order_code: int) -> dict[str, Any]:
        """Retrieve order details (basic auth)."""
        return await self._send(
            "GET",
            f"{self._tenant.endpoints.checkout_url}/api/orders/{order_code}",
            "Failed to retrieve order",
            bearer=False,
        )

    async def update_order(self, order_code: int, update: dict[str, Any]) -> None:
        """Update amount, expiry or cancellation flags of an order (basic auth)."""
        await self._send(
            "PATCH",
            f"{self._tenant.endpoints.checkout_url}/api/orders/{order_code}",
            "Failed to update order",
            bearer=False,
            json=update,
        )

    async def cancel_order(self, order_code: int) -> None:
        """Cancel a payment order (basic auth)."""
        await self._send(
            "DELETE",
            f"{self._tenant.endpoints.checkout_url}/api/orders/{order_code}",
            "Failed to cancel order",
            bearer=False,
        )

    # === Transactions ===

    async def get_transaction(self, transaction_id: str) -> dict[str, Any]:
        """Retrieve transaction details (bearer)."""
        return await self._send(
            "GET",
            f"{self._tenant.endpoints.api_url}/checkout/v2/transactions/{transaction_id}",
            "Failed to retrieve transaction",
            bearer=True,
        )

    async def create_transaction(
        self, transaction_id: str, request: dict[str, Any]
    ) -> dict[str, Any]:
        """Charge a recurring payment or capture a pre-authorization (basic auth)."""
        return await self._send(
            "POST",
            f"{self._tenant.endpoints.checkout_url}/api/transactions/{transaction_id}",
            "Failed to create transaction",
            bearer=False,
            json=request,
        )

    async def cancel_transaction(
        self,
        transaction_id: str,
        amount: int | None = None,
        source_code: str | None = None,
    ) -> dict[str, Any]:
        """Cancel or refund a transaction (basic auth)."""
        url = f"{self._tenant.endpoints.checkout_url}/api/transactions/{transaction_id}"
        params: dict[str, str] = {}
        if amount is not None:
            params["amount"] = str(amount)
        if source_code:
            params["sourceCode"] = source_code
        if params:
            url = f"{url}?{urlencode(params)}"

        return await self._send("DELETE", url, "Failed to cancel transaction", bearer=False)

    async def fast_refund(
        self,
        transaction_id: str,
        amount: int,
        source_code: str | None = None,
        merchant_trns: str | None = None,
    ) -> dict[str, Any]:
        """Refund a card transaction through the fast-refund API (bearer)."""
        body: dict[str, Any] = {"amount": amount, "sourceCode": source_code or "Default"}
        if merchant_trns:
            body["merchantTrns"] = merchant_trns
        return await self._send(
            "POST",
            f"{self._tenant.endpoints.api_url}/acquiring/v1/transactions/"
            f"{transaction_id}:fastrefund",
            "Failed to process fast refund",
            bearer=True,
            json=body,
        )

    # === Cards, wallets, webhooks ===

    async def create_card_token(
        self, transaction_id: str, group_id: str | None = None
    ) -> dict[str, Any]:
        """Save the card used in a transaction as a reusable token (bearer)."""
        body: dict[str, Any] = {"transactionId": transaction_id}
        if group_id:
            body["groupId"] = group_id
        return await self._send(
            "POST",
            f"{self._tenant.endpoints.api_url}/acquiring/v1/cards/tokens",
            "Failed to create card token",
            bearer=True,
            json=body,
        )

    async def get_wallets(self) -> list[dict[str, Any]]:
        """List the merchant's wallets (bearer)."""
        return await self._send(
            "GET",
            f"{self._tenant.endpoints.api_url}/merchants/v1/wallets",
            "Failed to retrieve wallets",
            bearer=True,
        )

    async def fetch_webhook_verification_key(self) -> Any:
        """Fetch the webhook URL ownership key the provider expects back (basic auth)."""
        return await self._send(
            "GET",
            f"{self._tenant.endpoints.checkout_url}/api/messages/config/token",
            "Failed to fetch webhook verification key",
            bearer=False,
        )


class TenantClients:
    """Per-tenant provider clients, built eagerly for every registered tenant.

    Each client owns its tenant's TokenCache, so token state lives exactly as
    long as the client does.
    """

    def __init__(self, tenants: list[TenantConfig], http_client: httpx.AsyncClient) -> None:
        self._clients = {
            tenant.tenant_key: PaymentProviderClient(tenant, http_client) for tenant in tenants
        }

    def for_tenant(self, tenant_key: str) -> PaymentProviderClient:
        """Get the client for a tenant key.

        Raises:
            KeyError: If the tenant is not registered.
        """
        return self._clients[tenant_key]

    def __contains__(self, tenant_key: object) -> bool:
        return tenant_key in self._clients

    def __len__(self) -> int:
        return len(self._clients)
