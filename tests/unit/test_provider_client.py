"""Unit tests for PaymentProviderClient and TenantClients."""

from typing import Any

import httpx
import pytest

from conftest import FakeClock, FakeHttp, request_json
from relay.models.errors import ProviderAuthenticationError, ProviderRequestError
from relay.models.tenant import (
    DEMO_API_URL,
    DEMO_AUTH_URL,
    DEMO_CHECKOUT_URL,
    TenantConfig,
)
from relay.services.provider_client import PaymentProviderClient, TenantClients
from relay.services.token_cache import TokenCache

TOKEN_URL = f"{DEMO_AUTH_URL}/connect/token"
ORDERS_URL = f"{DEMO_API_URL}/checkout/v2/orders"


def _basic(username: str, password: str) -> str:
    request = next(httpx.BasicAuth(username, password).auth_flow(httpx.Request("GET", "https://x")))
    return request.headers["Authorization"]


@pytest.fixture
def client(
    tenant_a: TenantConfig,
    fake_http: FakeHttp,
    clock: FakeClock,
    token_response: dict[str, Any],
) -> PaymentProviderClient:
    fake_http.add("POST", TOKEN_URL, token_response)
    http_client = fake_http.client()
    return PaymentProviderClient(
        tenant_a, http_client, TokenCache(tenant_a, http_client, clock=clock)
    )


class TestBearerCalls:
    """Tests for endpoints authenticated with the cached OAuth2 token."""

    @pytest.mark.asyncio
    async def test_create_order_uses_bearer_token_and_default_source(
        self, client: PaymentProviderClient, fake_http: FakeHttp
    ) -> None:
        fake_http.add("POST", ORDERS_URL, {"orderCode": 1234567890123456})

        result = await client.create_order({"amount": 1500})

        assert result == {"orderCode": 1234567890123456}
        request = fake_http.requests_to(ORDERS_URL)[0]
        assert request.headers["Authorization"] == "Bearer provider-token-1"
        assert request_json(request) == {"amount": 1500, "sourceCode": "1234"}

    @pytest.mark.asyncio
    async def test_explicit_source_code_is_kept(
        self, client: PaymentProviderClient, fake_http: FakeHttp
    ) -> None:
        fake_http.add("POST", ORDERS_URL, {"orderCode": 1})

        await client.create_order({"amount": 1500, "sourceCode": "9999"})

        assert request_json(fake_http.requests_to(ORDERS_URL)[0])["sourceCode"] == "9999"

    @pytest.mark.asyncio
    async def test_token_reused_across_calls(
        self, client: PaymentProviderClient, fake_http: FakeHttp
    ) -> None:
        await client.get_wallets()
        await client.get_transaction("txn-1")

        assert len(fake_http.requests_to(TOKEN_URL)) == 1
        assert len(fake_http.requests_to(f"{DEMO_API_URL}/merchants/v1/wallets", "GET")) == 1

    @pytest.mark.asyncio
    async def test_fast_refund_defaults_source_code(
        self, client: PaymentProviderClient, fake_http: FakeHttp
    ) -> None:
        url = f"{DEMO_API_URL}/acquiring/v1/transactions/txn-1:fastrefund"

        await client.fast_refund("txn-1", 500)

        assert request_json(fake_http.requests_to(url)[0]) == {
            "amount": 500,
            "sourceCode": "Default",
        }

    @pytest.mark.asyncio
    async def test_rejected_bearer_token_is_dropped(
        self, client: PaymentProviderClient, fake_http: FakeHttp
    ) -> None:
        """Should re-authenticate after the provider rejects a cached token."""
        wallets_url = f"{DEMO_API_URL}/merchants/v1/wallets"
        fake_http.add("GET", wallets_url, {"message": "token revoked"}, status_code=401)

        with pytest.raises(ProviderRequestError):
            await client.get_wallets()
        assert client.token_cache.record is None

        fake_http.add("GET", wallets_url, [])
        await client.get_wallets()

        assert len(fake_http.requests_to(TOKEN_URL)) == 2

    @pytest.mark.asyncio
    async def test_legacy_401_keeps_bearer_token(
        self, client: PaymentProviderClient, fake_http: FakeHttp
    ) -> None:
        await client.get_wallets()
        fake_http.add("GET", f"{DEMO_CHECKOUT_URL}/api/orders/111", {}, status_code=401)

        with pytest.raises(ProviderRequestError):
            await client.get_order(111)

        assert client.token_cache.record is not None

    @pytest.mark.asyncio
    async def test_token_failure_propagates(
        self, tenant_b: TenantConfig, fake_http: FakeHttp
    ) -> None:
        fake_http.add("POST", TOKEN_URL, {"error": "invalid_client"}, status_code=400)
        client = PaymentProviderClient(tenant_b, fake_http.client())

        with pytest.raises(ProviderAuthenticationError):
            await client.get_wallets()

        assert fake_http.requests_to(f"{DEMO_API_URL}/merchants/v1/wallets", "GET") == []


class TestLegacyCalls:
    """Tests for endpoints authenticated with merchant id and legacy key."""

    @pytest.mark.asyncio
    async def test_get_order_uses_basic_auth(
        self, client: PaymentProviderClient, fake_http: FakeHttp
    ) -> None:
        url = f"{DEMO_CHECKOUT_URL}/api/orders/111"
        fake_http.add("GET", url, {"OrderCode": 111, "StateId": 0})

        order = await client.get_order(111)

        assert order["OrderCode"] == 111
        request = fake_http.requests_to(url, "GET")[0]
        assert request.headers["Authorization"] == _basic("shopa-merchant", "shopa-legacy-key")
        assert fake_http.requests_to(TOKEN_URL) == []

    @pytest.mark.asyncio
    async def test_cancel_transaction_passes_query(
        self, client: PaymentProviderClient, fake_http: FakeHttp
    ) -> None:
        await client.cancel_transaction("txn-1", amount=300, source_code="1234")

        request = fake_http.requests[-1]
        assert request.method == "DELETE"
        assert request.url.path == "/api/transactions/txn-1"
        assert request.url.params["amount"] == "300"
        assert request.url.params["sourceCode"] == "1234"

    @pytest.mark.asyncio
    async def test_empty_response_body_returns_none(
        self, client: PaymentProviderClient, fake_http: FakeHttp
    ) -> None:
        url = f"{DEMO_CHECKOUT_URL}/api/orders/111"
        fake_http.add("DELETE", url, responder=lambda request: httpx.Response(200))

        assert await client.cancel_order(111) is None

    @pytest.mark.asyncio
    async def test_provider_error_carries_status(
        self, client: PaymentProviderClient, fake_http: FakeHttp
    ) -> None:
        url = f"{DEMO_CHECKOUT_URL}/api/orders/111"
        fake_http.add("GET", url, {"message": "not found"}, status_code=404)

        with pytest.raises(ProviderRequestError) as exc_info:
            await client.get_order(111)

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_verification_key_fetch(
        self, client: PaymentProviderClient, fake_http: FakeHttp
    ) -> None:
        url = f"{DEMO_CHECKOUT_URL}/api/messages/config/token"
        fake_http.add("GET", url, {"Key": "ABCDEF"})

        assert await client.fetch_webhook_verification_key() == {"Key": "ABCDEF"}


class TestCheckoutUrl:
    def test_checkout_url_with_options(self, client: PaymentProviderClient) -> None:
        url = client.get_checkout_url(111, color="ff0000", payment_method="23")

        assert url == f"{DEMO_CHECKOUT_URL}/web/checkout?ref=111&color=ff0000&paymentMethod=23"

    def test_checkout_url_minimal(self, client: PaymentProviderClient) -> None:
        assert client.get_checkout_url("111") == f"{DEMO_CHECKOUT_URL}/web/checkout?ref=111"


class TestTenantClients:
    def test_one_client_per_tenant(
        self, tenant_a: TenantConfig, tenant_b: TenantConfig, fake_http: FakeHttp
    ) -> None:
        clients = TenantClients([tenant_a, tenant_b], fake_http.client())

        assert len(clients) == 2
        assert "shopa" in clients
        assert clients.for_tenant("shopa").tenant is tenant_a
        assert clients.for_tenant("shopa").token_cache is not clients.for_tenant(
            "shopb"
        ).token_cache

        with pytest.raises(KeyError):
            clients.for_tenant("unknown")
