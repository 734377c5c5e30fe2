"""Pytest configuration and fixtures for the payment gateway tests.

This module provides reusable fixtures for testing:
- Tenant configurations and a merchant registry
- A controllable clock for token and callback expiry
- A recording fake of the provider and tenant HTTP endpoints (httpx.MockTransport)
"""

import json
import os
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx
import pytest

# === Environment Setup ===

# Keep tests independent of any merchant configuration in the developer's shell
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from relay.models.enums import ProviderEnvironment  # noqa: E402
from relay.models.tenant import (  # noqa: E402
    ProviderCredentials,
    ProviderEndpoints,
    TenantConfig,
)
from relay.services.merchant_registry import MerchantRegistry  # noqa: E402

TENANT_A_SECRET = "whsec_tenant_a"
TENANT_B_SECRET = "whsec_tenant_b"


# === Clock ===


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    """Clock fixed at 2026-01-15 12:00:00 UTC until advanced."""
    return FakeClock(datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc))


# === Tenant Fixtures ===


def make_tenant(
    tenant_key: str,
    api_key: str,
    webhook_secret: str = "",
    require_signature: bool = False,
    source_code: str | None = None,
) -> TenantConfig:
    """Build a demo-environment tenant."""
    return TenantConfig(
        tenant_key=tenant_key,
        api_key=api_key,
        environment=ProviderEnvironment.DEMO,
        credentials=ProviderCredentials(
            client_id=f"{tenant_key}-client",
            client_secret=f"{tenant_key}-client-secret",
            merchant_id=f"{tenant_key}-merchant",
            api_key=f"{tenant_key}-legacy-key",
            source_code=source_code,
        ),
        endpoints=ProviderEndpoints.for_environment(ProviderEnvironment.DEMO),
        webhook_secret=webhook_secret,
        require_signature=require_signature,
    )


@pytest.fixture
def tenant_a() -> TenantConfig:
    """Tenant with a webhook secret."""
    return make_tenant("shopa", "api-key-a", TENANT_A_SECRET, source_code="1234")


@pytest.fixture
def tenant_b() -> TenantConfig:
    """Second tenant with a different webhook secret."""
    return make_tenant("shopb", "api-key-b", TENANT_B_SECRET)


@pytest.fixture
def open_tenant() -> TenantConfig:
    """Tenant without a webhook secret (unsigned webhooks accepted)."""
    return make_tenant("sandbox", "api-key-sandbox")


@pytest.fixture
def strict_tenant() -> TenantConfig:
    """Tenant without a webhook secret that still requires signatures."""
    return make_tenant("strict", "api-key-strict", require_signature=True)


@pytest.fixture
def registry(
    tenant_a: TenantConfig,
    tenant_b: TenantConfig,
    open_tenant: TenantConfig,
    strict_tenant: TenantConfig,
) -> MerchantRegistry:
    """Registry holding all test tenants."""
    return MerchantRegistry([tenant_a, tenant_b, open_tenant, strict_tenant])


# === HTTP Fakes ===

Responder = httpx.Response | Callable[[httpx.Request], httpx.Response]


class FakeHttp:
    """Records every outbound request and answers from registered routes.

    Unregistered URLs answer 200 with an empty JSON object.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: dict[tuple[str, str], Responder] = {}

    def add(
        self,
        method: str,
        url: str,
        json_body: Any = None,
        status_code: int = 200,
        responder: Callable[[httpx.Request], httpx.Response] | None = None,
    ) -> None:
        """Register the response for METHOD url (query string ignored)."""
        if responder is not None:
            self._routes[(method.upper(), url)] = responder
        else:
            self._routes[(method.upper(), url)] = httpx.Response(
                status_code, json=json_body if json_body is not None else {}
            )

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = f"{request.url.scheme}://{request.url.host}{request.url.path}"
        route = self._routes.get((request.method, url))
        if route is None:
            return httpx.Response(200, json={})
        if callable(route):
            return route(request)
        return route

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self.transport)

    def requests_to(self, url: str, method: str = "POST") -> list[httpx.Request]:
        """Requests sent to a URL (query string ignored)."""
        return [
            request
            for request in self.requests
            if request.method == method
            and f"{request.url.scheme}://{request.url.host}{request.url.path}" == url
        ]


def request_json(request: httpx.Request) -> Any:
    """Decode the JSON body of a recorded request."""
    return json.loads(request.content)


@pytest.fixture
def fake_http() -> FakeHttp:
    """Recording fake for provider and tenant endpoints."""
    return FakeHttp()


@pytest.fixture
def token_response() -> dict[str, Any]:
    """Provider token endpoint response (1 hour lifetime)."""
    return {"access_token": "provider-token-1", "expires_in": 3600, "token_type": "Bearer"}
