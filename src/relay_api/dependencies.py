"""FastAPI dependency providers.

Every long-lived object lives on the GatewayContext stored at
`app.state.context` by create_app(). Routes depend on these providers rather
than on module-level singletons, so tests build an app around their own
context.

Usage in routes:
    from relay_api.dependencies import get_provider_client

    @router.get("/wallets")
    async def list_wallets(
        client: PaymentProviderClient = Depends(get_provider_client),
    ):
        ...
"""

from fastapi import Depends, Header, Request

from relay.context import GatewayContext
from relay.models.errors import ErrorCode, GatewayError
from relay.models.tenant import TenantConfig
from relay.services.callback_store import CallbackStore
from relay.services.provider_client import PaymentProviderClient
from relay.services.webhook_relay import WebhookRelay


def get_context(request: Request) -> GatewayContext:
    """Get the application context."""
    return request.app.state.context


def get_callback_store(context: GatewayContext = Depends(get_context)) -> CallbackStore:
    """Get the callback registration store."""
    return context.callbacks


def get_webhook_relay(context: GatewayContext = Depends(get_context)) -> WebhookRelay:
    """Get the inbound webhook pipeline."""
    return context.relay


def require_tenant(
    x_api_key: str | None = Header(default=None, alias="X-Api-Key"),
    context: GatewayContext = Depends(get_context),
) -> TenantConfig:
    """Resolve the calling tenant from the X-Api-Key header.

    Raises:
        GatewayError: API_KEY_MISSING or TENANT_NOT_FOUND (both 401).
    """
    if not x_api_key:
        raise GatewayError(ErrorCode.API_KEY_MISSING)

    tenant = context.registry.resolve_by_api_key(x_api_key)
    if tenant is None:
        raise GatewayError(ErrorCode.TENANT_NOT_FOUND)
    return tenant


def get_provider_client(
    tenant: TenantConfig = Depends(require_tenant),
    context: GatewayContext = Depends(get_context),
) -> PaymentProviderClient:
    """Get the provider client of the authenticated tenant."""
    return context.clients.for_tenant(tenant.tenant_key)


def get_webhook_tenant(
    tenant_key: str,
    context: GatewayContext = Depends(get_context),
) -> TenantConfig:
    """Resolve the tenant owning a webhook path.

    Raises:
        GatewayError: MERCHANT_NOT_FOUND (404) for an unknown merchant key.
    """
    tenant = context.registry.resolve_by_tenant_key(tenant_key)
    if tenant is None:
        raise GatewayError(ErrorCode.MERCHANT_NOT_FOUND, details={"merchant_key": tenant_key})
    return tenant


def require_debug_enabled(context: GatewayContext = Depends(get_context)) -> None:
    """Reject debug endpoints in production.

    Raises:
        GatewayError: DEBUG_DISABLED (403).
    """
    if context.settings.is_production:
        raise GatewayError(ErrorCode.DEBUG_DISABLED)


def parse_order_code(order_code: str) -> int:
    """Parse a numeric order code path parameter.

    Raises:
        GatewayError: INVALID_ORDER_CODE (400).
    """
    try:
        return int(order_code.strip())
    except ValueError:
        raise GatewayError(ErrorCode.INVALID_ORDER_CODE, details={"order_code": order_code})
