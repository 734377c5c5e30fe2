"""Application context: every long-lived gateway object, built once at startup.

Request handlers receive these objects through dependency injection instead of
reaching for module-level state, so each piece can be replaced in tests.
"""

from collections.abc import Mapping

import httpx
from pydantic import BaseModel, ConfigDict

from relay.config import GatewaySettings
from relay.services.callback_store import CallbackStore
from relay.services.event_normalizer import EventNormalizer
from relay.services.merchant_registry import MerchantRegistry
from relay.services.provider_client import TenantClients
from relay.services.webhook_forwarder import WebhookForwarder
from relay.services.webhook_relay import WebhookRelay
from relay.services.webhook_verifier import WebhookVerifier
from relay.utils.logging import get_logger

logger = get_logger(__name__)


class GatewayContext(BaseModel):
    """Long-lived services shared by all requests."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    settings: GatewaySettings
    registry: MerchantRegistry
    clients: TenantClients
    callbacks: CallbackStore
    verifier: WebhookVerifier
    normalizer: EventNormalizer
    forwarder: WebhookForwarder
    relay: WebhookRelay
    http_client: httpx.AsyncClient

    async def aclose(self) -> None:
        """Release the shared HTTP client."""
        await self.http_client.aclose()


def build_context(
    settings: GatewaySettings | None = None,
    environ: Mapping[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    registry: MerchantRegistry | None = None,
) -> GatewayContext:
    """Build the application context.

    Args:
        settings: Process settings (read from the environment if omitted)
        environ: Environment mapping used for settings and tenants
        transport: HTTP transport for the shared client (tests pass a mock)
        registry: Pre-built tenant registry (scanned from environ if omitted)

    Returns:
        GatewayContext with per-tenant clients built for every tenant.
    """
    if settings is None:
        settings = GatewaySettings.from_environ(environ)
    if registry is None:
        registry = MerchantRegistry.from_environ(environ)
    registry.validate()

    http_client = httpx.AsyncClient(transport=transport)
    callbacks = CallbackStore(
        ttl_seconds=settings.callback_ttl_seconds,
        max_entries=settings.callback_max_entries,
    )
    verifier = WebhookVerifier()
    normalizer = EventNormalizer()
    forwarder = WebhookForwarder(
        callbacks,
        http_client,
        default_url=settings.default_callback_url,
        default_secret=settings.default_callback_secret,
        timeout=settings.delivery_timeout_seconds,
    )

    logger.info(
        "Gateway context ready: %d merchant(s) [%s], environment=%s",
        len(registry),
        ", ".join(registry.tenant_keys()),
        settings.environment,
    )
    return GatewayContext(
        settings=settings,
        registry=registry,
        clients=TenantClients(registry.list_all(), http_client),
        callbacks=callbacks,
        verifier=verifier,
        normalizer=normalizer,
        forwarder=forwarder,
        relay=WebhookRelay(verifier, normalizer, forwarder),
        http_client=http_client,
    )
