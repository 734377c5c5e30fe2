"""Merchant (tenant) registry built from the MERCHANT_{key}_* key space.

Environment layout per tenant (key must not contain underscores):
    MERCHANT_{key}_API_KEY              inbound X-Api-Key credential (generated if absent)
    MERCHANT_{key}_VIVA_CLIENT_ID       OAuth2 client id (required)
    MERCHANT_{key}_VIVA_CLIENT_SECRET   OAuth2 client secret (required)
    MERCHANT_{key}_VIVA_MERCHANT_ID     legacy basic-auth merchant id
    MERCHANT_{key}_VIVA_API_KEY         legacy basic-auth API key
    MERCHANT_{key}_VIVA_SOURCE_CODE     default payment source
    MERCHANT_{key}_VIVA_WEBHOOK_SECRET  inbound webhook HMAC secret
    MERCHANT_{key}_VIVA_ENVIRONMENT     "production", anything else is demo
    MERCHANT_{key}_REQUIRE_SIGNATURE    reject unsigned webhooks without a secret
"""

import os
import re
import secrets
from collections.abc import Iterable, Mapping

from relay.config import parse_bool
from relay.models.enums import ProviderEnvironment
from relay.models.tenant import ProviderCredentials, ProviderEndpoints, TenantConfig
from relay.utils.logging import get_logger

logger = get_logger(__name__)

MERCHANT_KEY_PATTERN = re.compile(r"^MERCHANT_([^_]+)_VIVA_")


class DuplicateTenantError(ValueError):
    """Raised when two tenants share a tenant key or an API key."""


class MerchantRegistry:
    """Immutable set of tenant configurations.

    Resolves tenants by their opaque inbound API key or by their routable
    merchant key. Built once at startup.
    """

    def __init__(self, tenants: Iterable[TenantConfig]) -> None:
        """Index tenants by tenant key and API key.

        Args:
            tenants: Tenant configurations

        Raises:
            DuplicateTenantError: If a tenant key or API key is used twice.
        """
        self._by_tenant_key: dict[str, TenantConfig] = {}
        self._by_api_key: dict[str, TenantConfig] = {}

        for tenant in tenants:
            if tenant.tenant_key in self._by_tenant_key:
                raise DuplicateTenantError(f"Duplicate tenant key: {tenant.tenant_key}")
            if tenant.api_key in self._by_api_key:
                raise DuplicateTenantError(
                    f"Tenant {tenant.tenant_key} reuses another tenant's API key"
                )
            self._by_tenant_key[tenant.tenant_key] = tenant
            self._by_api_key[tenant.api_key] = tenant

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> "MerchantRegistry":
        """Scan the environment for tenants and build the registry.

        Tenants missing OAuth2 client credentials are skipped with a warning.
        A tenant reusing an earlier tenant's API key (in sorted key order) is
        skipped with a warning as well.
        Tenants missing an inbound API key get a random one, logged so the
        operator can hand it out; it changes on every restart.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            MerchantRegistry with every tenant that could be resolved.
        """
        env = os.environ if environ is None else environ
        require_default = parse_bool(env.get("WEBHOOK_REQUIRE_SIGNATURE"))

        tenant_keys = sorted(
            {match.group(1) for key in env if (match := MERCHANT_KEY_PATTERN.match(key))}
        )

        tenants: list[TenantConfig] = []
        owners: dict[str, str] = {}
        for tenant_key in tenant_keys:
            tenant = _build_tenant(tenant_key, env, require_default)
            if tenant is None:
                continue
            if tenant.api_key in owners:
                logger.warning(
                    "Merchant %s: API_KEY already used by merchant %s, skipping",
                    tenant_key,
                    owners[tenant.api_key],
                )
                continue
            owners[tenant.api_key] = tenant_key
            tenants.append(tenant)

        return cls(tenants)

    def resolve_by_api_key(self, api_key: str | None) -> TenantConfig | None:
        """Look up a tenant by the X-Api-Key header value."""
        if not api_key:
            return None
        return self._by_api_key.get(api_key)

    def resolve_by_tenant_key(self, tenant_key: str | None) -> TenantConfig | None:
        """Look up a tenant by the merchant key in a webhook URL path."""
        if not tenant_key:
            return None
        return self._by_tenant_key.get(tenant_key)

    def list_all(self) -> list[TenantConfig]:
        """Get all tenants, ordered by tenant key."""
        return [self._by_tenant_key[key] for key in sorted(self._by_tenant_key)]

    def tenant_keys(self) -> list[str]:
        """Get all registered tenant keys."""
        return sorted(self._by_tenant_key)

    def validate(self) -> bool:
        """Check that at least one tenant is configured.

        Returns:
            False (after logging an error) when the registry is empty.
        """
        if not self._by_tenant_key:
            logger.error(
                "No merchant configurations found. "
                "Add MERCHANT_{key}_VIVA_CLIENT_ID and MERCHANT_{key}_VIVA_CLIENT_SECRET."
            )
            return False
        return True

    def __len__(self) -> int:
        return len(self._by_tenant_key)


def _build_tenant(
    tenant_key: str,
    env: Mapping[str, str],
    require_default: bool,
) -> TenantConfig | None:
    prefix = f"MERCHANT_{tenant_key}_"
    client_id = env.get(f"{prefix}VIVA_CLIENT_ID", "")
    client_secret = env.get(f"{prefix}VIVA_CLIENT_SECRET", "")

    if not client_id or not client_secret:
        logger.warning(
            "Merchant %s: missing VIVA_CLIENT_ID or VIVA_CLIENT_SECRET, skipping",
            tenant_key,
        )
        return None

    api_key = env.get(f"{prefix}API_KEY", "")
    if not api_key:
        api_key = secrets.token_hex(24)
        logger.warning(
            "Merchant %s: missing API_KEY, generated %s (not persisted, changes on restart)",
            tenant_key,
            api_key,
        )

    environment = (
        ProviderEnvironment.PRODUCTION
        if env.get(f"{prefix}VIVA_ENVIRONMENT", "demo") == "production"
        else ProviderEnvironment.DEMO
    )
    webhook_secret = env.get(f"{prefix}VIVA_WEBHOOK_SECRET", "")
    require_signature = parse_bool(env.get(f"{prefix}REQUIRE_SIGNATURE"), require_default)

    if not webhook_secret:
        if require_signature:
            logger.warning(
                "Merchant %s: no webhook secret but signatures required, "
                "all inbound webhooks will be rejected",
                tenant_key,
            )
        else:
            logger.warning(
                "Merchant %s: no webhook secret, inbound signature verification disabled",
                tenant_key,
            )

    return TenantConfig(
        tenant_key=tenant_key,
        api_key=api_key,
        environment=environment,
        credentials=ProviderCredentials(
            client_id=client_id,
            client_secret=client_secret,
            merchant_id=env.get(f"{prefix}VIVA_MERCHANT_ID", ""),
            api_key=env.get(f"{prefix}VIVA_API_KEY", ""),
            source_code=env.get(f"{prefix}VIVA_SOURCE_CODE") or None,
        ),
        endpoints=ProviderEndpoints.for_environment(environment),
        webhook_secret=webhook_secret,
        require_signature=require_signature,
    )
