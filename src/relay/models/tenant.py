"""Tenant (merchant) configuration models.

A TenantConfig is built once at process start from environment configuration
and is immutable thereafter. Secrets are excluded from repr so that tenant
objects can be logged safely.
"""

from pydantic import BaseModel, ConfigDict, Field

from relay.models.enums import ProviderEnvironment

# Demo environment URLs
DEMO_AUTH_URL = "https://demo-accounts.vivapayments.com"
DEMO_API_URL = "https://demo-api.vivapayments.com"
DEMO_CHECKOUT_URL = "https://demo.vivapayments.com"

# Production environment URLs
PROD_AUTH_URL = "https://accounts.vivapayments.com"
PROD_API_URL = "https://api.vivapayments.com"
PROD_CHECKOUT_URL = "https://www.vivapayments.com"


class ProviderEndpoints(BaseModel):
    """Base URLs of the payment provider for one environment."""

    model_config = ConfigDict(strict=True, frozen=True)

    auth_url: str = Field(..., description="OAuth2 token server base URL")
    api_url: str = Field(..., description="Bearer-authenticated REST API base URL")
    checkout_url: str = Field(
        ..., description="Checkout and legacy basic-auth API base URL"
    )

    @classmethod
    def for_environment(cls, environment: ProviderEnvironment) -> "ProviderEndpoints":
        """Get the provider endpoints for an environment.

        Args:
            environment: Provider environment (demo or production)

        Returns:
            ProviderEndpoints for that environment.
        """
        if environment == ProviderEnvironment.PRODUCTION:
            return cls(
                auth_url=PROD_AUTH_URL,
                api_url=PROD_API_URL,
                checkout_url=PROD_CHECKOUT_URL,
            )
        return cls(
            auth_url=DEMO_AUTH_URL,
            api_url=DEMO_API_URL,
            checkout_url=DEMO_CHECKOUT_URL,
        )


class ProviderCredentials(BaseModel):
    """Credentials a tenant uses against the payment provider."""

    model_config = ConfigDict(strict=True, frozen=True)

    client_id: str = Field(..., description="OAuth2 client id")
    client_secret: str = Field(..., repr=False, description="OAuth2 client secret")
    merchant_id: str = Field(default="", description="Legacy basic-auth merchant id")
    api_key: str = Field(default="", repr=False, description="Legacy basic-auth API key")
    source_code: str | None = Field(
        default=None, description="Default payment source code for new orders"
    )


class TenantConfig(BaseModel):
    """Configuration of one tenant of the gateway."""

    model_config = ConfigDict(strict=True, frozen=True)

    tenant_key: str = Field(
        ...,
        description="Routable merchant key used in the webhook URL path",
        examples=["acme"],
    )
    api_key: str = Field(
        ..., repr=False, description="Opaque credential for inbound X-Api-Key calls"
    )
    environment: ProviderEnvironment = Field(default=ProviderEnvironment.DEMO)
    credentials: ProviderCredentials
    endpoints: ProviderEndpoints
    webhook_secret: str = Field(
        default="",
        repr=False,
        description="Shared secret verifying inbound provider webhook signatures",
    )
    require_signature: bool = Field(
        default=False,
        description="Reject unsigned webhooks even when no secret is configured",
    )

    @property
    def has_webhook_secret(self) -> bool:
        """Whether inbound webhook signatures can be verified for this tenant."""
        return bool(self.webhook_secret)
