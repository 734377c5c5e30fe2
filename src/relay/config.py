"""Process-wide gateway settings.

Settings are read once at startup into an immutable object. Reloading means
building a new GatewaySettings (and a new application context) explicitly.
Per-tenant settings live in the MERCHANT_{key}_* key space and are parsed by
MerchantRegistry.from_environ.
"""

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field

TRUE_VALUES = {"1", "true", "yes", "on"}


def parse_bool(value: str | None, default: bool = False) -> bool:
    """Parse a boolean environment value.

    Args:
        value: Raw value or None when unset
        default: Value returned when unset or blank

    Returns:
        True for 1/true/yes/on (case-insensitive), False for anything else.
    """
    if value is None or not value.strip():
        return default
    return value.strip().lower() in TRUE_VALUES


class GatewaySettings(BaseModel):
    """Immutable process configuration."""

    model_config = ConfigDict(frozen=True)

    environment: str = Field(default="dev", description="Deployment environment name")
    default_callback_url: str = Field(
        default="", description="Fallback destination when an order has no URL"
    )
    default_callback_secret: str = Field(
        default="", repr=False, description="Signing secret for the fallback destination"
    )
    delivery_timeout_seconds: float = Field(default=10.0, gt=0)
    callback_ttl_seconds: int = Field(default=86400, gt=0)
    callback_max_entries: int = Field(default=10000, gt=0)
    require_signature_default: bool = False
    cors_allow_origins: tuple[str, ...] = ("http://localhost:3000", "http://127.0.0.1:3000")
    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        """Whether debug surfaces must be disabled."""
        return self.environment == "production"

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> "GatewaySettings":
        """Build settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            Populated GatewaySettings.
        """
        env = os.environ if environ is None else environ
        values: dict = {
            "environment": env.get("ENVIRONMENT", "dev"),
            "default_callback_url": env.get("WEBHOOK_CALLBACK_URL", ""),
            "default_callback_secret": env.get("WEBHOOK_CALLBACK_SECRET", ""),
            "require_signature_default": parse_bool(env.get("WEBHOOK_REQUIRE_SIGNATURE")),
            "log_level": env.get("LOG_LEVEL", "INFO"),
        }
        if env.get("WEBHOOK_DELIVERY_TIMEOUT"):
            values["delivery_timeout_seconds"] = float(env["WEBHOOK_DELIVERY_TIMEOUT"])
        if env.get("CALLBACK_TTL_SECONDS"):
            values["callback_ttl_seconds"] = int(env["CALLBACK_TTL_SECONDS"])
        if env.get("CALLBACK_MAX_ENTRIES"):
            values["callback_max_entries"] = int(env["CALLBACK_MAX_ENTRIES"])
        if env.get("CORS_ALLOW_ORIGINS"):
            values["cors_allow_origins"] = tuple(
                origin.strip()
                for origin in env["CORS_ALLOW_ORIGINS"].split(",")
                if origin.strip()
            )
        return cls(**values)
