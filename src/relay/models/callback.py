"""Callback registration models.

A CallbackRegistration records where and how to deliver future events for one
provider order. It is supplied by a tenant as the `callback` object of an
order creation request and kept in the CallbackStore keyed by order code.
"""

from typing import Any

from pydantic import Field, field_validator

from relay.models.base import CamelModel


def _check_http_url(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if not value.startswith(("http://", "https://")):
        raise ValueError("callback URLs must be absolute http(s) URLs")
    return value


class CallbackRegistration(CamelModel):
    """Delivery configuration registered for one order."""

    webhook_url: str | None = Field(
        default=None,
        description="Receives every event type for the order",
        examples=["https://shop.example/webhooks/payments"],
    )
    success_url: str | None = Field(
        default=None, description="Receives payment.success events"
    )
    failure_url: str | None = Field(
        default=None, description="Receives payment.failed events"
    )
    secret: str | None = Field(
        default=None,
        repr=False,
        description="HMAC key for outbound signatures; absent disables signing",
    )
    include_raw_payload: bool = Field(
        default=False, description="Attach the original provider payload as `raw`"
    )
    metadata: dict[str, Any] | None = Field(
        default=None, description="Echoed into every delivered event for the order"
    )

    @field_validator("webhook_url", "success_url", "failure_url")
    @classmethod
    def validate_url(cls, value: str | None) -> str | None:
        """Reject relative or non-http destinations."""
        return _check_http_url(value)

    @property
    def has_any_url(self) -> bool:
        """Whether any per-order destination is registered."""
        return bool(self.webhook_url or self.success_url or self.failure_url)


class CallbackSummary(CamelModel):
    """Redacted view of a registration for the introspection endpoint.

    Never exposes destination URLs or the signing secret.
    """

    order_code: str
    has_callback: bool
    webhook_url_configured: bool = False
    success_url_configured: bool = False
    failure_url_configured: bool = False
    has_secret: bool = False
    include_raw_payload: bool | None = None
    metadata: dict[str, Any] | None = None
    message: str | None = None

    @classmethod
    def from_registration(
        cls, order_code: str, registration: CallbackRegistration | None
    ) -> "CallbackSummary":
        """Build a summary for an order code and its (possibly absent) registration."""
        if registration is None:
            return cls(
                order_code=order_code,
                has_callback=False,
                message="No callback registered for this order",
            )
        return cls(
            order_code=order_code,
            has_callback=True,
            webhook_url_configured=bool(registration.webhook_url),
            success_url_configured=bool(registration.success_url),
            failure_url_configured=bool(registration.failure_url),
            has_secret=bool(registration.secret),
            include_raw_payload=registration.include_raw_payload,
            metadata=registration.metadata,
        )
