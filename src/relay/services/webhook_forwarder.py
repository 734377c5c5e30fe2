"""Outbound delivery of canonical events to tenant endpoints.

Looks up the order's callback registration, signs the serialized event with
the registration's secret and POSTs it to each selected destination. Every
attempt is independent: failures are logged and recorded, never raised, and
never retried.

Registration lifecycle:
    payment.success   registration removed once delivery has been attempted
    payment.failed    registration retained
    payment.refunded  registration only read
"""

from typing import Any

import httpx
from pydantic import BaseModel, Field

from relay.models.callback import CallbackRegistration
from relay.models.enums import CanonicalEventType
from relay.models.events import CanonicalEvent
from relay.services.callback_store import CallbackStore, normalize_order_code
from relay.services.webhook_verifier import compute_signature
from relay.utils.logging import get_logger, log_delivery

logger = get_logger(__name__)

DEFAULT_DELIVERY_TIMEOUT = 10.0


class DeliveryAttempt(BaseModel):
    """Outcome of one POST to one destination."""

    url: str
    status_code: int | None = None
    ok: bool = False
    error: str | None = None


class ForwardResult(BaseModel):
    """Outcome of forwarding one canonical event."""

    event_type: CanonicalEventType
    order_code: str
    routed: bool = Field(
        default=False, description="Whether a callback registration was found"
    )
    attempts: list[DeliveryAttempt] = Field(default_factory=list)
    registration_removed: bool = False

    @property
    def delivered(self) -> bool:
        """Whether at least one destination accepted the event."""
        return any(attempt.ok for attempt in self.attempts)


class WebhookForwarder:
    """Delivers canonical events according to callback registrations."""

    def __init__(
        self,
        store: CallbackStore,
        http_client: httpx.AsyncClient,
        default_url: str = "",
        default_secret: str = "",
        timeout: float = DEFAULT_DELIVERY_TIMEOUT,
    ) -> None:
        """Initialize the forwarder.

        Args:
            store: Callback registrations keyed by order code
            http_client: Shared async HTTP client used for delivery
            default_url: Process-wide fallback destination (empty disables)
            default_secret: Signing secret for the fallback destination
            timeout: Per-attempt timeout in seconds
        """
        self._store = store
        self._http = http_client
        self._default_url = default_url
        self._default_secret = default_secret
        self._timeout = timeout

    async def handle(self, event: CanonicalEvent, raw_payload: Any = None) -> ForwardResult:
        """Forward a payment event to the destinations registered for its order.

        Args:
            event: Normalized event (without metadata or raw payload)
            raw_payload: Original provider payload, attached only when the
                registration asked for it

        Returns:
            ForwardResult describing routing and each delivery attempt.
        """
        order_code = normalize_order_code(event.data.order_code)
        result = ForwardResult(event_type=event.event_type, order_code=order_code)

        registration = self._store.get(order_code)
        if registration is None:
            logger.warning(
                "No callback registered for order %s, dropping %s event",
                order_code,
                event.event_type.value,
            )
            return result
        result.routed = True

        outbound = self._enrich(event, registration, raw_payload)
        for url, secret in self._destinations(event.event_type, registration):
            result.attempts.append(await self._deliver(url, outbound, secret))

        if event.event_type == CanonicalEventType.PAYMENT_SUCCESS:
            result.registration_removed = self._store.remove(order_code)
            logger.info("Order %s settled, callback registration removed", order_code)

        return result

    async def announce_order_created(
        self, event: CanonicalEvent, registration: CallbackRegistration | None
    ) -> ForwardResult:
        """Send order.created to the registration's webhook URL, else the default URL.

        Does not read or modify the callback store.
        """
        result = ForwardResult(
            event_type=event.event_type,
            order_code=normalize_order_code(event.data.order_code),
            routed=registration is not None,
        )

        if registration is not None and registration.webhook_url:
            destination = (registration.webhook_url, registration.secret)
            outbound = self._enrich(event, registration, None)
        elif self._default_url:
            destination = (self._default_url, self._default_secret)
            outbound = self._enrich(event, registration, None)
        else:
            return result

        result.attempts.append(await self._deliver(destination[0], outbound, destination[1]))
        return result

    def _destinations(
        self, event_type: CanonicalEventType, registration: CallbackRegistration
    ) -> list[tuple[str, str | None]]:
        if event_type == CanonicalEventType.PAYMENT_SUCCESS:
            urls = [registration.success_url, registration.webhook_url]
        elif event_type == CanonicalEventType.PAYMENT_FAILED:
            urls = [registration.failure_url, registration.webhook_url]
        else:
            urls = [registration.webhook_url]

        destinations = [(url, registration.secret) for url in urls if url]
        if not destinations and self._default_url:
            destinations.append((self._default_url, self._default_secret))
        return destinations

    @staticmethod
    def _enrich(
        event: CanonicalEvent,
        registration: CallbackRegistration | None,
        raw_payload: Any,
    ) -> CanonicalEvent:
        if registration is None:
            return event
        data = event.data.model_copy(update={"metadata": registration.metadata})
        raw = raw_payload if registration.include_raw_payload else None
        return event.model_copy(update={"data": data, "raw": raw})

    async def _deliver(
        self, url: str, event: CanonicalEvent, secret: str | None
    ) -> DeliveryAttempt:
        body = event.to_json_bytes()
        headers = {
            "Content-Type": "application/json",
            "X-Webhook-Event": event.event_type.value,
            "X-Webhook-Timestamp": event.timestamp,
        }
        if secret:
            signature = compute_signature(body, secret)
            headers["X-Webhook-Signature"] = signature
            headers["X-Webhook-Signature-256"] = f"sha256={signature}"

        event_type = event.event_type.value
        order_code = event.data.order_code
        try:
            response = await self._http.post(
                url, content=body, headers=headers, timeout=self._timeout
            )
        except httpx.HTTPError as e:
            error = f"{type(e).__name__}: {e}" if str(e) else type(e).__name__
            log_delivery(logger, event_type, order_code, url, error=error)
            return DeliveryAttempt(url=url, error=error)

        if not response.is_success:
            error = f"HTTP {response.status_code}"
            log_delivery(
                logger, event_type, order_code, url, status_code=response.status_code, error=error
            )
            return DeliveryAttempt(url=url, status_code=response.status_code, error=error)

        log_delivery(logger, event_type, order_code, url, status_code=response.status_code)
        return DeliveryAttempt(url=url, status_code=response.status_code, ok=True)
