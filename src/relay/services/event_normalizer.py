"""Maps provider webhook payloads onto the canonical event envelope."""

from collections.abc import Callable
from datetime import datetime

from relay.models.enums import CanonicalEventType, ProviderEventType
from relay.models.events import (
    CanonicalEvent,
    CardInfo,
    CustomerInfo,
    EventData,
    ProviderEventData,
    ProviderWebhookPayload,
)
from relay.services.token_cache import utc_now
from relay.utils.logging import get_logger

logger = get_logger(__name__)

EVENT_TYPE_MAP: dict[int, CanonicalEventType] = {
    ProviderEventType.TRANSACTION_PAYMENT_CREATED: CanonicalEventType.PAYMENT_SUCCESS,
    ProviderEventType.TRANSACTION_FAILED: CanonicalEventType.PAYMENT_FAILED,
    ProviderEventType.TRANSACTION_REVERSAL_CREATED: CanonicalEventType.PAYMENT_REFUNDED,
}


def isoformat_z(moment: datetime) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix."""
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class EventNormalizer:
    """Builds CanonicalEvents from provider payloads."""

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self._clock = clock

    def canonical_type(self, event_type_id: int | None) -> CanonicalEventType | None:
        """Canonical type for a provider event code, or None if unmapped."""
        if event_type_id is None:
            return None
        return EVENT_TYPE_MAP.get(event_type_id)

    def normalize(self, payload: ProviderWebhookPayload) -> CanonicalEvent | None:
        """Normalize a provider payload.

        Returns:
            CanonicalEvent, or None for unmapped event types and payloads
            without an order code (both are logged).
        """
        event_type = self.canonical_type(payload.event_type_id)
        if event_type is None:
            logger.info("Unhandled provider event type %s", payload.event_type_id)
            return None

        source = payload.event_data
        if source.order_code is None or str(source.order_code).strip() == "":
            logger.warning(
                "Provider event %s has no OrderCode, cannot route", payload.event_type_id
            )
            return None

        if event_type == CanonicalEventType.PAYMENT_SUCCESS:
            data = EventData(
                order_code=source.order_code,
                transaction_id=source.transaction_id,
                amount=source.amount,
                currency=source.currency_code,
                status=source.status_id,
                customer=CustomerInfo(
                    email=source.email,
                    full_name=source.full_name,
                    phone=source.phone,
                ),
                card=_card_info(source),
                merchant_reference=source.merchant_trns,
            )
        elif event_type == CanonicalEventType.PAYMENT_FAILED:
            data = EventData(
                order_code=source.order_code,
                transaction_id=source.transaction_id,
                status=source.status_id,
                merchant_reference=source.merchant_trns,
            )
        else:
            data = EventData(
                order_code=source.order_code,
                transaction_id=source.transaction_id,
                amount=source.amount,
                currency=source.currency_code,
                merchant_reference=source.merchant_trns,
            )

        return CanonicalEvent(
            event_type=event_type,
            timestamp=isoformat_z(self._clock()),
            data=data,
        )

    def order_created(
        self,
        order_code: int | str,
        amount: int | None = None,
        currency: str | None = None,
        merchant_reference: str | None = None,
        customer: CustomerInfo | None = None,
    ) -> CanonicalEvent:
        """Build the order.created announcement for a freshly created order."""
        return CanonicalEvent(
            event_type=CanonicalEventType.ORDER_CREATED,
            timestamp=isoformat_z(self._clock()),
            data=EventData(
                order_code=order_code,
                amount=amount,
                currency=currency,
                merchant_reference=merchant_reference,
                customer=customer,
            ),
        )


def _card_info(source: ProviderEventData) -> CardInfo | None:
    last_four = source.card_number[-4:] if source.card_number else None
    brand = str(source.card_type_id) if source.card_type_id is not None else None
    if last_four is None and brand is None:
        return None
    return CardInfo(last_four=last_four, brand=brand)
