"""Unit tests for EventNormalizer."""

import json

from conftest import FakeClock
from relay.models.enums import CanonicalEventType
from relay.models.events import ProviderWebhookPayload
from relay.services.event_normalizer import EventNormalizer


def _payload(event_type_id: int | None, **event_data) -> ProviderWebhookPayload:
    return ProviderWebhookPayload.model_validate(
        {"EventTypeId": event_type_id, "EventData": event_data}
    )


SUCCESS_DATA = {
    "TransactionId": "b1b5b5b5-0000-4000-8000-000000000001",
    "OrderCode": 1234567890123456,
    "StatusId": "F",
    "Amount": 15.0,
    "CurrencyCode": "978",
    "Email": "jane@example.com",
    "FullName": "Jane Doe",
    "Phone": "+301234567890",
    "CardNumber": "414746XXXXXX0133",
    "CardTypeId": 0,
    "MerchantTrns": "ORDER-42",
    "InsDate": "2026-01-15T11:59:58.000",
}


class TestNormalize:
    """Tests for mapping provider payloads to canonical events."""

    def test_payment_created_maps_to_success(self, clock: FakeClock) -> None:
        event = EventNormalizer(clock=clock).normalize(_payload(1796, **SUCCESS_DATA))

        assert event is not None
        assert event.event_type == CanonicalEventType.PAYMENT_SUCCESS
        assert event.data.order_code == 1234567890123456
        assert event.data.transaction_id == SUCCESS_DATA["TransactionId"]
        assert event.data.amount == 15.0
        assert event.data.currency == "978"
        assert event.data.status == "F"
        assert event.data.customer.email == "jane@example.com"
        assert event.data.card.last_four == "0133"
        assert event.data.card.brand == "0"
        assert event.data.merchant_reference == "ORDER-42"

    def test_timestamp_is_normalization_time_not_provider_time(
        self, clock: FakeClock
    ) -> None:
        event = EventNormalizer(clock=clock).normalize(_payload(1796, **SUCCESS_DATA))

        assert event.timestamp == "2026-01-15T12:00:00.000Z"

    def test_failed_event_carries_status_only(self, clock: FakeClock) -> None:
        event = EventNormalizer(clock=clock).normalize(_payload(1798, **SUCCESS_DATA))

        assert event.event_type == CanonicalEventType.PAYMENT_FAILED
        assert event.data.status == "F"
        assert event.data.amount is None
        assert event.data.customer is None
        assert event.data.card is None

    def test_reversal_maps_to_refunded(self, clock: FakeClock) -> None:
        event = EventNormalizer(clock=clock).normalize(_payload(1797, **SUCCESS_DATA))

        assert event.event_type == CanonicalEventType.PAYMENT_REFUNDED
        assert event.data.amount == 15.0
        assert event.data.currency == "978"
        assert event.data.card is None

    def test_unknown_event_type_yields_nothing(self, clock: FakeClock) -> None:
        normalizer = EventNormalizer(clock=clock)

        assert normalizer.normalize(_payload(768, **SUCCESS_DATA)) is None
        assert normalizer.normalize(_payload(None, **SUCCESS_DATA)) is None

    def test_missing_order_code_yields_nothing(self, clock: FakeClock) -> None:
        data = {key: value for key, value in SUCCESS_DATA.items() if key != "OrderCode"}

        assert EventNormalizer(clock=clock).normalize(_payload(1796, **data)) is None

    def test_missing_card_fields_do_not_raise(self, clock: FakeClock) -> None:
        event = EventNormalizer(clock=clock).normalize(_payload(1796, OrderCode="111"))

        assert event is not None
        assert event.data.card is None
        assert event.data.customer is not None
        assert event.data.customer.email is None

    def test_card_with_only_number(self, clock: FakeClock) -> None:
        event = EventNormalizer(clock=clock).normalize(
            _payload(1796, OrderCode="111", CardNumber="4242")
        )

        assert event.data.card.last_four == "4242"
        assert event.data.card.brand is None

    def test_wire_form_is_camel_case_without_nulls(self, clock: FakeClock) -> None:
        event = EventNormalizer(clock=clock).normalize(_payload(1798, OrderCode="111"))

        body = json.loads(event.to_json_bytes())

        assert body == {
            "eventType": "payment.failed",
            "timestamp": "2026-01-15T12:00:00.000Z",
            "data": {"orderCode": "111"},
        }


class TestOrderCreated:
    """Tests for the order.created announcement."""

    def test_order_created_event(self, clock: FakeClock) -> None:
        event = EventNormalizer(clock=clock).order_created(
            111, amount=1500, currency="978", merchant_reference="ORDER-42"
        )

        assert event.event_type == CanonicalEventType.ORDER_CREATED
        assert event.data.order_code == 111
        assert event.data.amount == 1500
        assert event.data.merchant_reference == "ORDER-42"
