"""Tests for webhook event parsing."""

import pytest

from storefront.models.gateway import (
    GatewayPayloadError,
    PaymentAuthorized,
    PaymentCaptured,
    PaymentFailed,
    UnknownGatewayEvent,
    parse_gateway_event,
)


def payment_event(event, **entity):
    entity.setdefault("id", "pay_1")
    entity.setdefault("order_id", "order_1")
    return {"event": event, "payload": {"payment": {"entity": entity}}}


def test_captured():
    event = parse_gateway_event(payment_event("payment.captured", amount=29900))
    assert isinstance(event, PaymentCaptured)
    assert event.gateway_order_id == "order_1"
    assert event.gateway_payment_id == "pay_1"
    assert event.entity["amount"] == 29900


def test_authorized():
    assert isinstance(parse_gateway_event(payment_event("payment.authorized")), PaymentAuthorized)


def test_failed_carries_description():
    event = parse_gateway_event(
        payment_event("payment.failed", error_description="Card declined")
    )
    assert isinstance(event, PaymentFailed)
    assert event.error_description == "Card declined"


def test_unknown_event_is_not_an_error():
    event = parse_gateway_event({"event": "refund.processed", "payload": {}})
    assert event == UnknownGatewayEvent(event="refund.processed")


@pytest.mark.parametrize(
    "payload",
    [
        "payment.captured",
        {},
        {"event": 42},
        {"event": "payment.captured"},
        {"event": "payment.captured", "payload": {"payment": {"entity": "x"}}},
        payment_event("payment.captured", id=""),
        {"event": "payment.failed", "payload": {"payment": {"entity": {"id": "pay_1"}}}},
    ],
)
def test_malformed_payment_events(payload):
    with pytest.raises(GatewayPayloadError):
        parse_gateway_event(payload)
