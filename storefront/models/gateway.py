"""
Payment gateway payloads.

Gateway responses and webhook bodies are loosely shaped JSON. They are parsed
here into fixed types so nothing past this module handles raw dicts.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Union


class GatewayPayloadError(ValueError):
    """Raised when a gateway payload does not have the expected shape"""
    pass


@dataclass
class GatewaySession:
    """A payment session (gateway order) created at the gateway"""
    session_id: str
    amount: int  # minor units
    currency: str
    public_key: str
    receipt: Optional[str] = None

    @classmethod
    def from_gateway(cls, payload: Any, public_key: str) -> "GatewaySession":
        """Parse a create-order response"""
        if not isinstance(payload, dict):
            raise GatewayPayloadError("Expected a JSON object from the gateway")

        error = payload.get("error")
        if error:
            description = error.get("description") if isinstance(error, dict) else str(error)
            raise GatewayPayloadError(f"Gateway rejected the order: {description}")

        session_id = payload.get("id")
        amount = payload.get("amount")
        currency = payload.get("currency")

        if not isinstance(session_id, str) or not session_id:
            raise GatewayPayloadError("Gateway order is missing an id")
        if not isinstance(amount, int) or isinstance(amount, bool):
            raise GatewayPayloadError("Gateway order amount must be an integer")
        if not isinstance(currency, str) or not currency:
            raise GatewayPayloadError("Gateway order is missing a currency")

        receipt = payload.get("receipt")
        return cls(
            session_id=session_id,
            amount=amount,
            currency=currency,
            public_key=public_key,
            receipt=receipt if isinstance(receipt, str) else None,
        )


@dataclass
class PaymentCaptured:
    """payment.captured"""
    gateway_order_id: str
    gateway_payment_id: str
    entity: dict = field(default_factory=dict)


@dataclass
class PaymentAuthorized:
    """payment.authorized"""
    gateway_order_id: str
    gateway_payment_id: str
    entity: dict = field(default_factory=dict)


@dataclass
class PaymentFailed:
    """payment.failed"""
    gateway_order_id: str
    gateway_payment_id: str
    error_description: Optional[str] = None
    entity: dict = field(default_factory=dict)


@dataclass
class UnknownGatewayEvent:
    """Any event this store does not act on"""
    event: str


GatewayEvent = Union[PaymentCaptured, PaymentAuthorized, PaymentFailed, UnknownGatewayEvent]


def _payment_entity(payload: dict) -> dict:
    try:
        entity = payload["payload"]["payment"]["entity"]
    except (KeyError, TypeError):
        raise GatewayPayloadError("Payment event is missing payload.payment.entity")

    if not isinstance(entity, dict):
        raise GatewayPayloadError("Payment entity must be an object")

    for key in ("id", "order_id"):
        if not isinstance(entity.get(key), str) or not entity[key]:
            raise GatewayPayloadError(f"Payment entity is missing '{key}'")

    return entity


def parse_gateway_event(payload: Any) -> GatewayEvent:
    """
    Parse a webhook body into one of the known event types.

    Raises:
        GatewayPayloadError: if a payment event is malformed
    """
    if not isinstance(payload, dict):
        raise GatewayPayloadError("Webhook body must be a JSON object")

    event = payload.get("event")
    if not isinstance(event, str):
        raise GatewayPayloadError("Webhook body is missing 'event'")

    if event == "payment.captured":
        entity = _payment_entity(payload)
        return PaymentCaptured(
            gateway_order_id=entity["order_id"],
            gateway_payment_id=entity["id"],
            entity=entity,
        )

    if event == "payment.authorized":
        entity = _payment_entity(payload)
        return PaymentAuthorized(
            gateway_order_id=entity["order_id"],
            gateway_payment_id=entity["id"],
            entity=entity,
        )

    if event == "payment.failed":
        entity = _payment_entity(payload)
        description = entity.get("error_description")
        return PaymentFailed(
            gateway_order_id=entity["order_id"],
            gateway_payment_id=entity["id"],
            error_description=description if isinstance(description, str) else None,
            entity=entity,
        )

    return UnknownGatewayEvent(event=event)
