"""Payment record storage"""

import uuid
from datetime import datetime
from typing import Optional, Any

from ..errors import PersistenceError
from ..models.checkout import PaymentSession, PaymentStatus


class PaymentDatabase:
    """
    In-memory payment records.

    An order can collect several records over its lifetime (one per payment
    attempt). The newest one is the active record for that order.
    """

    def __init__(self):
        self.payments: dict[str, PaymentSession] = {}
        self._by_gateway_order: dict[str, str] = {}

    def create_payment_record(
        self,
        order_id: str,
        gateway_order_id: str,
        amount: float,
        currency: str = "INR",
    ) -> PaymentSession:
        """
        Record a newly created gateway session.

        Raises:
            PersistenceError: if the gateway order id is already recorded
        """
        if gateway_order_id in self._by_gateway_order:
            raise PersistenceError(f"Payment for {gateway_order_id} already recorded")

        now = datetime.utcnow()
        payment = PaymentSession(
            id=str(uuid.uuid4()),
            order_id=order_id,
            gateway_order_id=gateway_order_id,
            amount=amount,
            currency=currency,
            status=PaymentStatus.CREATED,
            created_at=now,
            updated_at=now,
        )

        self.payments[payment.id] = payment
        self._by_gateway_order[gateway_order_id] = payment.id
        return payment

    def get_by_gateway_order_id(self, gateway_order_id: str) -> Optional[PaymentSession]:
        """Get the record for a gateway order"""
        payment_id = self._by_gateway_order.get(gateway_order_id)
        return self.payments.get(payment_id) if payment_id else None

    def update_payment_record(
        self,
        gateway_order_id: str,
        gateway_payment_id: Optional[str],
        signature: Optional[str],
        status: PaymentStatus,
        raw_payload: Optional[dict[str, Any]] = None,
    ) -> Optional[PaymentSession]:
        """Update a record after the gateway reports on it"""
        payment = self.get_by_gateway_order_id(gateway_order_id)
        if not payment:
            return None

        if gateway_payment_id:
            payment.gateway_payment_id = gateway_payment_id
        if signature:
            payment.signature = signature
        if raw_payload is not None:
            payment.raw_payload = raw_payload
        payment.status = status
        payment.updated_at = datetime.utcnow()
        return payment

    def list_order_payments(self, order_id: str) -> list[PaymentSession]:
        """All records for an order, oldest first"""
        payments = [p for p in self.payments.values() if p.order_id == order_id]
        payments.sort(key=lambda p: p.created_at)
        return payments

    def get_payment_by_order_id(self, order_id: str) -> Optional[PaymentSession]:
        """Get the active (most recent) record for an order"""
        payments = self.list_order_payments(order_id)
        return payments[-1] if payments else None


# Singleton instance
payment_db = PaymentDatabase()
