"""Order storage"""

import uuid
from datetime import datetime
from typing import Optional

from ..errors import PersistenceError
from ..models.checkout import Order, OrderLineSnapshot, OrderStatus, ShippingAddress


class OrderDatabase:
    """In-memory order storage"""

    def __init__(self):
        self.orders: dict[str, Order] = {}

    def create_order(
        self,
        user_id: str,
        items: list[OrderLineSnapshot],
        total: float,
        shipping_address: ShippingAddress,
        cart_id: Optional[str] = None,
    ) -> Order:
        """
        Create a pending order.

        Raises:
            PersistenceError: if the order has no lines or no owner
        """
        if not user_id:
            raise PersistenceError("Order must belong to a user")
        if not items:
            raise PersistenceError("Order must contain at least one item")

        now = datetime.utcnow()
        order = Order(
            id=str(uuid.uuid4()),
            user_id=user_id,
            items=list(items),
            total=total,
            status=OrderStatus.PENDING,
            shipping_address=shipping_address,
            cart_id=cart_id,
            created_at=now,
            updated_at=now,
        )

        self.orders[order.id] = order
        return order

    def get_order(self, order_id: str) -> Optional[Order]:
        """Get an order by ID"""
        return self.orders.get(order_id)

    def update_status(self, order_id: str, status: OrderStatus) -> Optional[Order]:
        """Update order status"""
        order = self.get_order(order_id)
        if not order:
            return None

        order.status = status
        order.updated_at = datetime.utcnow()
        return order

    def set_payment_ref(self, order_id: str, payment_ref: str) -> Optional[Order]:
        """Record which payment settled the order"""
        order = self.get_order(order_id)
        if not order:
            return None

        order.payment_ref = payment_ref
        order.updated_at = datetime.utcnow()
        return order

    def list_user_orders(self, user_id: str, limit: int = 50) -> list[Order]:
        """List a user's orders, newest first"""
        orders = [o for o in self.orders.values() if o.user_id == user_id]
        orders.sort(key=lambda o: o.created_at, reverse=True)
        return orders[:limit]


# Singleton instance
order_db = OrderDatabase()
