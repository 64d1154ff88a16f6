"""Cart pricing rules"""

from dataclasses import dataclass
from typing import Iterable

from ..models.cart import CartItem, CartState

FREE_SHIPPING_THRESHOLD = 150.0
FLAT_SHIPPING_FEE = 10.0


@dataclass(frozen=True)
class ShippingPolicy:
    """
    Flat-fee shipping that becomes free above a threshold.

    The threshold is exclusive: a subtotal equal to it still pays the fee.
    """
    free_shipping_threshold: float = FREE_SHIPPING_THRESHOLD
    flat_shipping_fee: float = FLAT_SHIPPING_FEE

    def shipping_for(self, subtotal: float) -> float:
        if subtotal > self.free_shipping_threshold:
            return 0.0
        return self.flat_shipping_fee

    def price(self, items: Iterable[CartItem]) -> CartState:
        """Build a cart state with totals recomputed from scratch"""
        items = tuple(items)
        if not items:
            return CartState()

        subtotal = sum(item.line_total for item in items)
        return CartState(items=items, shipping=self.shipping_for(subtotal))


DEFAULT_POLICY = ShippingPolicy()
