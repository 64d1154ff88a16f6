"""
Cart reducer.

Every change to a cart is an action applied by cart_reducer. The reducer is
pure: it returns a new CartState and never touches storage.
"""

from dataclasses import dataclass
from typing import Union

from ..models.cart import CartItem, CartState
from .pricing import ShippingPolicy, DEFAULT_POLICY


@dataclass(frozen=True)
class AddItem:
    item: CartItem


@dataclass(frozen=True)
class RemoveItem:
    product_id: str


@dataclass(frozen=True)
class UpdateQuantity:
    product_id: str
    quantity: int


@dataclass(frozen=True)
class LoadCart:
    """Persisted lines as (item snapshot, stored quantity) pairs"""
    entries: tuple[tuple[CartItem, int], ...]


@dataclass(frozen=True)
class ClearCart:
    pass


CartAction = Union[AddItem, RemoveItem, UpdateQuantity, LoadCart, ClearCart]


def cart_reducer(
    state: CartState,
    action: CartAction,
    policy: ShippingPolicy = DEFAULT_POLICY,
) -> CartState:
    """Apply one action to a cart and return the new state"""
    if isinstance(action, AddItem):
        existing = state.find(action.item.product_id)
        if existing:
            # Keep the first-added name and price, only bump the quantity
            items = [
                item.model_copy(update={"quantity": item.quantity + 1})
                if item.product_id == existing.product_id
                else item
                for item in state.items
            ]
        else:
            items = [*state.items, action.item.model_copy(update={"quantity": 1})]
        return policy.price(items)

    if isinstance(action, RemoveItem):
        return policy.price(
            item for item in state.items if item.product_id != action.product_id
        )

    if isinstance(action, UpdateQuantity):
        if action.quantity <= 0:
            return cart_reducer(state, RemoveItem(action.product_id), policy)

        items = [
            item.model_copy(update={"quantity": action.quantity})
            if item.product_id == action.product_id
            else item
            for item in state.items
        ]
        return policy.price(items)

    if isinstance(action, LoadCart):
        # Replay through the add path so duplicates merge and totals are re-derived
        loaded = CartState()
        for item, quantity in action.entries:
            loaded = cart_reducer(loaded, AddItem(item), policy)
            current = loaded.find(item.product_id)
            loaded = cart_reducer(
                loaded,
                UpdateQuantity(item.product_id, current.quantity - 1 + quantity),
                policy,
            )
        return loaded

    if isinstance(action, ClearCart):
        return CartState()

    raise TypeError(f"Unknown cart action: {action!r}")
