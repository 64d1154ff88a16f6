"""Persisted cart stores"""

import json
import logging
import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from ..database.storage import KeyValueStorage, MemoryStorage
from ..models.cart import CartItem, CartState
from ..models.product import Product
from .pricing import ShippingPolicy, DEFAULT_POLICY
from .reducer import (
    CartAction,
    AddItem,
    RemoveItem,
    UpdateQuantity,
    LoadCart,
    ClearCart,
    cart_reducer,
)

logger = logging.getLogger(__name__)


class PersistedCartItem(BaseModel):
    """Cart line as written to storage. Quantity is checked on replay, not here."""
    product_id: str
    name: str
    unit_price: float = Field(ge=0, allow_inf_nan=False)
    quantity: int
    image_ref: Optional[str] = None
    artisan_ref: Optional[str] = None


_persisted_items = TypeAdapter(list[PersistedCartItem])


def storage_key(cart_id: str) -> str:
    return f"cart:{cart_id}"


class CartStore:
    """
    One shopper's cart.

    All changes go through dispatch(), which runs the reducer and then writes
    the full item list to storage.
    """

    def __init__(
        self,
        cart_id: str,
        storage: KeyValueStorage,
        policy: ShippingPolicy = DEFAULT_POLICY,
    ):
        self.cart_id = cart_id
        self.storage = storage
        self.policy = policy
        self._state = CartState()
        self.last_used = datetime.utcnow()

    @property
    def state(self) -> CartState:
        return self._state

    def dispatch(self, action: CartAction) -> CartState:
        """Apply an action and persist the result"""
        self._state = cart_reducer(self._state, action, self.policy)
        self.touch()
        self._persist()
        return self._state

    def add_item(self, product: Product) -> CartState:
        """Add one unit of a product"""
        item = CartItem(
            product_id=product.id,
            name=product.name,
            unit_price=product.price,
            quantity=1,
            image_ref=product.image_ref,
            artisan_ref=product.artisan,
        )
        return self.dispatch(AddItem(item))

    def remove_item(self, product_id: str) -> CartState:
        return self.dispatch(RemoveItem(product_id))

    def update_quantity(self, product_id: str, quantity: int) -> CartState:
        """Set an item's quantity. Zero or less removes it."""
        return self.dispatch(UpdateQuantity(product_id, quantity))

    def clear_cart(self) -> CartState:
        return self.dispatch(ClearCart())

    def rehydrate(self) -> CartState:
        """
        Load the persisted item list.

        Corrupt or unreadable data leaves the cart empty; it is logged and
        otherwise ignored.
        """
        try:
            raw = self.storage.get(storage_key(self.cart_id))
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read stored cart {self.cart_id}: {e}")
            self._state = CartState()
            return self._state

        if raw is None:
            return self._state

        try:
            persisted = _persisted_items.validate_python(json.loads(raw))
            entries = tuple(
                (
                    CartItem(
                        product_id=line.product_id,
                        name=line.name,
                        unit_price=line.unit_price,
                        quantity=1,
                        image_ref=line.image_ref,
                        artisan_ref=line.artisan_ref,
                    ),
                    line.quantity,
                )
                for line in persisted
            )
        except (json.JSONDecodeError, ValidationError, TypeError) as e:
            logger.warning(f"Discarding unreadable cart {self.cart_id}: {e}")
            self._state = CartState()
            return self._state

        self._state = cart_reducer(CartState(), LoadCart(entries), self.policy)
        return self._state

    def touch(self) -> None:
        """Mark the cart as recently used"""
        self.last_used = datetime.utcnow()

    def _persist(self) -> None:
        payload = [item.model_dump() for item in self._state.items]
        self.storage.set(storage_key(self.cart_id), json.dumps(payload))


class CartRegistry:
    """
    Keeps one CartStore per cart id.

    Carts nobody has used for max_idle_hours are dropped by
    cleanup_idle_carts(), along with their stored contents.
    """

    def __init__(
        self,
        storage: Optional[KeyValueStorage] = None,
        policy: ShippingPolicy = DEFAULT_POLICY,
        max_idle_hours: int = 72,
    ):
        self.storage = storage if storage is not None else MemoryStorage()
        self.policy = policy
        self.max_idle_hours = max_idle_hours
        self.carts: dict[str, CartStore] = {}

    def create_cart(self) -> CartStore:
        """Create a new, empty cart"""
        store = CartStore(str(uuid.uuid4()), self.storage, self.policy)
        store.clear_cart()
        self.carts[store.cart_id] = store
        return store

    def get_cart(self, cart_id: str) -> Optional[CartStore]:
        """
        Get a cart by ID.

        A cart not yet loaded in this process is rehydrated from storage.
        """
        store = self.carts.get(cart_id)
        if store:
            store.touch()
            return store

        if not self.storage.has(storage_key(cart_id)):
            return None

        store = CartStore(cart_id, self.storage, self.policy)
        store.rehydrate()
        self.carts[cart_id] = store
        return store

    def delete_cart(self, cart_id: str) -> bool:
        """Delete a cart and its stored contents"""
        self.storage.delete(storage_key(cart_id))
        return self.carts.pop(cart_id, None) is not None

    def cleanup_idle_carts(self) -> int:
        """Remove carts unused for longer than max_idle_hours"""
        now = datetime.utcnow()
        idle_carts = [
            cart_id for cart_id, store in self.carts.items()
            if (now - store.last_used).total_seconds() > self.max_idle_hours * 3600
        ]
        for cart_id in idle_carts:
            self.delete_cart(cart_id)
        return len(idle_carts)
