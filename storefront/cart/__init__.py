# Cart store

from .pricing import ShippingPolicy, DEFAULT_POLICY, FREE_SHIPPING_THRESHOLD, FLAT_SHIPPING_FEE
from .reducer import (
    CartAction,
    AddItem,
    RemoveItem,
    UpdateQuantity,
    LoadCart,
    ClearCart,
    cart_reducer,
)
from .store import CartStore, CartRegistry, storage_key

__all__ = [
    "ShippingPolicy",
    "DEFAULT_POLICY",
    "FREE_SHIPPING_THRESHOLD",
    "FLAT_SHIPPING_FEE",
    "CartAction",
    "AddItem",
    "RemoveItem",
    "UpdateQuantity",
    "LoadCart",
    "ClearCart",
    "cart_reducer",
    "CartStore",
    "CartRegistry",
    "storage_key",
]
