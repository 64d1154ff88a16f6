# Database modules

from .products import product_db, ProductDatabase
from .orders import order_db, OrderDatabase
from .payments import payment_db, PaymentDatabase
from .users import user_db, UserDatabase
from .storage import KeyValueStorage, MemoryStorage, FileStorage

__all__ = [
    "product_db",
    "ProductDatabase",
    "order_db",
    "OrderDatabase",
    "payment_db",
    "PaymentDatabase",
    "user_db",
    "UserDatabase",
    "KeyValueStorage",
    "MemoryStorage",
    "FileStorage",
]
