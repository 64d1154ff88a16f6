# API Routes

from .products import router as products_router
from .cart import router as cart_router
from .auth import router as auth_router
from .checkout import router as checkout_router
from .payments import router as payments_router

__all__ = ["products_router", "cart_router", "auth_router", "checkout_router", "payments_router"]
