"""
Artisan Storefront

Storefront API for handcrafted goods: catalog, persistent carts and a
hosted-gateway checkout with server-side payment verification.
"""

import asyncio
import logging
import os
from contextlib import asynccontextmanager, suppress

from dotenv import load_dotenv

# Load environment variables before settings are read
load_dotenv(os.path.join(os.path.dirname(__file__), "..", "config", ".env"))

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .cart import CartRegistry
from .core.config import settings
from .core.session import SessionManager
from .dependencies import cart_registry, session_manager, close_payment_gateway
from .routes import products_router, cart_router, auth_router, checkout_router, payments_router
from .security.session_auth import SessionTokenMiddleware

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def sweep_expired_state(carts: CartRegistry, sessions: SessionManager) -> tuple[int, int]:
    """Drop expired sign-in sessions and idle carts"""
    expired = sessions.cleanup_old_sessions()
    idle = carts.cleanup_idle_carts()
    if expired or idle:
        logger.info(f"Cleaned up {expired} expired sessions and {idle} idle carts")
    return expired, idle


async def periodic_cleanup(interval_seconds: float) -> None:
    while True:
        await asyncio.sleep(interval_seconds)
        sweep_expired_state(cart_registry, session_manager)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info(f"{settings.app_name} starting up...")
    logger.info(f"Payment gateway: {settings.gateway_base_url if settings.gateway_configured else 'not configured'}")
    logger.info(f"Cart storage: {settings.cart_storage_dir or 'in-memory'}")
    cleanup_task = asyncio.create_task(periodic_cleanup(settings.cleanup_interval_minutes * 60))

    yield

    cleanup_task.cancel()
    with suppress(asyncio.CancelledError):
        await cleanup_task
    await close_payment_gateway()
    logger.info(f"{settings.app_name} shutting down...")


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Storefront for handcrafted goods with hosted payment checkout",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, restrict this
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(SessionTokenMiddleware)

# Include API routers
app.include_router(products_router)
app.include_router(cart_router)
app.include_router(auth_router)
app.include_router(checkout_router)
app.include_router(payments_router)


@app.get("/")
async def home():
    """Storefront API index"""
    return {
        "message": f"{settings.app_name} API",
        "docs": "/docs",
        "endpoints": {
            "products": "/api/products",
            "cart": "/api/cart",
            "auth": "/api/auth",
            "checkout": "/api/checkout",
            "payments": "/api/payments",
        },
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "storefront",
        "payments": "configured" if settings.gateway_configured else "not configured",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "storefront.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
