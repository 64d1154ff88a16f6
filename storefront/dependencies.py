"""Shared service instances and their FastAPI dependency getters"""

import logging
from typing import Optional

from fastapi import Depends, HTTPException

from .cart import CartRegistry, ShippingPolicy
from .core.config import settings
from .core.session import SessionManager
from .database import order_db, payment_db, user_db, OrderDatabase, PaymentDatabase, FileStorage, MemoryStorage
from .services.auth import AuthService
from .services.checkout import CheckoutOrchestrator
from .services.payment_gateway import PaymentGatewayClient

logger = logging.getLogger(__name__)


def _build_cart_registry() -> CartRegistry:
    storage = FileStorage(settings.cart_storage_dir) if settings.cart_storage_dir else MemoryStorage()
    policy = ShippingPolicy(
        free_shipping_threshold=settings.free_shipping_threshold,
        flat_shipping_fee=settings.flat_shipping_fee,
    )
    return CartRegistry(storage=storage, policy=policy, max_idle_hours=settings.cart_max_idle_hours)


# Singleton instances
cart_registry = _build_cart_registry()
session_manager = SessionManager(max_age_hours=settings.session_max_age_hours)
auth_service = AuthService(users=user_db, sessions=session_manager)

_gateway_client: Optional[PaymentGatewayClient] = None


def get_cart_registry() -> CartRegistry:
    return cart_registry


def get_auth_service() -> AuthService:
    return auth_service


def get_order_database() -> OrderDatabase:
    return order_db


def get_payment_database() -> PaymentDatabase:
    return payment_db


def get_payment_gateway() -> PaymentGatewayClient:
    """Gateway client, created on first use"""
    global _gateway_client

    if _gateway_client is None:
        if not settings.gateway_configured:
            logger.error("Payment gateway credentials are not configured")
            raise HTTPException(status_code=503, detail="Payments are not available")

        _gateway_client = PaymentGatewayClient(
            base_url=settings.gateway_base_url,
            key_id=settings.gateway_key_id,
            key_secret=settings.gateway_key_secret,
            webhook_secret=settings.gateway_webhook_secret,
            timeout=settings.gateway_timeout,
        )
        logger.info(f"Payment gateway client initialized for {settings.gateway_base_url}")

    return _gateway_client


async def close_payment_gateway() -> None:
    global _gateway_client

    if _gateway_client is not None:
        await _gateway_client.close()
        _gateway_client = None


def get_orchestrator(
    gateway: PaymentGatewayClient = Depends(get_payment_gateway),
    carts: CartRegistry = Depends(get_cart_registry),
    auth: AuthService = Depends(get_auth_service),
    orders: OrderDatabase = Depends(get_order_database),
    payments: PaymentDatabase = Depends(get_payment_database),
) -> CheckoutOrchestrator:
    """A checkout orchestrator wired to the shared services"""
    return CheckoutOrchestrator(
        orders=orders,
        payments=payments,
        carts=carts,
        gateway=gateway,
        auth=auth,
        currency=settings.currency,
        phone_region=settings.phone_region,
        store_name=settings.app_name,
        return_url=settings.checkout_return_url,
    )
