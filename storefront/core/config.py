"""Storefront Configuration"""

import os
from typing import Optional
from pydantic_settings import BaseSettings
from functools import lru_cache

ENV_FILE = os.path.join(os.path.dirname(__file__), "..", "..", "config", ".env")


class Settings(BaseSettings):
    """Application settings loaded from environment"""

    # Application
    app_name: str = "Artisan Storefront"
    debug: bool = True
    host: str = "0.0.0.0"
    port: int = 8000
    public_base_url: str = "http://localhost:8000"

    # Pricing
    currency: str = "INR"
    free_shipping_threshold: float = 150.0
    flat_shipping_fee: float = 10.0

    # Checkout form
    phone_region: str = "IN"

    # Payment gateway (Razorpay-compatible API)
    gateway_base_url: str = "http://localhost:8002"
    gateway_key_id: Optional[str] = None
    gateway_key_secret: Optional[str] = None
    gateway_webhook_secret: Optional[str] = None
    gateway_timeout: float = 30.0

    # Cart persistence. None keeps carts in memory only.
    cart_storage_dir: Optional[str] = None

    # Idle carts are dropped after this long
    cart_max_idle_hours: int = 72

    # Sign-in sessions
    session_max_age_hours: int = 24

    # How often expired sessions and idle carts are swept
    cleanup_interval_minutes: int = 15

    class Config:
        env_file = ENV_FILE
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    @property
    def gateway_configured(self) -> bool:
        """Check if payment gateway credentials are configured"""
        return all([
            self.gateway_key_id,
            self.gateway_key_secret,
        ])

    @property
    def checkout_return_url(self) -> str:
        """Where the gateway sends the shopper back to after paying"""
        return f"{self.public_base_url.rstrip('/')}/api/checkout/return"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
