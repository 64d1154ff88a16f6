"""Mock Gateway Configuration"""

import os
from typing import Optional
from pydantic_settings import BaseSettings
from functools import lru_cache

ENV_FILE = os.path.join(os.path.dirname(__file__), "..", "config", ".env")


class GatewaySettings(BaseSettings):
    """Mock gateway settings, sharing the storefront's credential variables"""

    host: str = "0.0.0.0"
    mock_gateway_port: int = 8002

    gateway_key_id: str = "rzp_test_mock"
    gateway_key_secret: str = "mock_key_secret"
    gateway_webhook_secret: Optional[str] = None

    # Where payment events are posted. None disables webhooks.
    mock_gateway_webhook_url: Optional[str] = None

    class Config:
        env_file = ENV_FILE
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


@lru_cache()
def get_gateway_settings() -> GatewaySettings:
    """Get cached settings instance"""
    return GatewaySettings()
