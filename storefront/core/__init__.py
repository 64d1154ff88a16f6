# Core modules

from .config import settings, get_settings, Settings
from .session import SessionManager, AuthSession

__all__ = ["settings", "get_settings", "Settings", "SessionManager", "AuthSession"]
