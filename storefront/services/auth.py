"""Sign-up, sign-in and current-user lookup"""

import base64
import logging
import os
from typing import Optional

from cryptography.exceptions import InvalidKey
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from ..core.session import SessionManager, AuthSession
from ..database.users import UserDatabase
from ..errors import PersistenceError
from ..models.user import UserIdentity

logger = logging.getLogger(__name__)

PBKDF2_ITERATIONS = 390_000


class AuthError(Exception):
    """Sign-up or sign-in was refused"""
    pass


def _kdf(salt: bytes) -> PBKDF2HMAC:
    return PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=PBKDF2_ITERATIONS,
    )


def hash_password(password: str, salt: Optional[bytes] = None) -> tuple[str, str]:
    """
    Derive a password hash.

    Returns:
        Tuple of (hash, salt), both base64 encoded
    """
    salt = salt or os.urandom(16)
    key = _kdf(salt).derive(password.encode())
    return base64.b64encode(key).decode(), base64.b64encode(salt).decode()


def check_password(password: str, password_hash: str, salt: str) -> bool:
    try:
        _kdf(base64.b64decode(salt)).verify(password.encode(), base64.b64decode(password_hash))
    except InvalidKey:
        return False
    return True


class AuthService:
    """Authentication backed by the user store and the session manager"""

    def __init__(self, users: UserDatabase, sessions: SessionManager):
        self.users = users
        self.sessions = sessions

    def sign_up(self, email: str, password: str, name: str) -> UserIdentity:
        """Register a new user"""
        password_hash, salt = hash_password(password)
        try:
            user = self.users.create_user(
                email=email.strip(),
                name=name.strip(),
                password_hash=password_hash,
                salt=salt,
            )
        except PersistenceError as e:
            raise AuthError("An account with this email already exists") from e

        logger.info(f"Registered user {user.id}")
        return user.identity()

    def sign_in(self, email: str, password: str) -> AuthSession:
        """Check credentials and open a session"""
        user = self.users.get_by_email(email.strip())
        if not user or not check_password(password, user.password_hash, user.salt):
            logger.info("Sign-in rejected")
            raise AuthError("Invalid email or password")

        session = self.sessions.create_session(user.id)
        logger.info(f"User {user.id} signed in")
        return session

    def sign_out(self, token: str) -> bool:
        return self.sessions.delete_session(token)

    def get_current_user(self, token: Optional[str]) -> Optional[UserIdentity]:
        """Resolve a session token to the signed-in user"""
        if not token:
            return None

        session = self.sessions.get_session(token)
        if not session:
            return None

        user = self.users.get_user(session.user_id)
        return user.identity() if user else None
