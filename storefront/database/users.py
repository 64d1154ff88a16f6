"""User storage"""

import uuid
from typing import Optional

from ..errors import PersistenceError
from ..models.user import UserRecord


class UserDatabase:
    """In-memory user profiles"""

    def __init__(self):
        self.users: dict[str, UserRecord] = {}

    def create_user(self, email: str, name: str, password_hash: str, salt: str) -> UserRecord:
        """
        Create a user.

        Raises:
            PersistenceError: if the email is already registered
        """
        if self.get_by_email(email):
            raise PersistenceError(f"User {email} already exists")

        user = UserRecord(
            id=str(uuid.uuid4()),
            email=email.lower(),
            name=name,
            password_hash=password_hash,
            salt=salt,
        )
        self.users[user.id] = user
        return user

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        """Get a user by ID"""
        return self.users.get(user_id)

    def get_by_email(self, email: str) -> Optional[UserRecord]:
        """Get a user by email (case-insensitive)"""
        email = email.lower()
        return next((u for u in self.users.values() if u.email == email), None)


# Singleton instance
user_db = UserDatabase()
