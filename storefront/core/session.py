"""Sign-in session management"""

import secrets
from datetime import datetime
from typing import Optional
from dataclasses import dataclass


@dataclass
class AuthSession:
    """A signed-in browser session"""
    token: str
    user_id: str
    created_at: datetime
    updated_at: datetime

    def touch(self) -> None:
        """Mark the session as recently used"""
        self.updated_at = datetime.utcnow()


class SessionManager:
    """Manages sign-in sessions"""

    def __init__(self, max_age_hours: int = 24):
        self.max_age_hours = max_age_hours
        self.sessions: dict[str, AuthSession] = {}

    def create_session(self, user_id: str) -> AuthSession:
        """Create a new session for a user"""
        now = datetime.utcnow()
        session = AuthSession(
            token=secrets.token_urlsafe(32),
            user_id=user_id,
            created_at=now,
            updated_at=now,
        )
        self.sessions[session.token] = session
        return session

    def get_session(self, token: str) -> Optional[AuthSession]:
        """Get a live session by token, dropping it if it has expired"""
        session = self.sessions.get(token)
        if not session:
            return None

        age = (datetime.utcnow() - session.updated_at).total_seconds()
        if age > self.max_age_hours * 3600:
            del self.sessions[token]
            return None

        session.touch()
        return session

    def delete_session(self, token: str) -> bool:
        """Delete a session"""
        if token in self.sessions:
            del self.sessions[token]
            return True
        return False

    def cleanup_old_sessions(self) -> int:
        """Remove sessions older than max_age_hours"""
        now = datetime.utcnow()
        old_sessions = [
            token for token, session in self.sessions.items()
            if (now - session.updated_at).total_seconds() > self.max_age_hours * 3600
        ]
        for token in old_sessions:
            del self.sessions[token]
        return len(old_sessions)
