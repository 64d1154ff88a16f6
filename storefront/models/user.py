"""User and sign-in models"""

from pydantic import BaseModel, Field
from typing import Optional


class UserIdentity(BaseModel):
    """The signed-in user as seen by the rest of the app"""
    id: str
    email: str
    name: str


class UserRecord(BaseModel):
    """Stored user with credentials"""
    id: str
    email: str
    name: str
    password_hash: str
    salt: str

    def identity(self) -> UserIdentity:
        return UserIdentity(id=self.id, email=self.email, name=self.name)


class SignUpRequest(BaseModel):
    email: str
    password: str = Field(min_length=8)
    name: str


class SignInRequest(BaseModel):
    email: str
    password: str


class AuthResponse(BaseModel):
    """Response from sign-up / sign-in"""
    token: Optional[str] = None
    user: Optional[UserIdentity] = None
    message: Optional[str] = None
