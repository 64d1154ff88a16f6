"""
Session Authentication Middleware

Picks the bearer session token off incoming requests. Requests without a
token carry on as anonymous shoppers; routes that need a user say so with
a dependency.
"""

import logging
from typing import Optional, Callable

from fastapi import Request, HTTPException, Depends
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from ..dependencies import get_auth_service
from ..models.user import UserIdentity
from ..services.auth import AuthService

logger = logging.getLogger(__name__)


class SessionTokenMiddleware(BaseHTTPMiddleware):
    """Stores the bearer token from the Authorization header in request.state"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        authorization = request.headers.get("Authorization", "")
        scheme, _, token = authorization.partition(" ")

        if scheme.lower() == "bearer" and token.strip():
            request.state.session_token = token.strip()
        else:
            request.state.session_token = None

        response = await call_next(request)
        return response


def get_session_token(request: Request) -> Optional[str]:
    return getattr(request.state, "session_token", None)


class AuthDependency:
    """
    FastAPI dependency resolving the current user.

    With require_user=True an anonymous request is answered with 401 and a
    sign-in redirect target.
    """

    def __init__(self, require_user: bool = False):
        self.require_user = require_user

    async def __call__(
        self,
        request: Request,
        auth: AuthService = Depends(get_auth_service),
    ) -> Optional[UserIdentity]:
        user = auth.get_current_user(get_session_token(request))

        if self.require_user and not user:
            raise HTTPException(
                status_code=401,
                detail={
                    "message": "Please sign in to continue",
                    "redirect_to": f"/login?next={request.url.path}",
                },
            )

        return user


# Dependency instance
require_user = AuthDependency(require_user=True)
