"""Sign-up / sign-in routes"""

from typing import Optional
from fastapi import APIRouter, HTTPException, Depends, Request

from ..dependencies import get_auth_service
from ..models.user import SignUpRequest, SignInRequest, AuthResponse, UserIdentity
from ..security.session_auth import require_user, get_session_token
from ..services.auth import AuthService, AuthError

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/signup", response_model=AuthResponse, status_code=201)
async def sign_up(
    request: SignUpRequest,
    auth: AuthService = Depends(get_auth_service),
):
    """Create an account and sign in"""
    try:
        auth.sign_up(request.email, request.password, request.name)
        session = auth.sign_in(request.email, request.password)
    except AuthError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return AuthResponse(
        token=session.token,
        user=auth.get_current_user(session.token),
        message="Account created",
    )


@router.post("/signin", response_model=AuthResponse)
async def sign_in(
    request: SignInRequest,
    auth: AuthService = Depends(get_auth_service),
):
    """Sign in with email and password"""
    try:
        session = auth.sign_in(request.email, request.password)
    except AuthError as e:
        raise HTTPException(status_code=401, detail=str(e))

    return AuthResponse(
        token=session.token,
        user=auth.get_current_user(session.token),
        message="Signed in",
    )


@router.post("/signout", response_model=AuthResponse)
async def sign_out(
    request: Request,
    auth: AuthService = Depends(get_auth_service),
):
    """End the current session"""
    token: Optional[str] = get_session_token(request)
    if token:
        auth.sign_out(token)
    return AuthResponse(message="Signed out")


@router.get("/me", response_model=UserIdentity)
async def current_user(user: UserIdentity = Depends(require_user)):
    """Who is signed in"""
    return user
