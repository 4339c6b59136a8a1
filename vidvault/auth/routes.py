# =============================================================================
# Auth API Routes
# =============================================================================
#
# Endpoints:
#   POST /register   - Create account (logs in immediately)
#   POST /login      - Open a session
#   POST /logout     - Close the session (idempotent)
#   GET  /session    - Current user
#   PUT  /me/avatar  - Set own avatar reference
#
# The session token is returned in the body and set as an httpOnly cookie.
#
# =============================================================================

from datetime import datetime

from fastapi import APIRouter, Depends, Request, Response
from pydantic import EmailStr, Field

from vidvault.auth.context import Principal
from vidvault.auth.identity import AuthenticatedSession, IdentityVerifier
from vidvault.auth.policies import get_session_token, require_auth
from vidvault.core.errors import UnauthenticatedError
from vidvault.core.models import CamelModel, Role, User

router = APIRouter(tags=["auth"])


# =============================================================================
# Request/Response Models
# =============================================================================


class RegisterRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=8)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str


class AvatarRequest(CamelModel):
    avatar_url: str | None = None


class UserResponse(CamelModel):
    """User data returned to client (no credential hash)."""
    id: str
    email: str
    avatar_url: str | None = None
    role: Role
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            avatar_url=user.avatar_url,
            role=user.role,
            created_at=user.created_at,
        )


class SessionResponse(CamelModel):
    user: UserResponse
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds until the session expires


# =============================================================================
# Dependencies
# =============================================================================


def get_identity(request: Request) -> IdentityVerifier:
    return request.app.state.identity


def _start_session(
    request: Request,
    response: Response,
    result: AuthenticatedSession,
) -> SessionResponse:
    settings = request.app.state.settings
    response.set_cookie(
        key=settings.session_cookie_name,
        value=result.session.token,
        max_age=result.session.expires_in,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
    return SessionResponse(
        user=UserResponse.from_user(result.user),
        access_token=result.session.token,
        expires_in=result.session.expires_in,
    )


# =============================================================================
# Public Endpoints
# =============================================================================


@router.post("/register", response_model=SessionResponse, status_code=201)
async def register(
    data: RegisterRequest,
    request: Request,
    response: Response,
    identity: IdentityVerifier = Depends(get_identity),
):
    """
    Create a new account.

    Registration implies login: the response carries a live session.
    """
    result = await identity.register(data.email, data.password)
    return _start_session(request, response, result)


@router.post("/login", response_model=SessionResponse)
async def login(
    data: LoginRequest,
    request: Request,
    response: Response,
    identity: IdentityVerifier = Depends(get_identity),
):
    """
    Authenticate and open a session.
    """
    result = await identity.authenticate(data.email, data.password)
    return _start_session(request, response, result)


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    token: str | None = Depends(get_session_token),
    identity: IdentityVerifier = Depends(get_identity),
):
    """
    Close the current session. Safe to call when already logged out.
    """
    await identity.logout(token)
    response.delete_cookie(request.app.state.settings.session_cookie_name)
    return {"message": "Logged out successfully"}


# =============================================================================
# Protected Endpoints
# =============================================================================


@router.get("/session", response_model=UserResponse)
async def get_session(
    principal: Principal = Depends(require_auth()),
    identity: IdentityVerifier = Depends(get_identity),
):
    """
    Get the current authenticated user.
    """
    user = await identity.store.find_user_by_id(principal.id)
    if not user:
        raise UnauthenticatedError()
    return UserResponse.from_user(user)


@router.put("/me/avatar", response_model=UserResponse)
async def update_avatar(
    data: AvatarRequest,
    principal: Principal = Depends(require_auth()),
    identity: IdentityVerifier = Depends(get_identity),
):
    """
    Set the current user's avatar reference.

    Only ever touches the caller's own account.
    """
    user = await identity.update_avatar(principal, data.avatar_url)
    return UserResponse.from_user(user)
