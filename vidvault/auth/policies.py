"""
Policies - the access control gate.

`authorize()` is a pure decision function: no I/O, no mutation. Given the
request's principal (or None) and the level an operation requires, it
returns a Decision. Everything else in this module adapts that decision
to FastAPI:

    @router.get("/admin/videos")
    async def list_videos(principal: Principal = Depends(require_admin())):
        ...

If denied, the dependency raises the matching error (401 vs 403) before
the route body runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from vidvault.auth.capabilities import AccessLevel
from vidvault.auth.context import Principal
from vidvault.core.errors import (
    DownloadNotPermittedError,
    ForbiddenError,
    ShareNotPermittedError,
    UnauthenticatedError,
    VidVaultError,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Decision - the result of every gate
# =============================================================================


class DenialReason(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    DOWNLOAD_NOT_PERMITTED = "download_not_permitted"
    SHARE_NOT_PERMITTED = "share_not_permitted"


_DENIAL_ERRORS: dict[DenialReason, type[VidVaultError]] = {
    DenialReason.UNAUTHENTICATED: UnauthenticatedError,
    DenialReason.FORBIDDEN: ForbiddenError,
    DenialReason.DOWNLOAD_NOT_PERMITTED: DownloadNotPermittedError,
    DenialReason.SHARE_NOT_PERMITTED: ShareNotPermittedError,
}


@dataclass(frozen=True)
class Decision:
    """Allowed, or Denied with a reason."""

    allowed: bool
    reason: DenialReason | None = None

    @classmethod
    def allow(cls) -> Decision:
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: DenialReason) -> Decision:
        return cls(allowed=False, reason=reason)

    def __bool__(self) -> bool:
        return self.allowed

    def raise_for_denial(self) -> None:
        """Raise the error matching the denial reason; no-op when allowed."""
        if not self.allowed:
            raise _DENIAL_ERRORS[self.reason]()


def authorize(principal: Principal | None, level: AccessLevel) -> Decision:
    """
    Decide whether a principal may run an operation requiring `level`.

    | principal | PUBLIC  | AUTHENTICATED   | ADMIN           |
    |-----------|---------|-----------------|-----------------|
    | none      | allowed | unauthenticated | unauthenticated |
    | USER      | allowed | allowed         | forbidden       |
    | ADMIN     | allowed | allowed         | allowed         |
    """
    if level == AccessLevel.PUBLIC:
        return Decision.allow()

    if principal is None:
        return Decision.deny(DenialReason.UNAUTHENTICATED)

    if principal.can_reach(level):
        return Decision.allow()

    return Decision.deny(DenialReason.FORBIDDEN)


def ensure(principal: Principal | None, level: AccessLevel) -> None:
    """Raise unless `principal` may reach `level`."""
    decision = authorize(principal, level)
    if not decision:
        logger.debug(
            "Denied %s access for %s: %s",
            level.value,
            principal.id if principal else "anonymous",
            decision.reason.value,
        )
        decision.raise_for_denial()


# =============================================================================
# Principal Resolution (pluggable)
# =============================================================================


# Optional bearer (doesn't fail if no token)
optional_bearer = HTTPBearer(auto_error=False)


def get_session_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(optional_bearer),
) -> str | None:
    """
    Extract the session token for a request.

    Bearer header wins; the session cookie is the fallback for browsers.
    """
    if credentials:
        return credentials.credentials
    return request.cookies.get(request.app.state.settings.session_cookie_name)


async def get_principal(
    request: Request,
    token: str | None = Depends(get_session_token),
) -> Principal | None:
    """
    Resolve the request's principal once.

    FastAPI caches this dependency per request, so every gate and route in
    the same request sees the same value.
    """
    if not token:
        return None
    identity = request.app.state.identity
    return await identity.resolve_principal(token)


# =============================================================================
# Main Interface - the require() function
# =============================================================================


def require(level: AccessLevel) -> Callable:
    """
    Require an access level to reach a route.

    Usage:
        @app.get("/videos")
        async def list_videos(
            principal: Principal = Depends(require(AccessLevel.AUTHENTICATED)),
        ):
            # principal is populated if we get here
            ...

    Returns:
        FastAPI Depends that resolves to the request's Principal
        (None only for PUBLIC routes hit anonymously)
    """

    async def dependency(
        principal: Principal | None = Depends(get_principal),
    ) -> Principal | None:
        ensure(principal, level)
        return principal

    return dependency


def require_auth() -> Callable:
    """Just require authentication."""
    return require(AccessLevel.AUTHENTICATED)


def require_admin() -> Callable:
    """Require the ADMIN role."""
    return require(AccessLevel.ADMIN)
