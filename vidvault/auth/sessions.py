# =============================================================================
# Session Tokens
# =============================================================================
#
# A session is a signed JWT plus a server-side record:
#   - the token carries `sub` (user id) and `jti` (session id)
#   - the cache holds `session:{jti} -> user id` with a TTL
#
# A token resolves only while its record exists, so logout is a real
# invalidation rather than "the client should discard the token".
#
# =============================================================================

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import jwt
from pydantic import BaseModel

from vidvault.config import Settings, get_settings
from vidvault.core.utils import generate_id, utc_now
from vidvault.storage.base import CacheStorage

logger = logging.getLogger(__name__)

SESSION_KEY_PREFIX = "session:"


# =============================================================================
# Models
# =============================================================================


class TokenPayload(BaseModel):
    """Session token payload."""
    sub: str  # user_id
    jti: str  # session id
    exp: datetime
    iat: datetime


class SessionToken(BaseModel):
    """Issued session token."""
    token: str
    session_id: str
    expires_in: int  # seconds


# =============================================================================
# Token Validation Errors
# =============================================================================


class TokenError(Exception):
    """Base exception for token errors."""
    pass


class TokenExpiredError(TokenError):
    """Token has expired."""
    pass


class TokenInvalidError(TokenError):
    """Token is invalid or malformed."""
    pass


def decode_token(token: str, settings: Settings | None = None) -> TokenPayload:
    """
    Decode and validate a session token.

    Raises:
        TokenExpiredError: Token has expired
        TokenInvalidError: Token is invalid
    """
    settings = settings or get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "jti", "exp", "iat"]},
        )
    except jwt.ExpiredSignatureError:
        raise TokenExpiredError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise TokenInvalidError(f"Invalid token: {e}")

    return TokenPayload(
        sub=payload["sub"],
        jti=payload["jti"],
        exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        iat=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
    )


# =============================================================================
# Session Manager
# =============================================================================


class SessionManager:
    """Maps transport tokens to user ids."""

    def __init__(self, cache: CacheStorage, settings: Settings | None = None):
        self.cache = cache
        self.settings = settings or get_settings()

    async def create(self, user_id: str) -> SessionToken:
        """Open a session for `user_id` and return its token."""
        ttl = self.settings.session_ttl_seconds
        now = utc_now()
        session_id = generate_id("sess")

        token = jwt.encode(
            {
                "sub": user_id,
                "jti": session_id,
                "iat": now,
                "exp": now + timedelta(seconds=ttl),
            },
            self.settings.jwt_secret_key,
            algorithm=self.settings.jwt_algorithm,
        )

        await self.cache.set(_session_key(session_id), user_id, ttl=ttl)
        return SessionToken(token=token, session_id=session_id, expires_in=ttl)

    async def resolve(self, token: str) -> str | None:
        """User id bound to `token`, or None if the session is gone."""
        try:
            payload = decode_token(token, self.settings)
        except TokenError:
            return None

        user_id = await self.cache.get(_session_key(payload.jti))
        if user_id != payload.sub:
            return None
        return user_id

    async def revoke(self, token: str) -> bool:
        """
        Invalidate the session behind `token`.

        Returns True if a live session was removed. Expired or unknown
        tokens are not an error.
        """
        try:
            payload = decode_token(token, self.settings)
        except TokenError:
            return False
        return await self.cache.delete(_session_key(payload.jti))


def _session_key(session_id: str) -> str:
    return f"{SESSION_KEY_PREFIX}{session_id}"
