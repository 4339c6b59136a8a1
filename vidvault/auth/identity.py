# =============================================================================
# Identity Verification
# =============================================================================
#
# Confirms who a caller is:
#   - Password hashing (PBKDF2-SHA256, constant-time comparison)
#   - register / authenticate / resolve_principal / logout
#
# Login failures never reveal whether the email exists.
#
# =============================================================================

from __future__ import annotations

import asyncio
import hashlib
import logging
import secrets
from dataclasses import dataclass
from functools import lru_cache

from vidvault.auth.context import Principal
from vidvault.auth.sessions import SessionManager, SessionToken
from vidvault.config import Settings, get_settings
from vidvault.core.errors import InvalidCredentialsError, NotFoundError
from vidvault.core.models import Role, User
from vidvault.storage.base import CatalogStore

logger = logging.getLogger(__name__)


# =============================================================================
# Password Hashing
# =============================================================================


def hash_password(password: str, iterations: int | None = None) -> str:
    """
    Hash a password using PBKDF2-SHA256.

    Returns: iterations:salt:hash format string
    """
    iterations = iterations or get_settings().password_hash_iterations
    salt = secrets.token_hex(32)
    hash_bytes = hashlib.pbkdf2_hmac(
        'sha256',
        password.encode('utf-8'),
        salt.encode('utf-8'),
        iterations=iterations,
    )
    return f"{iterations}:{salt}:{hash_bytes.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash."""
    try:
        iterations, salt, stored_hash = password_hash.split(':')
        hash_bytes = hashlib.pbkdf2_hmac(
            'sha256',
            password.encode('utf-8'),
            salt.encode('utf-8'),
            iterations=int(iterations),
        )
        return secrets.compare_digest(hash_bytes.hex(), stored_hash)
    except (ValueError, AttributeError):
        return False


@lru_cache
def _dummy_hash(iterations: int) -> str:
    # Verified against on unknown emails so both failure paths cost one PBKDF2 run
    return hash_password(secrets.token_hex(16), iterations)


# =============================================================================
# Models
# =============================================================================


@dataclass
class AuthenticatedSession:
    """Result of a successful login or registration."""

    user: User
    principal: Principal
    session: SessionToken


# =============================================================================
# Identity Verifier
# =============================================================================


class IdentityVerifier:
    """Registers users, checks credentials, binds sessions."""

    def __init__(
        self,
        store: CatalogStore,
        sessions: SessionManager,
        settings: Settings | None = None,
    ):
        self.store = store
        self.sessions = sessions
        self.settings = settings or get_settings()
        # Built up front so the first unknown-email login costs the same
        self._dummy_hash = _dummy_hash(self.settings.password_hash_iterations)

    async def register(self, email: str, password: str) -> AuthenticatedSession:
        """
        Create a USER account and log it in.

        The store's unique constraint is the only duplicate check, so two
        concurrent registrations for one email cannot both succeed.

        Raises:
            ConflictError: email already registered
        """
        password_hash = await self._hash(password)
        user = await self.store.insert_user(email, password_hash)
        logger.info(f"Registered user {user.id}")
        return await self._open_session(user)

    async def authenticate(self, email: str, password: str) -> AuthenticatedSession:
        """
        Verify credentials and open a session.

        Raises:
            InvalidCredentialsError: unknown email or wrong password
        """
        user = await self.store.find_user_by_email(email)
        stored_hash = user.password_hash if user else self._dummy_hash
        verified = await asyncio.to_thread(verify_password, password, stored_hash)

        if user is None or not verified:
            logger.info("Failed login attempt")
            raise InvalidCredentialsError()

        logger.info(f"User {user.id} logged in")
        return await self._open_session(user)

    async def resolve_principal(self, token: str) -> Principal | None:
        """Principal behind a session token, or None (anonymous)."""
        user = await self.resolve_user(token)
        return Principal.from_user(user) if user else None

    async def resolve_user(self, token: str) -> User | None:
        user_id = await self.sessions.resolve(token)
        if not user_id:
            return None
        return await self.store.find_user_by_id(user_id)

    async def logout(self, token: str | None) -> None:
        """Invalidate a session. Logging out twice is fine."""
        if token and await self.sessions.revoke(token):
            logger.info("Session closed")

    async def update_avatar(self, principal: Principal, avatar_url: str | None) -> User:
        """Set the caller's own avatar reference."""
        await self.store.update_user_avatar(principal.id, avatar_url)
        user = await self.store.find_user_by_id(principal.id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def ensure_admin(self, email: str, password: str) -> User:
        """
        Bootstrap an administrator out-of-band.

        Creates the account if needed, otherwise promotes the existing one.
        The stored password of an existing account is left untouched.
        """
        user = await self.store.find_user_by_email(email)
        if user is None:
            user = await self.store.insert_user(email, await self._hash(password))

        if user.role != Role.ADMIN:
            user = await self.store.set_user_role(user.id, Role.ADMIN)
            logger.info(f"Promoted {user.id} to {Role.ADMIN.value}")
        return user

    async def _hash(self, password: str) -> str:
        # PBKDF2 is CPU-bound; keep it off the event loop
        return await asyncio.to_thread(
            hash_password, password, self.settings.password_hash_iterations
        )

    async def _open_session(self, user: User) -> AuthenticatedSession:
        session = await self.sessions.create(user.id)
        return AuthenticatedSession(
            user=user,
            principal=Principal.from_user(user),
            session=session,
        )
