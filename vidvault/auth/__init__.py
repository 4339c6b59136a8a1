"""
Authorization system - two roles, three access levels, explicit principals.

Design principles:
1. One pure gate: authorize(principal, level) -> Decision
2. The principal is resolved once per request and passed explicitly
3. Per-video capability flags gate actions, never admin visibility
"""

from vidvault.auth.capabilities import AccessLevel, get_levels
from vidvault.auth.context import Principal
from vidvault.auth.policies import (
    Decision,
    DenialReason,
    authorize,
    ensure,
    get_principal,
    require,
    require_auth,
    require_admin,
)
from vidvault.auth.sessions import SessionManager, SessionToken
from vidvault.auth.identity import (
    AuthenticatedSession,
    IdentityVerifier,
    hash_password,
    verify_password,
)
from vidvault.auth.routes import router as auth_router

__all__ = [
    # Gate
    "authorize",
    "ensure",
    "require",
    "require_auth",
    "require_admin",
    "get_principal",
    # Types
    "AccessLevel",
    "Decision",
    "DenialReason",
    "Principal",
    "get_levels",
    # Identity
    "AuthenticatedSession",
    "IdentityVerifier",
    "SessionManager",
    "SessionToken",
    "hash_password",
    "verify_password",
    # Router
    "auth_router",
]
