"""
Roles and access levels.

This defines WHAT callers can reach, not HOW we check it.
The actual checking happens in policies.py.
"""

from enum import Enum

from vidvault.core.models import Role


class AccessLevel(str, Enum):
    """Level an operation requires before it reaches business logic."""
    
    PUBLIC = "public"                # Anyone, including anonymous callers
    AUTHENTICATED = "authenticated"  # Any logged-in user
    ADMIN = "admin"                  # ADMIN role only


# =============================================================================
# Level Mappings
# =============================================================================


# Levels reachable without a principal
ANONYMOUS_LEVELS: frozenset[AccessLevel] = frozenset({AccessLevel.PUBLIC})

# Levels each role can reach
ROLE_LEVELS: dict[Role, frozenset[AccessLevel]] = {
    Role.USER: frozenset({
        AccessLevel.PUBLIC,
        AccessLevel.AUTHENTICATED,
    }),
    Role.ADMIN: frozenset({
        AccessLevel.PUBLIC,
        AccessLevel.AUTHENTICATED,
        AccessLevel.ADMIN,
    }),
}


def get_levels(role: Role | None = None) -> frozenset[AccessLevel]:
    """Access levels reachable by a role (None means anonymous)."""
    if role is None:
        return ANONYMOUS_LEVELS
    return ROLE_LEVELS.get(role, ANONYMOUS_LEVELS)
