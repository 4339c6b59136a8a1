"""
Principal - the "who" of each request.

Resolved once per request by the HTTP adapter and passed explicitly to
every core operation as `Principal | None` (None means anonymous).
"""

from __future__ import annotations

from dataclasses import dataclass

from vidvault.auth.capabilities import AccessLevel, get_levels
from vidvault.core.models import Role, User


@dataclass(frozen=True)
class Principal:
    """
    The authenticated actor for a request.
    
    The role is fixed for the lifetime of the request; a role change only
    shows up on the next request that resolves the session again.
    """
    
    id: str
    role: Role = Role.USER
    email: str | None = None
    
    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
    
    @property
    def levels(self) -> frozenset[AccessLevel]:
        """All access levels this principal can reach."""
        return get_levels(self.role)
    
    def can_reach(self, level: AccessLevel) -> bool:
        return level in self.levels
    
    @classmethod
    def from_user(cls, user: User) -> Principal:
        return cls(id=user.id, role=user.role, email=user.email)
