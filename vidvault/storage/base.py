"""
Storage abstraction layer.

All persistence goes through these interfaces. This allows swapping
implementations (in-memory → PostgreSQL, in-memory cache → Redis)
without changing application code.

Integration Points:
- CatalogStore → PostgreSQL (users + videos tables)
- CacheStorage → Redis (sessions)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel

from vidvault.core.models import Role, User, Video


# =============================================================================
# Storage Interfaces
# =============================================================================


class CatalogStore(ABC):
    """
    Durable store for users and videos.
    
    Implementations own uniqueness and atomicity:
    - `insert_user` must reject a duplicate email itself (raise
      ConflictError), not rely on callers checking first.
    - `increment_video_views` must be a single atomic "+1", never a
      fetch-then-write.
    
    Transport failures should surface as StoreUnavailableError.
    """
    
    # -- Users ---------------------------------------------------------------
    
    @abstractmethod
    async def find_user_by_email(self, email: str) -> User | None:
        """Exact-match lookup."""
        pass
    
    @abstractmethod
    async def find_user_by_id(self, user_id: str) -> User | None:
        pass
    
    @abstractmethod
    async def insert_user(self, email: str, password_hash: str) -> User:
        """Create a USER-role account. Raises ConflictError on duplicate email."""
        pass
    
    @abstractmethod
    async def update_user_avatar(self, user_id: str, avatar_url: str | None) -> None:
        pass
    
    @abstractmethod
    async def set_user_role(self, user_id: str, role: Role) -> User | None:
        """Out-of-band role change. Not reachable from any HTTP route."""
        pass
    
    @abstractmethod
    async def count_users(self) -> int:
        pass
    
    # -- Videos --------------------------------------------------------------
    
    @abstractmethod
    async def list_videos(self) -> list[Video]:
        """All videos, newest-created first."""
        pass
    
    @abstractmethod
    async def find_video_by_id(self, video_id: str) -> Video | None:
        pass
    
    @abstractmethod
    async def insert_video(self, fields: dict[str, Any]) -> Video:
        pass
    
    @abstractmethod
    async def update_video(self, video_id: str, fields: dict[str, Any]) -> Video | None:
        """Apply a partial update. Returns None if the video is absent."""
        pass
    
    @abstractmethod
    async def delete_video(self, video_id: str) -> bool:
        """Hard delete. True iff a record was removed."""
        pass
    
    @abstractmethod
    async def increment_video_views(self, video_id: str) -> None:
        """Atomic +1 on view_count. No-op for an unknown id."""
        pass


class CacheStorage(ABC):
    """
    Fast key-value cache for sessions.
    
    Production Implementation: Redis
    Local Implementation: In-memory dict
    """
    
    @abstractmethod
    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Set a value with optional TTL in seconds."""
        pass
    
    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Get a value."""
        pass
    
    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete a key."""
        pass


# =============================================================================
# Storage Provider (dependency injection container)
# =============================================================================


class StorageProvider(BaseModel):
    """
    Container for all storage backends.
    
    Initialize once at app startup with appropriate implementations.
    Services receive this and use the interfaces without knowing
    the underlying implementation.
    """
    
    model_config = {"arbitrary_types_allowed": True}
    
    catalog: CatalogStore
    cache: CacheStorage
