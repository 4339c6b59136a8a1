"""
Local storage implementations for development and tests.

These are in-memory implementations that work without any external
services. Every mutation of the catalog happens inside one lock-guarded
critical section, so the store (not its callers) is the authority for
email uniqueness and for view-count increments.
"""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Any

from vidvault.core.errors import ConflictError
from vidvault.core.models import Role, User, Video
from vidvault.core.utils import utc_now
from vidvault.storage.base import CacheStorage, CatalogStore, StorageProvider


# =============================================================================
# In-Memory Catalog Store
# =============================================================================


class InMemoryCatalogStore(CatalogStore):
    """In-memory users + videos for development."""
    
    def __init__(self):
        self._lock = threading.Lock()
        self._users: dict[str, User] = {}
        self._users_by_email: dict[str, str] = {}  # email -> user_id
        self._videos: dict[str, Video] = {}
    
    # -- Users ---------------------------------------------------------------
    
    async def find_user_by_email(self, email: str) -> User | None:
        with self._lock:
            user_id = self._users_by_email.get(email)
            return self._copy(self._users.get(user_id)) if user_id else None
    
    async def find_user_by_id(self, user_id: str) -> User | None:
        with self._lock:
            return self._copy(self._users.get(user_id))
    
    async def insert_user(self, email: str, password_hash: str) -> User:
        with self._lock:
            if email in self._users_by_email:
                raise ConflictError("User with this email already exists")
            user = User(email=email, password_hash=password_hash, role=Role.USER)
            self._users[user.id] = user
            self._users_by_email[email] = user.id
            return self._copy(user)
    
    async def update_user_avatar(self, user_id: str, avatar_url: str | None) -> None:
        with self._lock:
            user = self._users.get(user_id)
            if user:
                user.avatar_url = avatar_url
    
    async def set_user_role(self, user_id: str, role: Role) -> User | None:
        with self._lock:
            user = self._users.get(user_id)
            if not user:
                return None
            user.role = role
            return self._copy(user)
    
    async def count_users(self) -> int:
        with self._lock:
            return len(self._users)
    
    # -- Videos --------------------------------------------------------------
    
    async def list_videos(self) -> list[Video]:
        with self._lock:
            # Insertion order breaks created_at ties
            ordered = sorted(
                enumerate(self._videos.values()),
                key=lambda pair: (pair[1].created_at, pair[0]),
                reverse=True,
            )
            return [self._copy(v) for _, v in ordered]
    
    async def find_video_by_id(self, video_id: str) -> Video | None:
        with self._lock:
            return self._copy(self._videos.get(video_id))
    
    async def insert_video(self, fields: dict[str, Any]) -> Video:
        video = Video(**fields)
        with self._lock:
            self._videos[video.id] = video
            return self._copy(video)
    
    async def update_video(self, video_id: str, fields: dict[str, Any]) -> Video | None:
        with self._lock:
            video = self._videos.get(video_id)
            if not video:
                return None
            updated = video.model_copy(update={**fields, "updated_at": utc_now()})
            self._videos[video_id] = updated
            return self._copy(updated)
    
    async def delete_video(self, video_id: str) -> bool:
        with self._lock:
            return self._videos.pop(video_id, None) is not None
    
    async def increment_video_views(self, video_id: str) -> None:
        with self._lock:
            video = self._videos.get(video_id)
            if video:
                video.view_count += 1
    
    @staticmethod
    def _copy(record):
        # Callers never hold a reference into the store
        return record.model_copy() if record is not None else None


# =============================================================================
# In-Memory Cache Storage
# =============================================================================


class InMemoryCacheStorage(CacheStorage):
    """In-memory cache for development."""
    
    def __init__(self):
        self._cache: dict[str, tuple[Any, float | None]] = {}
    
    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        now = datetime.now(timezone.utc).timestamp()
        self._sweep(now)
        expires_at = now + ttl if ttl else None
        self._cache[key] = (value, expires_at)

    async def get(self, key: str) -> Any | None:
        if key not in self._cache:
            return None

        value, expires_at = self._cache[key]
        if expires_at and datetime.now(timezone.utc).timestamp() > expires_at:
            del self._cache[key]
            return None

        return value
    
    async def delete(self, key: str) -> bool:
        if key in self._cache:
            del self._cache[key]
            return True
        return False

    def _sweep(self, now: float) -> None:
        # Drop entries that expired without ever being read again
        expired = [
            key for key, (_, expires_at) in self._cache.items()
            if expires_at and now > expires_at
        ]
        for key in expired:
            del self._cache[key]


# =============================================================================
# Factory
# =============================================================================


def create_local_storage() -> StorageProvider:
    """Create a StorageProvider with in-memory implementations."""
    return StorageProvider(
        catalog=InMemoryCatalogStore(),
        cache=InMemoryCacheStorage(),
    )
