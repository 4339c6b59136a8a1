"""
Storage abstractions.

Integration Points:
- CatalogStore → PostgreSQL (users, videos)
- CacheStorage → Redis (sessions)
"""

from vidvault.storage.base import (
    CatalogStore,
    CacheStorage,
    StorageProvider,
)
from vidvault.storage.local import (
    InMemoryCatalogStore,
    InMemoryCacheStorage,
    create_local_storage,
)

__all__ = [
    "CatalogStore",
    "CacheStorage",
    "StorageProvider",
    "InMemoryCatalogStore",
    "InMemoryCacheStorage",
    "create_local_storage",
]
