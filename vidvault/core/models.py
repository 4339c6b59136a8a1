"""
Core data models for the video library.

Users and Videos are the two persisted records. Wire names are camelCase
(`sourceUrl`, `viewCount`, ...); Python attributes stay snake_case.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from vidvault.core.utils import generate_id, utc_now


# =============================================================================
# Enums
# =============================================================================


class Role(str, Enum):
    """Platform-wide account role."""
    
    USER = "USER"    # Browses the catalog
    ADMIN = "ADMIN"  # Manages the catalog, reads stats


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases."""
    
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# User
# =============================================================================


class User(CamelModel):
    """
    A persisted account.
    
    `email` is unique and matched exactly as stored. `role` is only ever
    changed out-of-band (admin bootstrap or direct store access).
    """
    
    id: str = Field(default_factory=lambda: generate_id("user"))
    email: str
    password_hash: str
    avatar_url: str | None = None
    role: Role = Role.USER
    created_at: datetime = Field(default_factory=utc_now)


# =============================================================================
# Video
# =============================================================================


class Video(CamelModel):
    """
    A catalog entry.
    
    The capability flags gate end-user actions; they never restrict what an
    admin can see.
    """
    
    id: str = Field(default_factory=lambda: generate_id("vid"))
    
    # Metadata
    title: str
    description: str | None = None
    source_url: str  # Where the playable asset lives
    thumbnail_url: str | None = None
    duration: str | None = None  # Display string, format not validated
    
    # Usage
    view_count: int = Field(default=0, ge=0)
    
    # Capability flags
    can_play: bool = True
    can_share: bool = True
    can_download: bool = False
    
    # Timestamps
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class VideoCreate(CamelModel):
    """
    Input shape for creating a video.
    
    Unknown keys (including `viewCount`) are ignored; the counter always
    starts at zero.
    """
    
    title: str
    description: str | None = None
    source_url: str
    thumbnail_url: str | None = None
    duration: str | None = None
    can_play: bool = True
    can_share: bool = True
    can_download: bool = False


class VideoUpdate(CamelModel):
    """
    Input shape for a partial update.
    
    Only fields explicitly supplied are applied. `viewCount`, `createdAt`
    and `id` are not part of this shape and are rejected.
    """
    
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )
    
    title: str | None = None
    description: str | None = None
    source_url: str | None = None
    thumbnail_url: str | None = None
    duration: str | None = None
    can_play: bool | None = None
    can_share: bool | None = None
    can_download: bool | None = None
    
    def changes(self) -> dict:
        """Fields the caller actually supplied, keyed by attribute name."""
        return self.model_dump(exclude_unset=True)
