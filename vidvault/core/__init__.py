"""
Core module - data models, error taxonomy and shared utilities.

This module contains:
- models: User and Video records plus catalog input shapes
- errors: the stable error kinds every rejection maps to
- utils: Shared utility functions
"""

from vidvault.core.models import (
    Role,
    User,
    Video,
    VideoCreate,
    VideoUpdate,
)

from vidvault.core.errors import (
    VidVaultError,
    UnauthenticatedError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
    ConflictError,
    DownloadNotPermittedError,
    ShareNotPermittedError,
    InvalidCredentialsError,
    StoreUnavailableError,
)

from vidvault.core.utils import (
    generate_id,
    utc_now,
)

__all__ = [
    # Models
    "Role",
    "User",
    "Video",
    "VideoCreate",
    "VideoUpdate",
    # Errors
    "VidVaultError",
    "UnauthenticatedError",
    "ForbiddenError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "DownloadNotPermittedError",
    "ShareNotPermittedError",
    "InvalidCredentialsError",
    "StoreUnavailableError",
    # Utils
    "generate_id",
    "utc_now",
]
