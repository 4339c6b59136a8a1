"""
Error taxonomy for the video library.

Every rejection carries a stable `kind` so callers can route the user
(log in vs. lacking permission vs. bad input) without parsing messages.
"""

from __future__ import annotations

from typing import Any


class VidVaultError(Exception):
    """Base exception for the video library."""
    
    kind = "error"
    status_code = 500
    default_detail = "Internal error"
    
    def __init__(self, detail: str | None = None, extra: dict[str, Any] | None = None):
        self.detail = detail or self.default_detail
        self.extra = extra or {}
        super().__init__(self.detail)
    
    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "detail": self.detail, **self.extra}


class UnauthenticatedError(VidVaultError):
    """No principal where one is required."""
    
    kind = "unauthenticated"
    status_code = 401
    default_detail = "Authentication required"


class ForbiddenError(VidVaultError):
    """Principal present, but its role is insufficient."""
    
    kind = "forbidden"
    status_code = 403
    default_detail = "Admin access required"


class NotFoundError(VidVaultError):
    kind = "not_found"
    status_code = 404
    default_detail = "Not found"


class ValidationError(VidVaultError):
    """Malformed or missing required input field."""
    
    kind = "validation_error"
    status_code = 400
    default_detail = "Invalid input"


class ConflictError(VidVaultError):
    """Unique-constraint violation (e.g. duplicate email)."""
    
    kind = "conflict"
    status_code = 409
    default_detail = "Conflict"


class DownloadNotPermittedError(VidVaultError):
    kind = "download_not_permitted"
    status_code = 403
    default_detail = "Download not allowed for this video"


class ShareNotPermittedError(VidVaultError):
    kind = "share_not_permitted"
    status_code = 403
    default_detail = "Sharing not allowed for this video"


class InvalidCredentialsError(VidVaultError):
    """Authentication failed. Deliberately silent about the cause."""
    
    kind = "invalid_credentials"
    status_code = 401
    default_detail = "Invalid email or password"


class StoreUnavailableError(VidVaultError):
    """The backing store could not be reached."""
    
    kind = "service_unavailable"
    status_code = 503
    default_detail = "Service temporarily unavailable"
