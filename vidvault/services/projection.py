"""
Video projection engine.

Decides which fields of a stored Video a caller gets to see. Each view is
a statically declared model, and a projection copies only the fields that
view declares. A field added to Video later stays hidden until a view
opts in.

Views:
- PublicVideoView   - catalog listing; never carries `sourceUrl`
- DetailedVideoView - single video; adds `sourceUrl` for playback
- AdminVideoView    - every stored field, regardless of capability flags

Capability flags are passed through as stored. Projection decides field
visibility only; enforcing the flags is the job of the action gates at the
bottom of this module.
"""

from __future__ import annotations

from datetime import datetime

from vidvault.auth.capabilities import AccessLevel
from vidvault.auth.context import Principal
from vidvault.auth.policies import Decision, DenialReason, ensure
from vidvault.core.models import CamelModel, Video


# =============================================================================
# View Types
# =============================================================================


class PublicVideoView(CamelModel):
    """What any authenticated user sees in the catalog listing."""

    id: str
    title: str
    description: str | None = None
    thumbnail_url: str | None = None
    duration: str | None = None
    view_count: int
    can_play: bool
    can_share: bool
    can_download: bool
    created_at: datetime


class DetailedVideoView(PublicVideoView):
    """A single video opened for playback."""

    source_url: str


class AdminVideoView(CamelModel):
    """Every stored field, verbatim."""

    id: str
    title: str
    description: str | None = None
    source_url: str
    thumbnail_url: str | None = None
    duration: str | None = None
    view_count: int
    can_play: bool
    can_share: bool
    can_download: bool
    created_at: datetime
    updated_at: datetime


class CatalogStats(CamelModel):
    """Aggregate usage, computed from current catalog state."""

    total_videos: int
    total_users: int
    total_views: int


def _project(video: Video, view: type[CamelModel]) -> CamelModel:
    """Copy exactly the fields `view` declares."""
    return view(**video.model_dump(include=set(view.model_fields)))


# =============================================================================
# Projections
# =============================================================================


def project_for_list(video: Video, principal: Principal | None = None) -> PublicVideoView:
    """Listing view. Holds for every principal, anonymous included."""
    return _project(video, PublicVideoView)


def project_for_detail(video: Video, principal: Principal | None = None) -> DetailedVideoView:
    """
    Detail view, including `sourceUrl`.

    Callers pass the record as read *after* the view was recorded, so the
    returned count already includes this fetch.
    """
    return _project(video, DetailedVideoView)


def project_for_admin(video: Video, principal: Principal | None) -> AdminVideoView:
    """
    Admin view.

    Raises:
        UnauthenticatedError / ForbiddenError: principal is not an admin
    """
    ensure(principal, AccessLevel.ADMIN)
    return _project(video, AdminVideoView)


# =============================================================================
# Action Gates
# =============================================================================


def authorize_download(video: Video) -> Decision:
    """
    Allowed iff the video's `can_download` flag is set.

    Role plays no part: admins are held to the same flag.
    """
    if video.can_download:
        return Decision.allow()
    return Decision.deny(DenialReason.DOWNLOAD_NOT_PERMITTED)


def authorize_share(video: Video) -> Decision:
    """Allowed iff the video's `can_share` flag is set."""
    if video.can_share:
        return Decision.allow()
    return Decision.deny(DenialReason.SHARE_NOT_PERMITTED)
