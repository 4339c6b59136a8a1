"""
Catalog service - the read path and the admin write path.

Every operation takes the request's principal explicitly and runs it
through the access gate before touching the store.
"""

from __future__ import annotations

import logging

from vidvault.auth.capabilities import AccessLevel
from vidvault.auth.context import Principal
from vidvault.auth.policies import ensure
from vidvault.core.errors import NotFoundError, ValidationError
from vidvault.core.models import Video, VideoCreate, VideoUpdate
from vidvault.core.utils import utc_now
from vidvault.services.projection import (
    AdminVideoView,
    CatalogStats,
    DetailedVideoView,
    PublicVideoView,
    authorize_download,
    authorize_share,
    project_for_admin,
    project_for_detail,
    project_for_list,
)
from vidvault.storage.base import CatalogStore

logger = logging.getLogger(__name__)

# Fields that may never be blank when supplied
REQUIRED_TEXT_FIELDS = ("title", "source_url")


class CatalogService:
    """
    Browse, open, download, and administer videos.

    Read path (AUTHENTICATED): list_videos, open_video, download_url
    Write path (ADMIN): create, update, delete, admin listing, stats
    """

    def __init__(self, store: CatalogStore):
        self.store = store

    # =========================================================================
    # Read Path
    # =========================================================================

    async def list_videos(self, principal: Principal | None) -> list[PublicVideoView]:
        """The catalog, newest first. Never carries source URLs."""
        ensure(principal, AccessLevel.AUTHENTICATED)
        videos = await self.store.list_videos()
        return [project_for_list(v, principal) for v in videos]

    async def open_video(self, video_id: str, principal: Principal | None) -> DetailedVideoView:
        """
        Fetch one video for playback.

        Counts as a view: the counter is incremented first, and the returned
        view reflects the post-increment record.
        """
        ensure(principal, AccessLevel.AUTHENTICATED)
        await self._get_or_404(video_id)

        await self.record_view(video_id)

        video = await self._get_or_404(video_id)
        return project_for_detail(video, principal)

    async def download_url(self, video_id: str, principal: Principal | None) -> str:
        """
        Source URL to redirect a download to.

        Raises:
            DownloadNotPermittedError: the video's can_download flag is off
        """
        ensure(principal, AccessLevel.AUTHENTICATED)
        video = await self._get_or_404(video_id)
        authorize_download(video).raise_for_denial()
        return video.source_url

    async def check_share(self, video_id: str, principal: Principal | None) -> PublicVideoView:
        """
        Confirm a video may be shared and return what a share card shows.

        Raises:
            ShareNotPermittedError: the video's can_share flag is off
        """
        ensure(principal, AccessLevel.AUTHENTICATED)
        video = await self._get_or_404(video_id)
        authorize_share(video).raise_for_denial()
        return project_for_list(video, principal)

    async def record_view(self, video_id: str) -> None:
        """Atomic +1 on the view counter (delegated to the store)."""
        await self.store.increment_video_views(video_id)

    # =========================================================================
    # Admin Path
    # =========================================================================

    async def admin_list(self, principal: Principal | None) -> list[AdminVideoView]:
        ensure(principal, AccessLevel.ADMIN)
        videos = await self.store.list_videos()
        return [project_for_admin(v, principal) for v in videos]

    async def admin_get(self, video_id: str, principal: Principal | None) -> AdminVideoView:
        ensure(principal, AccessLevel.ADMIN)
        video = await self._get_or_404(video_id)
        return project_for_admin(video, principal)

    async def create(self, data: VideoCreate, principal: Principal | None) -> AdminVideoView:
        """
        Add a video to the catalog.

        `view_count` always starts at 0; unspecified flags take the
        defaults (play and share on, download off).

        Raises:
            ValidationError: blank title or source URL
        """
        ensure(principal, AccessLevel.ADMIN)
        fields = data.model_dump()
        _validate_required(fields)

        now = utc_now()
        video = await self.store.insert_video({
            **fields,
            "view_count": 0,
            "created_at": now,
            "updated_at": now,
        })
        logger.info(f"Admin {principal.id} created video {video.id}")
        return project_for_admin(video, principal)

    async def update(
        self,
        video_id: str,
        data: VideoUpdate,
        principal: Principal | None,
    ) -> AdminVideoView:
        """
        Apply a partial update.

        Only supplied fields change; `updated_at` is always refreshed.

        Raises:
            NotFoundError: unknown video
            ValidationError: a required field supplied blank or null
        """
        ensure(principal, AccessLevel.ADMIN)
        changes = data.changes()
        _validate_required(changes, partial=True)
        for flag in ("can_play", "can_share", "can_download"):
            if flag in changes and changes[flag] is None:
                raise ValidationError(f"{flag} cannot be null")

        video = await self.store.update_video(video_id, changes)
        if video is None:
            raise NotFoundError("Video not found")

        logger.info(f"Admin {principal.id} updated video {video_id}: {sorted(changes)}")
        return project_for_admin(video, principal)

    async def delete(self, video_id: str, principal: Principal | None) -> None:
        """
        Hard delete.

        Raises:
            NotFoundError: unknown video (including a second delete)
        """
        ensure(principal, AccessLevel.ADMIN)
        if not await self.store.delete_video(video_id):
            raise NotFoundError("Video not found")
        logger.info(f"Admin {principal.id} deleted video {video_id}")

    async def stats(self, principal: Principal | None) -> CatalogStats:
        ensure(principal, AccessLevel.ADMIN)
        videos = await self.store.list_videos()
        return CatalogStats(
            total_videos=len(videos),
            total_users=await self.store.count_users(),
            total_views=sum(v.view_count for v in videos),
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _get_or_404(self, video_id: str) -> Video:
        video = await self.store.find_video_by_id(video_id)
        if video is None:
            raise NotFoundError("Video not found")
        return video


def _validate_required(fields: dict, partial: bool = False) -> None:
    for name in REQUIRED_TEXT_FIELDS:
        if partial and name not in fields:
            continue
        value = fields.get(name)
        if value is None or not str(value).strip():
            raise ValidationError(f"{name} is required", extra={"field": name})
