"""
Tests for the catalog service.

Covers the admin write path, the counted detail read, and the
concurrency requirement on view counts.
"""

import asyncio
from concurrent.futures import ThreadPoolExecutor

import pydantic
import pytest

from vidvault.core.errors import (
    DownloadNotPermittedError,
    ForbiddenError,
    NotFoundError,
    ShareNotPermittedError,
    UnauthenticatedError,
    ValidationError,
)
from vidvault.core.models import VideoCreate, VideoUpdate


# =============================================================================
# Create
# =============================================================================


class TestCreate:
    @pytest.mark.asyncio
    async def test_defaults(self, catalog, admin, new_video):
        video = await catalog.create(new_video(), admin)

        assert video.view_count == 0
        assert video.can_play is True
        assert video.can_share is True
        assert video.can_download is False
        assert video.created_at == video.updated_at

    @pytest.mark.asyncio
    async def test_view_count_input_is_ignored(self, catalog, admin):
        data = VideoCreate.model_validate({
            "title": "T",
            "sourceUrl": "http://x",
            "viewCount": 99,
        })
        video = await catalog.create(data, admin)
        assert video.view_count == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["title", "source_url"])
    @pytest.mark.parametrize("blank", ["", "   "])
    async def test_required_fields(self, catalog, admin, new_video, field, blank):
        with pytest.raises(ValidationError):
            await catalog.create(new_video(**{field: blank}), admin)
        assert await catalog.store.list_videos() == []

    @pytest.mark.asyncio
    async def test_requires_admin(self, catalog, user, new_video):
        with pytest.raises(ForbiddenError):
            await catalog.create(new_video(), user)
        with pytest.raises(UnauthenticatedError):
            await catalog.create(new_video(), None)


# =============================================================================
# Update
# =============================================================================


class TestUpdate:
    @pytest.mark.asyncio
    async def test_partial_update(self, catalog, admin, new_video):
        before = await catalog.create(new_video(description="X"), admin)
        await asyncio.sleep(0.001)

        after = await catalog.update(before.id, VideoUpdate(title="New"), admin)

        assert after.title == "New"
        assert after.description == "X"
        assert after.updated_at > before.updated_at
        unchanged = after.model_dump(exclude={"title", "updated_at"})
        assert unchanged == before.model_dump(exclude={"title", "updated_at"})

    @pytest.mark.asyncio
    async def test_flags_toggle(self, catalog, admin, new_video):
        video = await catalog.create(new_video(), admin)
        updated = await catalog.update(
            video.id,
            VideoUpdate.model_validate({"canDownload": True, "canShare": False}),
            admin,
        )
        assert updated.can_download is True
        assert updated.can_share is False
        assert updated.can_play is True

    @pytest.mark.asyncio
    async def test_unknown_video(self, catalog, admin):
        with pytest.raises(NotFoundError):
            await catalog.update("vid_missing", VideoUpdate(title="New"), admin)

    @pytest.mark.asyncio
    async def test_blank_title_rejected(self, catalog, admin, new_video):
        video = await catalog.create(new_video(), admin)
        with pytest.raises(ValidationError):
            await catalog.update(video.id, VideoUpdate(title=""), admin)

    @pytest.mark.asyncio
    async def test_null_flag_rejected(self, catalog, admin, new_video):
        video = await catalog.create(new_video(), admin)
        with pytest.raises(ValidationError):
            await catalog.update(video.id, VideoUpdate(can_play=None), admin)

    @pytest.mark.parametrize("field", ["viewCount", "view_count", "createdAt", "id"])
    def test_immutable_fields_not_in_shape(self, field):
        with pytest.raises(pydantic.ValidationError):
            VideoUpdate.model_validate({field: 5})

    @pytest.mark.asyncio
    async def test_requires_admin(self, catalog, admin, user, new_video):
        video = await catalog.create(new_video(), admin)
        with pytest.raises(ForbiddenError):
            await catalog.update(video.id, VideoUpdate(title="New"), user)


# =============================================================================
# Delete
# =============================================================================


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete_twice(self, catalog, admin, new_video):
        video = await catalog.create(new_video(), admin)

        await catalog.delete(video.id, admin)
        with pytest.raises(NotFoundError):
            await catalog.delete(video.id, admin)

        assert await catalog.store.find_video_by_id(video.id) is None


# =============================================================================
# Read Path
# =============================================================================


class TestReadPath:
    @pytest.mark.asyncio
    async def test_list_newest_first(self, catalog, admin, user, new_video):
        first = await catalog.create(new_video(title="First"), admin)
        second = await catalog.create(new_video(title="Second"), admin)

        listed = await catalog.list_videos(user)
        assert [v.id for v in listed] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_list_requires_login(self, catalog):
        with pytest.raises(UnauthenticatedError):
            await catalog.list_videos(None)

    @pytest.mark.asyncio
    async def test_open_counts_view(self, catalog, admin, user, new_video):
        video = await catalog.create(new_video(), admin)

        detail = await catalog.open_video(video.id, user)
        assert detail.view_count == 1
        assert detail.source_url == video.source_url

        detail = await catalog.open_video(video.id, user)
        assert detail.view_count == 2

    @pytest.mark.asyncio
    async def test_open_unknown(self, catalog, user):
        with pytest.raises(NotFoundError):
            await catalog.open_video("vid_missing", user)

    @pytest.mark.asyncio
    async def test_listing_does_not_count(self, catalog, admin, user, new_video):
        video = await catalog.create(new_video(), admin)
        await catalog.list_videos(user)
        assert (await catalog.store.find_video_by_id(video.id)).view_count == 0

    @pytest.mark.asyncio
    async def test_download_denied_for_every_role(self, catalog, admin, user, new_video):
        video = await catalog.create(new_video(can_download=False), admin)

        with pytest.raises(DownloadNotPermittedError):
            await catalog.download_url(video.id, user)
        with pytest.raises(DownloadNotPermittedError):
            await catalog.download_url(video.id, admin)

    @pytest.mark.asyncio
    async def test_download_allowed(self, catalog, admin, user, new_video):
        video = await catalog.create(new_video(can_download=True), admin)
        assert await catalog.download_url(video.id, user) == video.source_url

    @pytest.mark.asyncio
    async def test_share_gate(self, catalog, admin, user, new_video):
        shareable = await catalog.create(new_video(), admin)
        private = await catalog.create(new_video(can_share=False), admin)

        card = await catalog.check_share(shareable.id, user)
        assert card.id == shareable.id
        with pytest.raises(ShareNotPermittedError):
            await catalog.check_share(private.id, user)


# =============================================================================
# View Count Concurrency
# =============================================================================


class TestRecordView:
    @pytest.mark.asyncio
    async def test_concurrent_tasks(self, catalog, admin, new_video):
        video = await catalog.create(new_video(), admin)

        await asyncio.gather(*(catalog.record_view(video.id) for _ in range(50)))

        stored = await catalog.store.find_video_by_id(video.id)
        assert stored.view_count == 50

    @pytest.mark.asyncio
    async def test_concurrent_threads(self, catalog, admin, new_video):
        video = await catalog.create(new_video(), admin)

        def view_once(_):
            asyncio.run(catalog.record_view(video.id))

        with ThreadPoolExecutor(max_workers=10) as pool:
            list(pool.map(view_once, range(50)))

        stored = await catalog.store.find_video_by_id(video.id)
        assert stored.view_count == 50

    @pytest.mark.asyncio
    async def test_unknown_video_is_noop(self, catalog):
        await catalog.record_view("vid_missing")


# =============================================================================
# Stats
# =============================================================================


class TestStats:
    @pytest.mark.asyncio
    async def test_totals(self, catalog, admin, new_video):
        store = catalog.store
        await store.insert_user("a@example.com", "hash")
        await store.insert_user("b@example.com", "hash")

        one = await catalog.create(new_video(), admin)
        two = await catalog.create(new_video(), admin)
        for _ in range(3):
            await catalog.record_view(one.id)
        await catalog.record_view(two.id)

        stats = await catalog.stats(admin)
        assert stats.total_videos == 2
        assert stats.total_users == 2
        assert stats.total_views == 4

    @pytest.mark.asyncio
    async def test_requires_admin(self, catalog, user):
        with pytest.raises(ForbiddenError):
            await catalog.stats(user)
