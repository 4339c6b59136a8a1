"""
Tests for the video projection engine.

Core principle: views only carry the fields they declare.
"""

import itertools
import random
import string

import pytest

from vidvault.auth import DenialReason, Principal
from vidvault.core.errors import ForbiddenError, UnauthenticatedError
from vidvault.core.models import Role, Video
from vidvault.services import (
    AdminVideoView,
    DetailedVideoView,
    PublicVideoView,
    authorize_download,
    authorize_share,
    project_for_admin,
    project_for_detail,
    project_for_list,
)


USER = Principal(id="user_1", role=Role.USER)
ADMIN = Principal(id="user_2", role=Role.ADMIN)
FLAG_COMBINATIONS = list(itertools.product([True, False], repeat=3))


def _random_text(rng: random.Random, n: int = 12) -> str:
    return "".join(rng.choice(string.ascii_letters) for _ in range(n))


def _random_videos(seed: int = 7, per_combination: int = 5) -> list[Video]:
    rng = random.Random(seed)
    videos = []
    for can_play, can_share, can_download in FLAG_COMBINATIONS:
        for _ in range(per_combination):
            videos.append(Video(
                title=_random_text(rng),
                description=rng.choice([None, _random_text(rng, 40)]),
                source_url=f"https://cdn.example.com/{_random_text(rng)}.mp4",
                thumbnail_url=rng.choice([None, f"https://img.example.com/{_random_text(rng)}.jpg"]),
                duration=rng.choice([None, "3:45", "1:02:10"]),
                view_count=rng.randint(0, 10_000),
                can_play=can_play,
                can_share=can_share,
                can_download=can_download,
            ))
    return videos


@pytest.fixture
def video():
    return Video(
        title="Quarterly Update",
        description="Q3 numbers",
        source_url="https://cdn.example.com/q3.mp4",
        thumbnail_url="https://img.example.com/q3.jpg",
        duration="12:30",
        view_count=4,
    )


# =============================================================================
# List View
# =============================================================================


class TestListProjection:
    @pytest.mark.parametrize("principal", [None, USER, ADMIN])
    def test_never_exposes_source(self, principal):
        for video in _random_videos():
            view = project_for_list(video, principal)
            dumped = view.model_dump(by_alias=True)

            assert "sourceUrl" not in dumped
            assert "source_url" not in view.model_dump()
            assert video.source_url not in dumped.values()

    def test_passes_flags_through(self):
        for video in _random_videos(seed=11, per_combination=1):
            view = project_for_list(video, USER)
            assert (view.can_play, view.can_share, view.can_download) == (
                video.can_play, video.can_share, video.can_download,
            )

    def test_wire_fields(self, video):
        dumped = project_for_list(video, USER).model_dump(by_alias=True)
        assert set(dumped) == {
            "id", "title", "description", "thumbnailUrl", "duration",
            "viewCount", "canPlay", "canShare", "canDownload", "createdAt",
        }

    def test_new_record_fields_stay_hidden(self, video):
        class AnnotatedVideo(Video):
            internal_note: str = "do not leak"

        annotated = AnnotatedVideo(**video.model_dump())
        dumped = project_for_list(annotated, USER).model_dump()

        assert "internal_note" not in dumped
        assert isinstance(project_for_list(annotated), PublicVideoView)


# =============================================================================
# Detail & Admin Views
# =============================================================================


class TestDetailProjection:
    def test_includes_source(self, video):
        view = project_for_detail(video, USER)
        assert isinstance(view, DetailedVideoView)
        assert view.source_url == video.source_url
        assert view.view_count == video.view_count

    def test_omits_admin_only_fields(self, video):
        assert "updatedAt" not in project_for_detail(video, USER).model_dump(by_alias=True)


class TestAdminProjection:
    def test_exposes_every_stored_field(self, video):
        view = project_for_admin(video, ADMIN)
        assert isinstance(view, AdminVideoView)
        assert view.model_dump() == video.model_dump()

    @pytest.mark.parametrize("can_play, can_share, can_download", FLAG_COMBINATIONS)
    def test_flags_do_not_restrict_admin(self, video, can_play, can_share, can_download):
        locked = video.model_copy(update={
            "can_play": can_play,
            "can_share": can_share,
            "can_download": can_download,
        })
        assert project_for_admin(locked, ADMIN).source_url == video.source_url

    def test_requires_admin(self, video):
        with pytest.raises(ForbiddenError):
            project_for_admin(video, USER)
        with pytest.raises(UnauthenticatedError):
            project_for_admin(video, None)


# =============================================================================
# Action Gates
# =============================================================================


class TestActionGates:
    def test_download_follows_flag(self, video):
        assert not authorize_download(video)
        assert authorize_download(video).reason == DenialReason.DOWNLOAD_NOT_PERMITTED
        assert authorize_download(video.model_copy(update={"can_download": True}))

    def test_share_follows_flag(self, video):
        assert authorize_share(video)
        denied = authorize_share(video.model_copy(update={"can_share": False}))
        assert not denied
        assert denied.reason == DenialReason.SHARE_NOT_PERMITTED

    def test_gates_ignore_other_flags(self):
        for video in _random_videos(seed=3, per_combination=1):
            assert bool(authorize_download(video)) == video.can_download
            assert bool(authorize_share(video)) == video.can_share
