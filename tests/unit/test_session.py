"""
Tests for feed sessions: loading, active item switching and teardown.
"""
import asyncio

import pytest

from reelview.core.exceptions import NotFoundError
from reelview.media.commands import BufferedFullscreenHost, BufferedMediaElement, CommandBuffer
from reelview.models.interfaces import StaticIdentityProvider
from reelview.models.schemas import (
    FullscreenSource,
    FullscreenTarget,
    HostCapabilities,
    Orientation,
    PlaybackPhase,
    PostItem,
    SessionStatus,
    VideoItem,
)
from reelview.services.engagement import EngagementStateStore
from reelview.services.feed import FeedDataLoader
from reelview.services.session import FeedSession, ReelsSession


def make_reels(backend, identity=None, orientation=Orientation.PORTRAIT, capabilities=None, loader=None):
    buffer = CommandBuffer(capabilities or HostCapabilities())
    return ReelsSession(
        session_id="s1",
        loader=loader or FeedDataLoader(backend, VideoItem, table="videos", page_size=3),
        engagement=EngagementStateStore(backend, identity or StaticIdentityProvider(None)),
        element_factory=lambda item_id: BufferedMediaElement(item_id, buffer),
        fullscreen_host=BufferedFullscreenHost(buffer),
        orientation=orientation,
        share_base_url="https://reelview.app/",
        command_buffer=buffer,
    )


class ScriptedLoader:
    """Returns canned pages after a per-call delay."""

    def __init__(self, *pages):
        self._pages = list(pages)

    async def load(self, cursor=None):
        delay, items = self._pages.pop(0)
        await asyncio.sleep(delay)
        return items


def active_items(session):
    return [
        item.id for item in session.items
        if session.playback_state(item.id).phase != PlaybackPhase.INACTIVE
    ]


class TestReelsSessionLoad:
    @pytest.mark.asyncio
    async def test_load_activates_first_item(self, backend):
        session = make_reels(backend)

        items = await session.load()

        assert [i.id for i in items] == ["v1", "v2", "v3"]
        assert session.status == SessionStatus.READY
        assert active_items(session) == ["v1"]
        commands = session.drain_commands()
        assert [(c.item_id, c.action) for c in commands] == [("v1", "play")]
        assert session.drain_commands() == []

    @pytest.mark.asyncio
    async def test_load_reconciles_engagement(self, backend, signed_in):
        session = make_reels(backend, identity=signed_in)

        await session.load()

        assert session.engagement_for("v1").count == 2
        assert session.engagement_for("v2").is_liked is True

    @pytest.mark.asyncio
    async def test_load_failure_sets_error(self, backend):
        backend.read_failures.add("videos")
        session = make_reels(backend)

        assert await session.load() == []

        assert session.status == SessionStatus.ERROR
        assert session.error.startswith("Failed to read videos")

    @pytest.mark.asyncio
    async def test_engagement_failure_keeps_items(self, backend):
        backend.read_failures.add("likes")
        session = make_reels(backend)

        items = await session.load()

        assert len(items) == 3
        assert session.status == SessionStatus.READY
        assert session.engagement_for("v1").count == 0

    @pytest.mark.asyncio
    async def test_empty_feed(self, empty_backend):
        session = make_reels(empty_backend)

        await session.load()

        assert session.items == []
        assert session.active_item_id is None
        assert await session.on_scroll(1600, 800) == 0

    @pytest.mark.asyncio
    async def test_stale_load_is_discarded(self, backend):
        videos = await FeedDataLoader(backend, VideoItem, table="videos").load()
        loader = ScriptedLoader((0.05, videos[:1]), (0.0, videos[1:3]))
        session = make_reels(backend, loader=loader)

        first = asyncio.create_task(session.load())
        await asyncio.sleep(0.01)
        await session.load()
        await first

        assert [i.id for i in session.items] == ["v2", "v3"]
        assert active_items(session) == ["v2"]

    @pytest.mark.asyncio
    async def test_close_discards_inflight_load(self, backend):
        backend.latency = 0.05
        session = make_reels(backend)

        task = asyncio.create_task(session.load())
        await asyncio.sleep(0.01)
        session.close()
        await task

        assert session.items == []
        assert session.status == SessionStatus.CLOSED
        assert await session.load() == []


class TestReelsSessionScroll:
    @pytest.mark.asyncio
    async def test_scroll_switches_active_item(self, backend):
        session = make_reels(backend)
        await session.load()
        session.drain_commands()

        index = await session.on_scroll(1600, 800)

        assert index == 2
        assert active_items(session) == ["v3"]
        actions = [(c.item_id, c.action) for c in session.drain_commands()]
        assert actions == [("v1", "pause"), ("v3", "play")]

    @pytest.mark.asyncio
    async def test_overscroll_is_clamped(self, backend):
        session = make_reels(backend)
        await session.load()

        index = await session.on_scroll(10_000, 800)

        assert index == 2
        assert active_items(session) == ["v3"]

    @pytest.mark.asyncio
    async def test_subpixel_scroll_keeps_item(self, backend):
        session = make_reels(backend)
        await session.load()
        session.drain_commands()

        await session.on_scroll(12.5, 800)

        assert session.drain_commands() == []
        assert active_items(session) == ["v1"]

    @pytest.mark.asyncio
    async def test_landscape_follows_active_item(self, backend):
        session = make_reels(backend)
        await session.load()
        await session.on_orientation_change(Orientation.LANDSCAPE)
        assert session.playback_state("v1").phase == PlaybackPhase.ACTIVE_FULLSCREEN

        await session.on_scroll(800, 800)

        assert session.playback_state("v1").phase == PlaybackPhase.INACTIVE
        assert session.playback_state("v2").phase == PlaybackPhase.ACTIVE_FULLSCREEN


class TestReelsSessionControls:
    @pytest.mark.asyncio
    async def test_autoplay_blocked_host(self, backend):
        session = make_reels(backend, capabilities=HostCapabilities(autoplay=False))

        await session.load()

        assert session.playback_state("v1").phase == PlaybackPhase.ACTIVE_PAUSED
        assert session.drain_commands() == []

    @pytest.mark.asyncio
    async def test_fullscreen_fallback_to_vendor(self, backend):
        caps = HostCapabilities(container_fullscreen=False, element_fullscreen=False, vendor_fullscreen=True)
        session = make_reels(backend, capabilities=caps)
        await session.load()
        session.drain_commands()

        state = await session.enter_fullscreen("v1")

        assert state.phase == PlaybackPhase.ACTIVE_FULLSCREEN
        [command] = session.drain_commands()
        assert command.target == FullscreenTarget.VENDOR

    @pytest.mark.asyncio
    async def test_host_fullscreen_exit(self, backend):
        session = make_reels(backend)
        await session.load()
        await session.enter_fullscreen("v1")

        session.on_fullscreen_event("v1", FullscreenSource.STANDARD, False)

        state = session.playback_state("v1")
        assert state.phase == PlaybackPhase.ACTIVE_PLAYING
        assert state.user_exited_fullscreen is True

    @pytest.mark.asyncio
    async def test_unknown_item(self, backend):
        session = make_reels(backend)
        await session.load()

        with pytest.raises(NotFoundError):
            await session.toggle_play("missing")

    @pytest.mark.asyncio
    async def test_close_disposes_controllers(self, backend):
        session = make_reels(backend)
        await session.load()

        session.close()

        assert active_items(session) == []
        assert session.active_item_id is None


class TestFeedSession:
    @pytest.mark.asyncio
    async def test_posts_like_and_share(self, backend, signed_in, clipboard):
        session = FeedSession(
            session_id="s2",
            loader=FeedDataLoader(backend, PostItem, table="posts"),
            engagement=EngagementStateStore(backend, signed_in, item_column="post_id"),
            clipboard=clipboard,
            share_base_url="https://reelview.app",
        )
        await session.load()
        assert session.engagement_for("p1").is_liked is True

        state = await session.toggle_like("p1")
        url = await session.share("p2")

        assert (state.is_liked, state.count) == (False, 0)
        assert url == "https://reelview.app/posts/p2"
        assert clipboard.text == url

    @pytest.mark.asyncio
    async def test_reels_share_url(self, backend):
        session = make_reels(backend)
        await session.load()

        assert await session.share("v2") == "https://reelview.app/reels/v2"

    @pytest.mark.asyncio
    async def test_like_unknown_item(self, backend, signed_in):
        session = make_reels(backend, identity=signed_in)
        await session.load()

        with pytest.raises(NotFoundError):
            await session.toggle_like("v4")
