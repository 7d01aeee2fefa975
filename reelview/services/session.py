"""
Feed sessions - per-screen orchestration.
A session owns one feed's items, engagement overlay and fetch scope; the
reels session adds active-item tracking and one playback controller per
item.
"""
import logging
from typing import Callable, Dict, Generic, List, Optional

from reelview.core.exceptions import (
    LoadError,
    MediaApiFailure,
    NotFoundError,
    RemoteReadFailure,
)
from reelview.core.fetch_scope import FetchScope
from reelview.media.commands import CommandBuffer
from reelview.models.interfaces import Clipboard, FullscreenHost, MediaElement
from reelview.models.schemas import (
    Comment,
    EngagementState,
    FullscreenSource,
    MediaCommand,
    Orientation,
    PlaybackEvent,
    PlaybackState,
    SessionStatus,
    VideoItem,
)
from reelview.services.engagement import EngagementStateStore
from reelview.services.feed import FeedDataLoader, ItemT
from reelview.services.playback import MediaPlaybackController
from reelview.services.tracker import ActiveItemTracker

logger = logging.getLogger(__name__)


class FeedSession(Generic[ItemT]):
    """
    One feed screen's state for its lifetime.

    Loads replace the item list wholesale. Responses that arrive after a
    newer load started, or after the session closed, are dropped.
    """

    kind = "posts"

    def __init__(
        self,
        session_id: str,
        loader: FeedDataLoader[ItemT],
        engagement: EngagementStateStore,
        clipboard: Optional[Clipboard] = None,
        share_base_url: str = "",
    ) -> None:
        self.session_id = session_id
        self._loader = loader
        self._engagement = engagement
        self._clipboard = clipboard
        self._share_base_url = share_base_url.rstrip("/")

        self._items: List[ItemT] = []
        self._status = SessionStatus.LOADING
        self._error: Optional[str] = None
        self._scope = FetchScope(f"{self.kind}:{session_id}")

    @property
    def items(self) -> List[ItemT]:
        return list(self._items)

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def engagement(self) -> EngagementStateStore:
        return self._engagement

    def item(self, item_id: str) -> ItemT:
        for item in self._items:
            if item.id == item_id:
                return item
        raise NotFoundError("Item", item_id)

    def engagement_for(self, item_id: str) -> EngagementState:
        return self._engagement.get(item_id)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(self) -> List[ItemT]:
        """
        (Re)load the first page and reconcile engagement.

        A failed load leaves the session empty with status ERROR rather
        than raising.
        """
        if self._scope.closed:
            return []

        with self._scope.acquire() as token:
            self._status = SessionStatus.LOADING
            try:
                items = await self._loader.load()
            except LoadError as e:
                if token.is_valid:
                    await self._replace_items([])
                    self._engagement.reset()
                    self._status = SessionStatus.ERROR
                    self._error = e.message
                logger.error(
                    f"Session load failed: {e.message}",
                    extra={"session_id": self.session_id},
                )
                return []

            if not token.is_valid:
                return self.items

            await self._replace_items(items)
            self._status = SessionStatus.READY
            self._error = None

            try:
                await self._engagement.load_for_items([item.id for item in items], token)
            except RemoteReadFailure as e:
                if token.is_valid:
                    self._engagement.reset()
                logger.warning(
                    f"Engagement unavailable, showing defaults: {e.message}",
                    extra={"session_id": self.session_id},
                )

        return self.items

    async def _replace_items(self, items: List[ItemT]) -> None:
        self._items = list(items)

    # ------------------------------------------------------------------
    # Engagement
    # ------------------------------------------------------------------

    async def toggle_like(self, item_id: str) -> EngagementState:
        self.item(item_id)
        return await self._engagement.toggle_like(item_id)

    async def add_comment(self, item_id: str, content: str) -> Comment:
        self.item(item_id)
        return await self._engagement.add_comment(item_id, content)

    async def list_comments(self, item_id: str) -> List[Comment]:
        self.item(item_id)
        return await self._engagement.list_comments(item_id)

    # ------------------------------------------------------------------
    # Share-by-link
    # ------------------------------------------------------------------

    def share_url(self, item_id: str) -> str:
        return f"{self._share_base_url}/{self.kind}/{item_id}"

    async def share(self, item_id: str) -> str:
        """Build the item's link and copy it to the clipboard when available."""
        self.item(item_id)
        url = self.share_url(item_id)
        if self._clipboard is not None:
            try:
                await self._clipboard.write_text(url)
            except MediaApiFailure as e:
                logger.warning(f"Clipboard write failed: {e.message}")
        return url

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Invalidate in-flight fetches; late responses are discarded."""
        self._scope.invalidate()
        self._status = SessionStatus.CLOSED
        logger.debug("Session closed", extra={"session_id": self.session_id})


class ReelsSession(FeedSession[VideoItem]):
    """
    Reels screen: snap-scroll video feed with one playing item.

    At most one playback controller is active at a time; whenever the feed
    is non-empty exactly one is.
    """

    kind = "reels"

    def __init__(
        self,
        session_id: str,
        loader: FeedDataLoader[VideoItem],
        engagement: EngagementStateStore,
        element_factory: Callable[[str], MediaElement],
        fullscreen_host: FullscreenHost,
        orientation: Orientation = Orientation.PORTRAIT,
        muted: bool = False,
        clipboard: Optional[Clipboard] = None,
        share_base_url: str = "",
        command_buffer: Optional[CommandBuffer] = None,
    ) -> None:
        super().__init__(session_id, loader, engagement, clipboard, share_base_url)
        self._command_buffer = command_buffer
        self._element_factory = element_factory
        self._fullscreen_host = fullscreen_host
        self._orientation = orientation
        self._muted = muted

        self._tracker = ActiveItemTracker()
        self._controllers: Dict[str, MediaPlaybackController] = {}
        self._active_item_id: Optional[str] = None

    @property
    def orientation(self) -> Orientation:
        return self._orientation

    @property
    def active_index(self) -> int:
        return self._clamp(self._tracker.active_index)

    @property
    def active_item_id(self) -> Optional[str]:
        return self._active_item_id

    def controller(self, item_id: str) -> MediaPlaybackController:
        controller = self._controllers.get(item_id)
        if controller is None:
            raise NotFoundError("Item", item_id)
        return controller

    def playback_state(self, item_id: str) -> PlaybackState:
        return self.controller(item_id).state

    def drain_commands(self) -> List[MediaCommand]:
        """Media calls queued for the host since the last drain."""
        if self._command_buffer is None:
            return []
        return self._command_buffer.drain()

    def _clamp(self, index: int) -> int:
        if not self._items:
            return 0
        return max(0, min(index, len(self._items) - 1))

    async def _replace_items(self, items: List[VideoItem]) -> None:
        for controller in self._controllers.values():
            controller.dispose()

        self._items = list(items)
        self._controllers = {
            item.id: MediaPlaybackController(
                item.id,
                self._element_factory(item.id),
                self._fullscreen_host,
                orientation=self._orientation,
                muted=self._muted,
            )
            for item in items
        }
        self._active_item_id = None
        self._tracker.reset(0)
        if self._items:
            await self._activate(0)

    async def _activate(self, index: int) -> None:
        target = self._items[self._clamp(index)].id
        if target == self._active_item_id:
            return
        if self._active_item_id is not None:
            await self._controllers[self._active_item_id].deactivate()
        self._active_item_id = target
        await self._controllers[target].activate()

    # ------------------------------------------------------------------
    # Host events
    # ------------------------------------------------------------------

    async def on_scroll(self, offset: float, item_height: float) -> int:
        """Apply a scroll observation; returns the active index."""
        if self._tracker.update(offset, item_height) and self._items:
            await self._activate(self._tracker.active_index)
        return self.active_index

    async def on_orientation_change(self, orientation: Orientation) -> None:
        # Every controller tracks the edge so later activations see it.
        self._orientation = orientation
        for controller in list(self._controllers.values()):
            await controller.on_orientation_change(orientation)

    def on_fullscreen_event(self, item_id: str, source: FullscreenSource, is_fullscreen: bool) -> None:
        self.controller(item_id).on_fullscreen_change(source, is_fullscreen)

    async def on_playback_event(self, item_id: str, event: PlaybackEvent) -> None:
        await self.controller(item_id).on_playback_event(event)

    # ------------------------------------------------------------------
    # User controls
    # ------------------------------------------------------------------

    async def toggle_play(self, item_id: str) -> PlaybackState:
        controller = self.controller(item_id)
        await controller.toggle_play()
        return controller.state

    async def toggle_mute(self, item_id: str) -> PlaybackState:
        controller = self.controller(item_id)
        await controller.toggle_mute()
        return controller.state

    async def enter_fullscreen(self, item_id: str) -> PlaybackState:
        controller = self.controller(item_id)
        await controller.enter_fullscreen()
        return controller.state

    async def exit_fullscreen(self, item_id: str) -> PlaybackState:
        controller = self.controller(item_id)
        await controller.exit_fullscreen()
        return controller.state

    def close(self) -> None:
        super().close()
        for controller in self._controllers.values():
            controller.dispose()
        self._active_item_id = None
