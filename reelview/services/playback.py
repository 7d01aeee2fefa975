"""
Per-item media playback controller.

Owns one media element's play/pause, mute and fullscreen state and
publishes it as a four-phase state machine:

    INACTIVE -> ACTIVE_PLAYING | ACTIVE_PAUSED   on activation (autoplay)
    ACTIVE_PLAYING <-> ACTIVE_PAUSED             on user tap
    ACTIVE_* -> ACTIVE_FULLSCREEN                on landscape or user control
    ACTIVE_FULLSCREEN -> ACTIVE_*                on portrait or user exit
    any -> INACTIVE                              on deactivation

A user exit from fullscreen suppresses automatic re-entry until the device
goes portrait and back to landscape. Every host media call is best-effort:
a MediaApiFailure is logged and the controller settles in the
non-enhanced state.
"""
import logging
from typing import Awaitable, Callable, Dict, Optional, Tuple

from reelview.core.exceptions import MediaApiFailure
from reelview.models.interfaces import FullscreenHost, MediaElement
from reelview.models.schemas import (
    FullscreenSource,
    FullscreenTarget,
    Orientation,
    PlaybackEvent,
    PlaybackPhase,
    PlaybackState,
)

logger = logging.getLogger(__name__)

# Which host event source reports fullscreen entered through each strategy.
_SOURCE_FOR_TARGET = {
    FullscreenTarget.CONTAINER: FullscreenSource.STANDARD,
    FullscreenTarget.ELEMENT: FullscreenSource.STANDARD,
    FullscreenTarget.VENDOR: FullscreenSource.VENDOR,
}


class MediaPlaybackController:
    """Playback state machine for one feed item."""

    def __init__(
        self,
        item_id: str,
        element: MediaElement,
        host: FullscreenHost,
        orientation: Orientation = Orientation.PORTRAIT,
        muted: bool = False,
    ) -> None:
        self._item_id = item_id
        self._element = element
        self._host = host

        self._phase = PlaybackPhase.INACTIVE
        self._active = False
        self._is_playing = False
        self._is_muted = muted
        self._orientation = orientation
        self._user_exited_fullscreen = False
        self._fullscreen_signals: Dict[FullscreenSource, bool] = {
            source: False for source in FullscreenSource
        }
        self._fullscreen_target: Optional[FullscreenTarget] = None
        self._disposed = False

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def item_id(self) -> str:
        return self._item_id

    @property
    def phase(self) -> PlaybackPhase:
        return self._phase

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def is_fullscreen(self) -> bool:
        return any(self._fullscreen_signals.values())

    @property
    def user_exited_fullscreen(self) -> bool:
        return self._user_exited_fullscreen

    @property
    def state(self) -> PlaybackState:
        return PlaybackState(
            item_id=self._item_id,
            phase=self._phase,
            is_playing=self._is_playing,
            is_muted=self._is_muted,
            is_fullscreen=self.is_fullscreen,
            is_landscape=self._orientation == Orientation.LANDSCAPE,
            user_exited_fullscreen=self._user_exited_fullscreen,
        )

    def _settle(self) -> None:
        """Derive the published phase from the underlying flags."""
        if not self._active:
            phase = PlaybackPhase.INACTIVE
        elif self.is_fullscreen:
            phase = PlaybackPhase.ACTIVE_FULLSCREEN
        elif self._is_playing:
            phase = PlaybackPhase.ACTIVE_PLAYING
        else:
            phase = PlaybackPhase.ACTIVE_PAUSED

        if phase != self._phase:
            logger.debug(
                f"Playback {self._item_id}: {self._phase.value} -> {phase.value}",
                extra={"item_id": self._item_id},
            )
            self._phase = phase

    # ------------------------------------------------------------------
    # Activation
    # ------------------------------------------------------------------

    async def activate(self) -> None:
        """Become the active item: autoplay, then fullscreen if landscape."""
        if self._disposed or self._active:
            return
        self._active = True
        await self._play()
        if self._orientation == Orientation.LANDSCAPE and not self._user_exited_fullscreen:
            await self._enter_fullscreen()
        self._settle()

    async def deactivate(self) -> None:
        """Lose the active index: leave fullscreen and pause unconditionally."""
        if self._disposed or not self._active:
            return
        if self.is_fullscreen:
            await self._leave_fullscreen()
        await self._pause()
        self._active = False
        self._settle()

    def dispose(self) -> None:
        """Item unmounted; the controller ignores everything afterwards."""
        self._disposed = True
        self._active = False
        self._is_playing = False
        self._settle()

    # ------------------------------------------------------------------
    # User controls
    # ------------------------------------------------------------------

    async def toggle_play(self) -> None:
        """Tap on the media surface."""
        if self._disposed or not self._active:
            logger.debug(f"Ignoring tap on inactive item {self._item_id}")
            return
        if self._is_playing:
            await self._pause()
        else:
            await self._play()
        self._settle()

    async def toggle_mute(self) -> None:
        if self._disposed:
            return
        muted = not self._is_muted
        try:
            await self._element.set_muted(muted)
        except MediaApiFailure as e:
            logger.warning(f"Mute toggle failed for {self._item_id}: {e.message}")
            return
        self._is_muted = muted

    async def enter_fullscreen(self) -> bool:
        """Fullscreen via the user control. Returns whether it took effect."""
        if self._disposed or not self._active:
            return False
        if self.is_fullscreen:
            return True
        entered = await self._enter_fullscreen()
        self._settle()
        return entered

    async def exit_fullscreen(self) -> None:
        """Fullscreen exit via the user control; suppresses auto re-entry."""
        if self._disposed or not self.is_fullscreen:
            return
        self._user_exited_fullscreen = True
        await self._leave_fullscreen()
        self._settle()

    # ------------------------------------------------------------------
    # Host events
    # ------------------------------------------------------------------

    async def on_orientation_change(self, orientation: Orientation) -> None:
        """
        Apply a device orientation report.

        Only transitions count: repeated landscape reports neither reset the
        user-exit flag nor retry fullscreen.
        """
        if self._disposed:
            return
        previous = self._orientation
        self._orientation = orientation
        if orientation == previous:
            return

        if orientation == Orientation.LANDSCAPE:
            self._user_exited_fullscreen = False
            if self._active and not self.is_fullscreen:
                await self._enter_fullscreen()
        elif self.is_fullscreen:
            # Forced exit; not a user decision.
            await self._leave_fullscreen()
        self._settle()

    def on_fullscreen_change(self, source: FullscreenSource, is_fullscreen: bool) -> None:
        """
        Reconcile a fullscreen-change event from one host source.

        Echoes of our own requests are no-ops. A drop out of fullscreen we
        did not ask for (native done button, Escape) counts as a user exit.
        """
        if self._disposed or (is_fullscreen and not self._active):
            return
        was_fullscreen = self.is_fullscreen
        self._fullscreen_signals[source] = is_fullscreen

        if was_fullscreen and not self.is_fullscreen:
            self._fullscreen_target = None
            if self._active:
                self._user_exited_fullscreen = True
                logger.info(f"Host left fullscreen for {self._item_id}")
        self._settle()

    async def on_playback_event(self, event: PlaybackEvent) -> None:
        """Reconcile an asynchronous playback outcome reported by the host."""
        if self._disposed:
            return
        if event == PlaybackEvent.PLAY_REJECTED:
            logger.warning(f"Host rejected playback for {self._item_id}")
            self._is_playing = False
        elif event == PlaybackEvent.PAUSED:
            self._is_playing = False
        elif self._active:
            self._is_playing = True
        else:
            # Only the active item may play.
            await self._pause()
        self._settle()

    # ------------------------------------------------------------------
    # Host calls
    # ------------------------------------------------------------------

    async def _play(self) -> None:
        try:
            await self._element.play()
        except MediaApiFailure as e:
            logger.warning(
                f"Playback blocked for {self._item_id}: {e.message}",
                extra={"item_id": self._item_id},
            )
            self._is_playing = False
            return
        self._is_playing = True

    async def _pause(self) -> None:
        try:
            await self._element.pause()
        except MediaApiFailure as e:
            logger.warning(f"Pause failed for {self._item_id}: {e.message}")
        self._is_playing = False

    def _fullscreen_strategies(self) -> Tuple[Tuple[FullscreenTarget, Callable[[], Awaitable[None]]], ...]:
        return (
            (FullscreenTarget.CONTAINER, lambda: self._host.request_fullscreen(self._item_id)),
            (FullscreenTarget.ELEMENT, self._element.request_fullscreen),
            (FullscreenTarget.VENDOR, self._element.enter_vendor_fullscreen),
        )

    async def _enter_fullscreen(self) -> bool:
        """Try each strategy in order; the first that succeeds wins."""
        for target, attempt in self._fullscreen_strategies():
            try:
                await attempt()
            except MediaApiFailure as e:
                logger.debug(f"Fullscreen via {target.value} failed for {self._item_id}: {e.message}")
                continue
            self._fullscreen_target = target
            self._fullscreen_signals[_SOURCE_FOR_TARGET[target]] = True
            return True

        logger.warning(
            f"Fullscreen unavailable for {self._item_id}",
            extra={"item_id": self._item_id},
        )
        return False

    async def _leave_fullscreen(self) -> None:
        target = self._fullscreen_target
        if target is None:
            # Entered by the host itself; exit through whichever source reported it.
            vendor_only = (
                self._fullscreen_signals[FullscreenSource.VENDOR]
                and not self._fullscreen_signals[FullscreenSource.STANDARD]
            )
            target = FullscreenTarget.VENDOR if vendor_only else FullscreenTarget.CONTAINER

        self._fullscreen_target = None
        for source in self._fullscreen_signals:
            self._fullscreen_signals[source] = False

        try:
            if target == FullscreenTarget.VENDOR:
                await self._element.exit_vendor_fullscreen()
            else:
                await self._host.exit_fullscreen()
        except MediaApiFailure as e:
            logger.warning(f"Fullscreen exit failed for {self._item_id}: {e.message}")
