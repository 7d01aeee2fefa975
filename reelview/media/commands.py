"""
Command-buffer media adapters.

The service never touches a real video element: playback controllers call
these adapters, which record MediaCommand entries for the shell to drain
and execute. Calls the host cannot honour fail immediately with
MediaApiFailure so the controller can fall back; rejections the host only
discovers later come back as playback / fullscreen events.
"""
from typing import List

from reelview.core.exceptions import MediaApiFailure
from reelview.models.schemas import FullscreenTarget, HostCapabilities, MediaCommand


class CommandBuffer:
    """Ordered queue of media commands for one session."""

    def __init__(self, capabilities: HostCapabilities) -> None:
        self.capabilities = capabilities
        self._commands: List[MediaCommand] = []

    def push(self, command: MediaCommand) -> None:
        self._commands.append(command)

    def drain(self) -> List[MediaCommand]:
        commands, self._commands = self._commands, []
        return commands


class BufferedMediaElement:
    """MediaElement that queues commands for one item."""

    def __init__(self, item_id: str, buffer: CommandBuffer) -> None:
        self._item_id = item_id
        self._buffer = buffer

    async def play(self) -> None:
        if not self._buffer.capabilities.autoplay:
            raise MediaApiFailure("play", "autoplay blocked by host")
        self._buffer.push(MediaCommand(item_id=self._item_id, action="play"))

    async def pause(self) -> None:
        self._buffer.push(MediaCommand(item_id=self._item_id, action="pause"))

    async def set_muted(self, muted: bool) -> None:
        self._buffer.push(MediaCommand(item_id=self._item_id, action="mute", muted=muted))

    async def request_fullscreen(self) -> None:
        if not self._buffer.capabilities.element_fullscreen:
            raise MediaApiFailure("request_fullscreen", "element fullscreen unsupported")
        self._buffer.push(MediaCommand(
            item_id=self._item_id,
            action="request_fullscreen",
            target=FullscreenTarget.ELEMENT,
        ))

    async def enter_vendor_fullscreen(self) -> None:
        if not self._buffer.capabilities.vendor_fullscreen:
            raise MediaApiFailure("enter_vendor_fullscreen", "vendor fullscreen unsupported")
        self._buffer.push(MediaCommand(
            item_id=self._item_id,
            action="request_fullscreen",
            target=FullscreenTarget.VENDOR,
        ))

    async def exit_vendor_fullscreen(self) -> None:
        self._buffer.push(MediaCommand(
            item_id=self._item_id,
            action="exit_fullscreen",
            target=FullscreenTarget.VENDOR,
        ))


class BufferedFullscreenHost:
    """FullscreenHost that queues document-level fullscreen commands."""

    def __init__(self, buffer: CommandBuffer) -> None:
        self._buffer = buffer
        self._item_id = ""

    async def request_fullscreen(self, item_id: str) -> None:
        if not self._buffer.capabilities.container_fullscreen:
            raise MediaApiFailure("request_fullscreen", "container fullscreen unsupported")
        self._item_id = item_id
        self._buffer.push(MediaCommand(
            item_id=item_id,
            action="request_fullscreen",
            target=FullscreenTarget.CONTAINER,
        ))

    async def exit_fullscreen(self) -> None:
        self._buffer.push(MediaCommand(
            item_id=self._item_id,
            action="exit_fullscreen",
            target=FullscreenTarget.CONTAINER,
        ))
