"""Host media adapters."""
from .commands import BufferedFullscreenHost, BufferedMediaElement, CommandBuffer

__all__ = ["BufferedFullscreenHost", "BufferedMediaElement", "CommandBuffer"]
