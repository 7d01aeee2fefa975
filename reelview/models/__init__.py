"""Models package - domain entities and interfaces."""
from .interfaces import (
    AuthGateway,
    BackendClient,
    Clipboard,
    FullscreenHost,
    IdentityProvider,
    MediaElement,
    RowQuery,
    StaticIdentityProvider,
)
from .schemas import (
    AuthorSummary,
    Comment,
    EngagementState,
    FullscreenSource,
    FullscreenTarget,
    HostCapabilities,
    Identity,
    MediaCommand,
    Orientation,
    PlaybackEvent,
    PlaybackPhase,
    PlaybackState,
    PostItem,
    SessionStatus,
    VideoItem,
)

__all__ = [
    # Interfaces
    "AuthGateway",
    "BackendClient",
    "Clipboard",
    "FullscreenHost",
    "IdentityProvider",
    "MediaElement",
    "RowQuery",
    "StaticIdentityProvider",
    # Schemas
    "AuthorSummary",
    "Comment",
    "EngagementState",
    "FullscreenSource",
    "FullscreenTarget",
    "HostCapabilities",
    "Identity",
    "MediaCommand",
    "Orientation",
    "PlaybackEvent",
    "PlaybackPhase",
    "PlaybackState",
    "PostItem",
    "SessionStatus",
    "VideoItem",
]
