"""
Domain models using Pydantic.
All data structures for feeds, engagement, and playback.
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Enumerations
# =============================================================================


class Orientation(str, Enum):
    """Device orientation as reported by the host."""

    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"


class PlaybackPhase(str, Enum):
    """Per-item playback state machine."""

    INACTIVE = "inactive"
    ACTIVE_PLAYING = "active_playing"
    ACTIVE_PAUSED = "active_paused"
    ACTIVE_FULLSCREEN = "active_fullscreen"


class FullscreenSource(str, Enum):
    """Host event source that reported a fullscreen change."""

    STANDARD = "standard"  # document-level fullscreenchange
    VENDOR = "vendor"      # element-level webkit begin/end fullscreen


class FullscreenTarget(str, Enum):
    """Fullscreen entry strategies, in fallback order."""

    CONTAINER = "container"
    ELEMENT = "element"
    VENDOR = "vendor"


class PlaybackEvent(str, Enum):
    """Asynchronous playback outcomes reported by the host."""

    PLAYING = "playing"
    PAUSED = "paused"
    PLAY_REJECTED = "play_rejected"


class SessionStatus(str, Enum):
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"
    CLOSED = "closed"


# =============================================================================
# Domain Models (Internal)
# =============================================================================


class Identity(BaseModel):
    """Authenticated user as reported by the identity provider."""

    id: str
    email: Optional[str] = None


class AuthorSummary(BaseModel):
    """Minimal author display fields joined onto feed items."""

    model_config = ConfigDict(frozen=True)

    id: str
    username: str
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None

    @property
    def label(self) -> str:
        return self.display_name or self.username


class VideoItem(BaseModel):
    """
    A reel in the video feed.
    Immutable once loaded; the feed list is replaced wholesale on refetch.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: Optional[str] = None
    video_url: str = Field(..., description="Playable media reference")
    thumbnail_url: Optional[str] = Field(default=None, description="Poster image")
    user_id: str = Field(..., description="Owning author")
    created_at: datetime
    author: Optional[AuthorSummary] = None


class PostItem(BaseModel):
    """A post in the home feed."""

    model_config = ConfigDict(frozen=True)

    id: str
    content: Optional[str] = None
    media_url: Optional[str] = None
    media_type: Optional[str] = None
    user_id: str
    created_at: datetime
    author: Optional[AuthorSummary] = None

    @property
    def is_video(self) -> bool:
        return bool(self.media_url and self.media_type and self.media_type.startswith("video"))


class EngagementState(BaseModel):
    """Local like/comment state for one item, overlaying the backend."""

    is_liked: bool = False
    count: int = Field(default=0, ge=0, description="Like count")
    comments_count: int = Field(default=0, ge=0)


class PlaybackState(BaseModel):
    """Snapshot of one item's playback controller."""

    item_id: str
    phase: PlaybackPhase = PlaybackPhase.INACTIVE
    is_playing: bool = False
    is_muted: bool = False
    is_fullscreen: bool = False
    is_landscape: bool = False
    user_exited_fullscreen: bool = False


class Comment(BaseModel):
    id: str
    item_id: str
    user_id: str
    content: str
    created_at: datetime


class HostCapabilities(BaseModel):
    """What the host runtime lets the media adapters do."""

    autoplay: bool = True
    container_fullscreen: bool = True
    element_fullscreen: bool = True
    vendor_fullscreen: bool = False


class MediaCommand(BaseModel):
    """One host media call for the shell to execute."""

    item_id: str
    action: str = Field(..., description="play, pause, mute, request_fullscreen, exit_fullscreen")
    target: Optional[FullscreenTarget] = None
    muted: Optional[bool] = None


# =============================================================================
# API Models (External)
# =============================================================================


class SessionCreateRequest(BaseModel):
    orientation: Orientation = Orientation.PORTRAIT
    muted: bool = False
    capabilities: HostCapabilities = Field(default_factory=HostCapabilities)


class ScrollRequest(BaseModel):
    offset: float = Field(..., allow_inf_nan=False, description="Container scrollTop in pixels")
    item_height: float = Field(..., gt=0, allow_inf_nan=False, description="Viewport height per item")


class OrientationRequest(BaseModel):
    orientation: Orientation


class FullscreenEventRequest(BaseModel):
    source: FullscreenSource
    is_fullscreen: bool


class PlaybackEventRequest(BaseModel):
    event: PlaybackEvent


class CommentCreateRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)


class ReelView(BaseModel):
    item: VideoItem
    engagement: EngagementState
    playback: PlaybackState


class PostView(BaseModel):
    item: PostItem
    engagement: EngagementState


class ReelsSessionResponse(BaseModel):
    session_id: str
    status: SessionStatus
    error: Optional[str] = None
    active_index: int = 0
    orientation: Orientation
    items: List[ReelView] = Field(default_factory=list)
    commands: List[MediaCommand] = Field(
        default_factory=list,
        description="Media calls queued since the previous response",
    )


class PostsSessionResponse(BaseModel):
    session_id: str
    status: SessionStatus
    error: Optional[str] = None
    items: List[PostView] = Field(default_factory=list)


class EngagementResponse(BaseModel):
    item_id: str
    engagement: EngagementState


class ShareResponse(BaseModel):
    item_id: str
    url: str


class FollowResponse(BaseModel):
    user_id: str
    is_following: bool
    followers_count: int
    following_count: int


class ErrorResponse(BaseModel):
    """Standard error response format."""

    error: dict = Field(..., description="Error details")
