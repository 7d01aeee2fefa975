"""Services package - screen-level business logic."""
from .engagement import EngagementStateStore
from .feed import FeedDataLoader
from .follow import FollowService
from .playback import MediaPlaybackController
from .registry import SessionRegistry
from .session import FeedSession, ReelsSession
from .tracker import ActiveItemTracker, active_index_for

__all__ = [
    "ActiveItemTracker",
    "EngagementStateStore",
    "FeedDataLoader",
    "FeedSession",
    "FollowService",
    "MediaPlaybackController",
    "ReelsSession",
    "SessionRegistry",
    "active_index_for",
]
