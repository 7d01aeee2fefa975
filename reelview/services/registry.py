"""
Live session registry.
Sessions expire after an idle TTL; expiry and removal close them.
"""
import asyncio
import logging
import uuid
from typing import Optional, Type, TypeVar, Union

from reelview.core.cache import InMemoryCache
from reelview.core.exceptions import NotFoundError
from reelview.services.session import FeedSession, ReelsSession

logger = logging.getLogger(__name__)

SessionT = TypeVar("SessionT", FeedSession, ReelsSession)

AnySession = Union[FeedSession, ReelsSession]


def _close(session: AnySession) -> None:
    logger.info("Session evicted", extra={"session_id": session.session_id})
    session.close()


async def prune_periodically(registry: "SessionRegistry", interval_seconds: float) -> None:
    """Close expired sessions every ``interval_seconds`` until cancelled."""
    while True:
        await asyncio.sleep(interval_seconds)
        registry.prune()


class SessionRegistry:
    """Keyed store of open feed sessions."""

    def __init__(self, ttl_seconds: Optional[float] = None) -> None:
        self._sessions: InMemoryCache[AnySession] = InMemoryCache(
            default_ttl_seconds=ttl_seconds,
            on_evict=_close,
        )

    @staticmethod
    def new_id() -> str:
        return uuid.uuid4().hex

    def add(self, session: AnySession) -> None:
        """Register a session, closing any that expired while untouched."""
        self.prune()
        self._sessions.set(session.session_id, session)

    def get(self, session_id: str, kind: Type[SessionT]) -> SessionT:
        """
        Look up an open session of the given class.

        Raises:
            NotFoundError: if unknown, expired, or of another kind
        """
        session = self._sessions.get(session_id)
        if session is None or type(session) is not kind:
            raise NotFoundError("Session", session_id)
        return session

    def remove(self, session_id: str) -> bool:
        """Close and forget a session, returns True if it existed."""
        return self._sessions.delete(session_id)

    def prune(self) -> int:
        """Close expired sessions, returns how many were removed."""
        removed = self._sessions.cleanup_expired()
        if removed:
            logger.info(f"Pruned {removed} expired sessions")
        return removed

    def close_all(self) -> None:
        self._sessions.clear()

    def __len__(self) -> int:
        return self._sessions.size()
