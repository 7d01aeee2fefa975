"""
Follow graph service.
Reads and toggles rows in the ``followers`` collection for the current
identity.
"""
import logging
from typing import Dict

from reelview.core.exceptions import RemoteWriteFailure, UnauthenticatedError, ValidationError
from reelview.models.interfaces import BackendClient, IdentityProvider, RowQuery

logger = logging.getLogger(__name__)

FOLLOWERS_TABLE = "followers"


class FollowService:
    """Follow/unfollow on behalf of one identity context."""

    def __init__(self, backend: BackendClient, identity: IdentityProvider) -> None:
        self._backend = backend
        self._identity = identity

    async def is_following(self, target_id: str) -> bool:
        """False when signed out."""
        identity = await self._identity.get_current_identity()
        if identity is None:
            return False
        rows = await self._backend.fetch(RowQuery(
            table=FOLLOWERS_TABLE,
            columns="id",
            match={"follower_id": identity.id, "following_id": target_id},
            order_by=None,
            limit=1,
        ))
        return bool(rows)

    async def toggle_follow(self, target_id: str) -> bool:
        """
        Follow or unfollow ``target_id``.

        Returns:
            Whether the current identity follows the target afterwards

        Raises:
            UnauthenticatedError: if signed out
            ValidationError: on an attempt to follow yourself
            RemoteWriteFailure: if the backend rejects the write
        """
        identity = await self._identity.get_current_identity()
        if identity is None:
            raise UnauthenticatedError("follow users")
        if identity.id == target_id:
            raise ValidationError("You can't follow yourself", {"user_id": target_id})

        edge = {"follower_id": identity.id, "following_id": target_id}
        following = await self.is_following(target_id)
        try:
            if following:
                await self._backend.delete(FOLLOWERS_TABLE, edge)
            else:
                await self._backend.insert(FOLLOWERS_TABLE, edge)
        except RemoteWriteFailure:
            logger.error(f"Follow toggle failed: target={target_id}")
            raise

        logger.info(f"{'Unfollowed' if following else 'Followed'} {target_id}", extra={"user_id": identity.id})
        return not following

    async def counts(self, user_id: str) -> Dict[str, int]:
        """Follower and following counts for a profile."""
        followers = await self._backend.count(RowQuery(
            table=FOLLOWERS_TABLE,
            match={"following_id": user_id},
        ))
        following = await self._backend.count(RowQuery(
            table=FOLLOWERS_TABLE,
            match={"follower_id": user_id},
        ))
        return {"followers": followers, "following": following}
