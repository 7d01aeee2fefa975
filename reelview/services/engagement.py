"""
Engagement state store.

One optimistic {is_liked, count, comments_count} overlay per feed session,
shared by every screen showing the same items. User actions mutate it
before the backend answers; a full load overwrites it with the backend's
view.
"""
import asyncio
import logging
from typing import Dict, List, Optional, Sequence, Set

from reelview.core.exceptions import (
    RemoteWriteFailure,
    UnauthenticatedError,
    ValidationError,
)
from reelview.core.fetch_scope import FetchToken
from reelview.models.interfaces import BackendClient, IdentityProvider, RowQuery
from reelview.models.schemas import Comment, EngagementState, Identity

logger = logging.getLogger(__name__)


class EngagementStateStore:
    """
    Optimistic like/comment state keyed by item id.

    Args:
        backend: Row-level backend client
        identity: Identity context of the owning session
        item_column: Foreign-key column naming the item in likes/comments
            rows ("video_id" for reels, "post_id" for posts)
        rollback_on_failure: Revert optimistic changes when the backend
            rejects the write
    """

    def __init__(
        self,
        backend: BackendClient,
        identity: IdentityProvider,
        item_column: str = "video_id",
        rollback_on_failure: bool = True,
        likes_table: str = "likes",
        comments_table: str = "comments",
    ) -> None:
        self._backend = backend
        self._identity = identity
        self._item_column = item_column
        self._rollback_on_failure = rollback_on_failure
        self._likes_table = likes_table
        self._comments_table = comments_table

        self._states: Dict[str, EngagementState] = {}
        self._pending_likes: Set[str] = set()
        # Bumped whenever the map is replaced so late rollbacks can't
        # clobber reconciled state.
        self._generation = 0

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, item_id: str) -> EngagementState:
        state = self._states.get(item_id)
        return state.model_copy() if state is not None else EngagementState()

    def reset(self) -> None:
        self._states = {}
        self._generation += 1

    async def load_for_items(
        self,
        item_ids: Sequence[str],
        token: Optional[FetchToken] = None,
    ) -> Dict[str, EngagementState]:
        """
        Fetch authoritative engagement for ``item_ids`` and replace local state.

        Nothing is written when ``token`` has gone stale by the time the
        backend answers.

        Raises:
            RemoteReadFailure: if the backend read fails (state unchanged)
        """
        ids = list(dict.fromkeys(item_ids))
        identity = await self._identity.get_current_identity()

        states = {item_id: EngagementState() for item_id in ids}
        if ids:
            # Counts are computed by the backend; row fetches are capped.
            like_counts = await self._count_all(self._likes_table, ids)
            comment_counts = await self._count_all(self._comments_table, ids)
            for item_id, likes, comments in zip(ids, like_counts, comment_counts):
                states[item_id].count = likes
                states[item_id].comments_count = comments

            if identity is not None:
                own_likes = await self._backend.fetch(RowQuery(
                    table=self._likes_table,
                    columns=self._item_column,
                    match={"user_id": identity.id},
                    within={self._item_column: ids},
                    order_by=None,
                ))
                for row in own_likes:
                    state = states.get(row.get(self._item_column))
                    if state is not None:
                        state.is_liked = True

        if token is not None and not token.is_valid:
            return states

        self._states = states
        self._generation += 1
        logger.debug(f"Engagement reconciled for {len(ids)} items")
        return {item_id: state.model_copy() for item_id, state in states.items()}

    # ------------------------------------------------------------------
    # Likes
    # ------------------------------------------------------------------

    async def toggle_like(self, item_id: str) -> EngagementState:
        """
        Flip the like on an item, optimistically.

        The local state changes before the backend is called. While a
        toggle for the same item is still in flight further toggles are
        ignored.

        Raises:
            UnauthenticatedError: if there is no current identity
            RemoteWriteFailure: if the backend rejects the write
        """
        identity = await self._require_identity("like posts")

        if item_id in self._pending_likes:
            logger.debug(f"Like toggle already in flight for {item_id}")
            return self.get(item_id)

        previous = self.get(item_id)
        if previous.is_liked:
            if previous.count == 0:
                logger.error(f"Liked item {item_id} has a zero like count; clamping")
            optimistic = previous.model_copy(
                update={"is_liked": False, "count": max(0, previous.count - 1)}
            )
        else:
            optimistic = previous.model_copy(update={"is_liked": True, "count": previous.count + 1})

        self._states[item_id] = optimistic
        self._pending_likes.add(item_id)
        generation = self._generation
        match = {self._item_column: item_id, "user_id": identity.id}
        try:
            if optimistic.is_liked:
                await self._backend.insert(self._likes_table, match)
            else:
                await self._backend.delete(self._likes_table, match)
        except Exception as e:
            if generation == self._generation:
                self._revert_like(item_id, previous)
            if isinstance(e, RemoteWriteFailure):
                raise
            operation = "insert" if optimistic.is_liked else "delete"
            raise RemoteWriteFailure(self._likes_table, operation, str(e)) from e
        finally:
            self._pending_likes.discard(item_id)

        return self.get(item_id)

    def _revert_like(self, item_id: str, previous: EngagementState) -> None:
        if not self._rollback_on_failure:
            logger.warning(
                f"Like write failed for {item_id}; local state left diverged from backend",
                extra={"item_id": item_id},
            )
            return
        current = self.get(item_id)
        self._states[item_id] = current.model_copy(
            update={"is_liked": previous.is_liked, "count": previous.count}
        )
        logger.info(f"Like on {item_id} rolled back after failed write")

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    async def add_comment(self, item_id: str, content: str) -> Comment:
        """
        Post a comment and bump the local comment count.

        Raises:
            UnauthenticatedError: if there is no current identity
            ValidationError: if the comment is blank
            RemoteWriteFailure: if the backend rejects the write
        """
        identity = await self._require_identity("comment")
        text = content.strip()
        if not text:
            raise ValidationError("Comment cannot be empty", {"item_id": item_id})

        current = self.get(item_id)
        self._states[item_id] = current.model_copy(
            update={"comments_count": current.comments_count + 1}
        )
        generation = self._generation
        try:
            row = await self._backend.insert(self._comments_table, {
                self._item_column: item_id,
                "user_id": identity.id,
                "content": text,
            })
        except Exception as e:
            if generation == self._generation and self._rollback_on_failure:
                latest = self.get(item_id)
                self._states[item_id] = latest.model_copy(
                    update={"comments_count": max(0, latest.comments_count - 1)}
                )
            if isinstance(e, RemoteWriteFailure):
                raise
            raise RemoteWriteFailure(self._comments_table, "insert", str(e)) from e

        return self._comment_from_row(row)

    async def list_comments(self, item_id: str) -> List[Comment]:
        """Comments on an item, oldest first."""
        rows = await self._backend.fetch(RowQuery(
            table=self._comments_table,
            match={self._item_column: item_id},
            order_by="created_at",
            descending=False,
        ))
        return [self._comment_from_row(row) for row in rows]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _count_all(self, table: str, item_ids: List[str]) -> List[int]:
        """Per-item row counts, queried concurrently."""
        results = await asyncio.gather(
            *(
                self._backend.count(RowQuery(table=table, match={self._item_column: item_id}))
                for item_id in item_ids
            ),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return list(results)

    async def _require_identity(self, action: str) -> Identity:
        identity = await self._identity.get_current_identity()
        if identity is None:
            raise UnauthenticatedError(action)
        return identity

    def _comment_from_row(self, row: dict) -> Comment:
        return Comment(
            id=row["id"],
            item_id=row[self._item_column],
            user_id=row["user_id"],
            content=row["content"],
            created_at=row["created_at"],
        )
