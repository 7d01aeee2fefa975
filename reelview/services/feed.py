"""
Feed data loader.
Fetches one page of feed items, newest first, joined with author display
fields. This is the boundary to the backend service for feed screens.
"""
import logging
from datetime import datetime
from typing import Dict, Generic, List, Optional, Sequence, Type, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from reelview.core.circuit_breaker import CircuitBreaker
from reelview.core.exceptions import AppException, LoadError
from reelview.models.interfaces import BackendClient, RowQuery
from reelview.models.schemas import AuthorSummary, PostItem, VideoItem

logger = logging.getLogger(__name__)

ItemT = TypeVar("ItemT", VideoItem, PostItem)

AUTHOR_COLUMNS = "id, username, display_name, avatar_url"


class FeedDataLoader(Generic[ItemT]):
    """
    Loads fixed-size pages of one feed collection.

    Usage:
        reels = FeedDataLoader(backend, VideoItem, table="videos")
        items = await reels.load()
    """

    def __init__(
        self,
        backend: BackendClient,
        model: Type[ItemT],
        table: str,
        page_size: int = 20,
        circuit_breaker: Optional[CircuitBreaker] = None,
    ) -> None:
        self._backend = backend
        self._model = model
        self._table = table
        self._page_size = page_size
        self._circuit_breaker = circuit_breaker or CircuitBreaker(
            name=f"{table}_reads",
            failure_threshold=5,
            recovery_timeout_sec=30,
        )

    @property
    def page_size(self) -> int:
        return self._page_size

    async def load(self, cursor: Optional[Union[str, datetime]] = None) -> List[ItemT]:
        """
        Load one page of items.

        Args:
            cursor: ``created_at`` of the last item already shown; only
                older items are returned. None loads the first page.

        Returns:
            Items ordered newest first, at most ``page_size`` long

        Raises:
            LoadError: on transport/service failure
        """
        query = RowQuery(
            table=self._table,
            order_by="created_at",
            descending=True,
            limit=self._page_size,
        )
        if cursor is not None:
            query.before["created_at"] = cursor.isoformat() if isinstance(cursor, datetime) else cursor

        try:
            rows, authors = await self._circuit_breaker.call(lambda: self._fetch_page(query))
        except AppException as e:
            logger.error(f"Feed load failed: table={self._table}, error={e.message}")
            raise LoadError(self._table, e.message) from e
        except Exception as e:
            logger.error(f"Feed load failed: table={self._table}, error={str(e)}")
            raise LoadError(self._table, str(e)) from e

        items: List[ItemT] = []
        for row in rows:
            try:
                items.append(self._model.model_validate(
                    {**row, "author": authors.get(row.get("user_id"))}
                ))
            except PydanticValidationError as e:
                logger.warning(f"Skipping malformed {self._table} row {row.get('id')}: {e}")

        logger.info(f"Feed page loaded: table={self._table}, items={len(items)}")
        return items

    @staticmethod
    def next_cursor(items: Sequence[BaseModel]) -> Optional[str]:
        """Cursor that continues after the last item of a page."""
        if not items:
            return None
        return items[-1].created_at.isoformat()

    async def _fetch_page(self, query: RowQuery):
        rows = await self._backend.fetch(query)
        user_ids = sorted({row["user_id"] for row in rows if row.get("user_id")})
        authors: Dict[str, AuthorSummary] = {}
        if user_ids:
            profiles = await self._backend.fetch(RowQuery(
                table="profiles",
                columns=AUTHOR_COLUMNS,
                within={"id": user_ids},
                order_by=None,
            ))
            for profile in profiles:
                authors[profile["id"]] = AuthorSummary.model_validate(profile)
        return rows, authors
