"""
In-memory backend implementations.
Used for prototyping and testing.
Production replaces these with the Supabase implementations.
"""
import asyncio
import copy
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Set

from reelview.core.exceptions import RemoteReadFailure, RemoteWriteFailure
from reelview.models.interfaces import RowQuery
from reelview.models.schemas import Identity

COLLECTIONS = (
    "profiles",
    "videos",
    "posts",
    "likes",
    "comments",
    "followers",
)


def _ordering_key(value: Any) -> Any:
    """Compare ISO timestamps as datetimes, everything else as-is."""
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
    return value


class InMemoryBackend:
    """
    In-memory implementation of BackendClient.
    Simulates the hosted backend's row-level collections.

    ``read_failures`` / ``write_failures`` hold table names whose reads or
    writes should fail, and ``latency`` delays every call, so screens can
    be exercised against a misbehaving service.
    """

    def __init__(self, seed: bool = True, latency: float = 0.0) -> None:
        self._tables: Dict[str, List[Dict[str, Any]]] = {name: [] for name in COLLECTIONS}
        self.latency = latency
        self.read_failures: Set[str] = set()
        self.write_failures: Set[str] = set()
        if seed:
            self._initialize_mock_data()

    def _initialize_mock_data(self) -> None:
        """Load mock profiles, reels, posts and engagement for testing."""
        now = datetime.now(timezone.utc)
        hour = timedelta(hours=1)

        def ts(hours_ago: int) -> str:
            return (now - hours_ago * hour).isoformat()

        self._tables["profiles"] = [
            {"id": "u1", "username": "alice", "display_name": "Alice", "avatar_url": None,
             "created_at": ts(500)},
            {"id": "u2", "username": "bob", "display_name": None, "avatar_url": None,
             "created_at": ts(400)},
            {"id": "u3", "username": "carol", "display_name": "Carol", "avatar_url": None,
             "created_at": ts(300)},
        ]
        self._tables["videos"] = [
            {"id": "v1", "title": "Sunrise Timelapse", "description": "Morning over the bay",
             "video_url": "https://cdn.reelview.app/videos/u1/1.mp4",
             "thumbnail_url": "https://cdn.reelview.app/thumbnails/u1/1.jpg",
             "user_id": "u1", "created_at": ts(1)},
            {"id": "v2", "title": "Skate Session", "description": None,
             "video_url": "https://cdn.reelview.app/videos/u2/2.mp4",
             "thumbnail_url": None, "user_id": "u2", "created_at": ts(5)},
            {"id": "v3", "title": "Street Food Tour", "description": "Three stalls, one night",
             "video_url": "https://cdn.reelview.app/videos/u3/3.mp4",
             "thumbnail_url": "https://cdn.reelview.app/thumbnails/u3/3.jpg",
             "user_id": "u3", "created_at": ts(12)},
            {"id": "v4", "title": "Cat vs Laser", "description": None,
             "video_url": "https://cdn.reelview.app/videos/u1/4.mp4",
             "thumbnail_url": None, "user_id": "u1", "created_at": ts(30)},
        ]
        self._tables["posts"] = [
            {"id": "p1", "content": "First post!", "media_url": None, "media_type": None,
             "user_id": "u2", "created_at": ts(2)},
            {"id": "p2", "content": "Look at this view",
             "media_url": "https://cdn.reelview.app/posts/u3/view.jpg", "media_type": "image/jpeg",
             "user_id": "u3", "created_at": ts(8)},
        ]
        self._tables["likes"] = [
            {"id": "l1", "video_id": "v1", "post_id": None, "user_id": "u2", "created_at": ts(1)},
            {"id": "l2", "video_id": "v1", "post_id": None, "user_id": "u3", "created_at": ts(1)},
            {"id": "l3", "video_id": "v2", "post_id": None, "user_id": "u1", "created_at": ts(4)},
            {"id": "l4", "video_id": None, "post_id": "p1", "user_id": "u1", "created_at": ts(2)},
        ]
        self._tables["comments"] = [
            {"id": "c1", "video_id": "v1", "post_id": None, "user_id": "u3",
             "content": "Gorgeous", "created_at": ts(1)},
            {"id": "c2", "video_id": None, "post_id": "p2", "user_id": "u1",
             "content": "Where is this?", "created_at": ts(7)},
        ]
        self._tables["followers"] = [
            {"id": "f1", "follower_id": "u1", "following_id": "u3", "created_at": ts(100)},
            {"id": "f2", "follower_id": "u2", "following_id": "u3", "created_at": ts(90)},
        ]

    # ------------------------------------------------------------------
    # BackendClient
    # ------------------------------------------------------------------

    async def fetch(self, query: RowQuery) -> List[Dict[str, Any]]:
        """Fetch rows matching a query."""
        await asyncio.sleep(self.latency)
        if query.table in self.read_failures:
            raise RemoteReadFailure(query.table, "simulated outage")

        rows = self._select(query)
        if query.order_by:
            rows.sort(
                key=lambda r: _ordering_key(r.get(query.order_by)),
                reverse=query.descending,
            )
        if query.limit is not None:
            rows = rows[: query.limit]
        return [self._project(row, query.columns) for row in rows]

    async def count(self, query: RowQuery) -> int:
        """Count rows matching a query."""
        await asyncio.sleep(self.latency)
        if query.table in self.read_failures:
            raise RemoteReadFailure(query.table, "simulated outage")
        return len(self._select(query))

    async def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        """Insert one row, assigning id and created_at when missing."""
        await asyncio.sleep(self.latency)
        if table in self.write_failures:
            raise RemoteWriteFailure(table, "insert", "simulated rejection")

        stored = dict(row)
        stored.setdefault("id", uuid.uuid4().hex)
        stored.setdefault("created_at", datetime.now(timezone.utc).isoformat())
        self._table(table).append(stored)
        return copy.deepcopy(stored)

    async def delete(self, table: str, match: Dict[str, Any]) -> int:
        """Delete rows equal on every match column."""
        await asyncio.sleep(self.latency)
        if table in self.write_failures:
            raise RemoteWriteFailure(table, "delete", "simulated rejection")

        rows = self._table(table)
        kept = [r for r in rows if not all(r.get(k) == v for k, v in match.items())]
        removed = len(rows) - len(kept)
        self._tables[table] = kept
        return removed

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def rows(self, table: str) -> List[Dict[str, Any]]:
        """Snapshot of a collection (for tests and debugging)."""
        return copy.deepcopy(self._table(table))

    def _table(self, table: str) -> List[Dict[str, Any]]:
        if table not in self._tables:
            raise RemoteReadFailure(table, "unknown collection")
        return self._tables[table]

    def _select(self, query: RowQuery) -> List[Dict[str, Any]]:
        rows = []
        for row in self._table(query.table):
            if not all(row.get(k) == v for k, v in query.match.items()):
                continue
            if not all(row.get(k) in set(values) for k, values in query.within.items()):
                continue
            if not all(
                row.get(k) is not None and _ordering_key(row[k]) < _ordering_key(bound)
                for k, bound in query.before.items()
            ):
                continue
            rows.append(row)
        return rows

    @staticmethod
    def _project(row: Dict[str, Any], columns: str) -> Dict[str, Any]:
        if columns.strip() == "*":
            return copy.deepcopy(row)
        wanted = [c.strip() for c in columns.split(",")]
        return {c: copy.deepcopy(row.get(c)) for c in wanted}


class InMemoryAuthGateway:
    """
    In-memory implementation of AuthGateway.
    A seeded profile id doubles as its own access token.
    """

    def __init__(self, backend: InMemoryBackend) -> None:
        self._backend = backend

    async def resolve(self, token: str) -> Optional[Identity]:
        for profile in self._backend.rows("profiles"):
            if profile["id"] == token:
                return Identity(id=profile["id"], email=f"{profile['username']}@reelview.test")
        return None
