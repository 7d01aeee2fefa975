"""
Supabase-backed implementations of the backend contracts.
Translates RowQuery onto the async PostgREST builder of supabase-py.
"""
import logging
from typing import Any, Dict, List, Optional

from supabase import AsyncClient, acreate_client

from reelview.config.settings import Settings
from reelview.core.exceptions import RemoteReadFailure, RemoteWriteFailure, ValidationError
from reelview.models.interfaces import RowQuery
from reelview.models.schemas import Identity

logger = logging.getLogger(__name__)


async def create_supabase_client(settings: Settings) -> AsyncClient:
    """Create the async client from settings."""
    if not settings.SUPABASE_URL or not settings.SUPABASE_KEY:
        raise ValidationError(
            "SUPABASE_URL and SUPABASE_KEY are required when BACKEND=supabase"
        )
    return await acreate_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)


class SupabaseBackend:
    """BackendClient over Supabase tables."""

    def __init__(self, client: AsyncClient) -> None:
        self._client = client

    def _build_select(self, query: RowQuery, columns: str, count: Optional[str] = None):
        builder = self._client.table(query.table).select(columns, count=count)
        for column, value in query.match.items():
            builder = builder.eq(column, value)
        for column, values in query.within.items():
            builder = builder.in_(column, list(values))
        for column, bound in query.before.items():
            builder = builder.lt(column, bound)
        return builder

    async def fetch(self, query: RowQuery) -> List[Dict[str, Any]]:
        builder = self._build_select(query, query.columns)
        if query.order_by:
            builder = builder.order(query.order_by, desc=query.descending)
        if query.limit is not None:
            builder = builder.limit(query.limit)
        try:
            response = await builder.execute()
        except Exception as e:
            raise RemoteReadFailure(query.table, str(e)) from e
        return list(response.data or [])

    async def count(self, query: RowQuery) -> int:
        # Only the Content-Range total matters; keep the body to one row.
        builder = self._build_select(query, "id", count="exact").limit(1)
        try:
            response = await builder.execute()
        except Exception as e:
            raise RemoteReadFailure(query.table, str(e)) from e
        return response.count or 0

    async def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = await self._client.table(table).insert(row).execute()
        except Exception as e:
            raise RemoteWriteFailure(table, "insert", str(e)) from e
        if not response.data:
            raise RemoteWriteFailure(table, "insert", "no row returned")
        return response.data[0]

    async def delete(self, table: str, match: Dict[str, Any]) -> int:
        if not match:
            raise ValidationError(f"Refusing unfiltered delete on {table}")
        builder = self._client.table(table).delete()
        for column, value in match.items():
            builder = builder.eq(column, value)
        try:
            response = await builder.execute()
        except Exception as e:
            raise RemoteWriteFailure(table, "delete", str(e)) from e
        return len(response.data or [])


class SupabaseAuthGateway:
    """AuthGateway backed by Supabase Auth."""

    def __init__(self, client: AsyncClient) -> None:
        self._client = client

    async def resolve(self, token: str) -> Optional[Identity]:
        try:
            response = await self._client.auth.get_user(token)
        except Exception as e:
            logger.warning(f"Access token rejected by identity provider: {e}")
            return None
        if response is None or response.user is None:
            return None
        return Identity(id=response.user.id, email=response.user.email)
