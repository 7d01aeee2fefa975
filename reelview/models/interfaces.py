"""
Collaborator interfaces (abstractions).
Using Protocol for structural subtyping (duck typing with type hints).
The backend service, the identity provider and the host runtime are all
consumed through these contracts.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence, runtime_checkable

from reelview.models.schemas import Identity


@dataclass
class RowQuery:
    """
    A row-level read against one backend collection.

    Equality filters live in ``match``, membership filters in ``within``;
    ``before`` bounds a column from above (strictly less than).
    """

    table: str
    columns: str = "*"
    match: Dict[str, Any] = field(default_factory=dict)
    within: Dict[str, Sequence[Any]] = field(default_factory=dict)
    before: Dict[str, Any] = field(default_factory=dict)
    order_by: Optional[str] = "created_at"
    descending: bool = True
    limit: Optional[int] = None


@runtime_checkable
class BackendClient(Protocol):
    """
    Row-level CRUD over the hosted backend's collections.
    Production: Supabase PostgREST.
    Testing: In-memory implementation.
    """

    async def fetch(self, query: RowQuery) -> List[Dict[str, Any]]:
        """
        Fetch rows matching a query.

        Raises:
            RemoteReadFailure: on transport/service failure
        """
        ...

    async def count(self, query: RowQuery) -> int:
        """Count rows matching a query (ordering and limit are ignored)."""
        ...

    async def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert one row and return it as stored.

        Raises:
            RemoteWriteFailure: if the service rejects the write
        """
        ...

    async def delete(self, table: str, match: Dict[str, Any]) -> int:
        """
        Delete rows equal on every ``match`` column, return count removed.

        Raises:
            RemoteWriteFailure: if the service rejects the write
        """
        ...


@runtime_checkable
class IdentityProvider(Protocol):
    """Source of the current identity, passed explicitly into sessions."""

    async def get_current_identity(self) -> Optional[Identity]:
        ...


@runtime_checkable
class AuthGateway(Protocol):
    """Resolves bearer tokens against the external identity provider."""

    async def resolve(self, token: str) -> Optional[Identity]:
        """Return the identity behind an access token, None if invalid."""
        ...


class StaticIdentityProvider:
    """Identity context fixed when a session is created."""

    def __init__(self, identity: Optional[Identity] = None) -> None:
        self._identity = identity

    async def get_current_identity(self) -> Optional[Identity]:
        return self._identity


@runtime_checkable
class MediaElement(Protocol):
    """
    One playback element owned by exactly one playback controller.
    Every call may raise MediaApiFailure.
    """

    async def play(self) -> None:
        ...

    async def pause(self) -> None:
        ...

    async def set_muted(self, muted: bool) -> None:
        ...

    async def request_fullscreen(self) -> None:
        """Standard fullscreen API on the media element itself."""
        ...

    async def enter_vendor_fullscreen(self) -> None:
        """Vendor-specific element fullscreen (e.g. webkitEnterFullscreen)."""
        ...

    async def exit_vendor_fullscreen(self) -> None:
        ...


@runtime_checkable
class FullscreenHost(Protocol):
    """Document-level fullscreen for an item's container."""

    async def request_fullscreen(self, item_id: str) -> None:
        ...

    async def exit_fullscreen(self) -> None:
        ...


@runtime_checkable
class Clipboard(Protocol):
    async def write_text(self, text: str) -> None:
        ...
