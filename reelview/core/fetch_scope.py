"""
Scoped fetch tokens.

A screen acquires a token before awaiting a remote read and checks it
before writing the response into its state. Acquiring a newer token or
tearing the scope down makes every older token stale, so a late response
never overwrites fresher data or a closed session.
"""
import logging
from contextlib import contextmanager
from typing import Iterator

logger = logging.getLogger(__name__)


class FetchToken:
    """Handle for one in-flight fetch."""

    def __init__(self, scope: "FetchScope", generation: int) -> None:
        self._scope = scope
        self._generation = generation

    @property
    def is_valid(self) -> bool:
        return self._scope.is_current(self._generation)


class FetchScope:
    """Issues fetch tokens and invalidates them on refetch or teardown."""

    def __init__(self, name: str = "fetch") -> None:
        self._name = name
        self._generation = 0
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def is_current(self, generation: int) -> bool:
        return not self._closed and generation == self._generation

    @contextmanager
    def acquire(self) -> Iterator[FetchToken]:
        """Acquire a token for the duration of one fetch."""
        self._generation += 1
        token = FetchToken(self, self._generation)
        yield token
        if not token.is_valid:
            logger.debug(f"Fetch scope '{self._name}': response discarded as stale")

    def invalidate(self) -> None:
        """Tear the scope down; all outstanding tokens become stale."""
        self._closed = True
        self._generation += 1
