"""
Active item tracking for snap-scroll feeds.
Turns a continuous scroll offset into a discrete active index.
"""
import logging
import math
from typing import Callable, Optional

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[int, int], None]


def active_index_for(offset: float, item_height: float) -> int:
    """
    Index of the item nearest the viewport top: round(offset / item_height).

    Halves round up, matching browser ``Math.round`` so that an item takes
    over exactly at the midpoint of the snap.
    """
    return int(math.floor(offset / item_height + 0.5))


class ActiveItemTracker:
    """
    Remembers the last signalled index and only signals real changes.

    Sub-pixel scroll events that round to the same index are ignored.
    """

    def __init__(self, on_change: Optional[ChangeCallback] = None, initial_index: int = 0) -> None:
        self._on_change = on_change
        self._active_index = initial_index

    @property
    def active_index(self) -> int:
        return self._active_index

    def update(self, offset: float, item_height: float) -> bool:
        """
        Feed one scroll observation.

        Returns:
            True if the active index changed (and the callback fired)
        """
        if item_height <= 0:
            # Container not laid out yet.
            return False
        if not math.isfinite(offset / item_height):
            logger.warning(f"Ignoring scroll observation offset={offset}, item_height={item_height}")
            return False

        new_index = active_index_for(offset, item_height)
        if new_index == self._active_index:
            return False

        previous = self._active_index
        self._active_index = new_index
        logger.debug(f"Active index {previous} -> {new_index}")
        if self._on_change is not None:
            self._on_change(previous, new_index)
        return True

    def reset(self, index: int = 0) -> None:
        """Forget scroll history (full reload) without signalling."""
        self._active_index = index
