"""
Height-Field Store - per-window piles of settled snow.

The store owns every Pile. It performs no I/O and no physics; the engines
in accretion, redistribution, decay and occlusion mutate the piles it
hands out.
"""

import logging
from typing import Dict, Hashable, Iterator, List, Optional

from .config import SettlingConfig
from .models import Pile, Rect

logger = logging.getLogger(__name__)


class HeightFieldStore:
    """Map of window identifier to Pile."""

    def __init__(self, config: Optional[SettlingConfig] = None):
        self.config = config or SettlingConfig()
        self._piles: Dict[Hashable, Pile] = {}

    def upsert(self, window_id: Hashable, frame: Rect) -> Pile:
        """Return the pile for ``window_id``, creating it or refreshing its frame."""
        if frame.width < 0 or frame.height < 0:
            raise ValueError(f"Window frame has negative size: {frame}")

        pile = self._piles.get(window_id)
        if pile is None:
            pile = Pile(
                window_id=window_id,
                window_frame=frame,
                column_width=self.config.column_width,
                max_height=self.config.max_height,
                max_age=self.config.max_age,
            )
            self._piles[window_id] = pile
            logger.debug(f"New pile for window {window_id!r}")
        else:
            pile.window_frame = frame
        return pile

    def get(self, window_id: Hashable) -> Optional[Pile]:
        return self._piles.get(window_id)

    def remove(self, window_id: Hashable) -> Optional[Pile]:
        return self._piles.pop(window_id, None)

    def all(self) -> List[Pile]:
        return list(self._piles.values())

    def window_ids(self) -> List[Hashable]:
        return list(self._piles)

    def discard_empty(self) -> int:
        """Remove piles without columns; returns how many were removed."""
        empty = [wid for wid, pile in self._piles.items() if pile.is_empty]
        for wid in empty:
            del self._piles[wid]
        return len(empty)

    def clear(self):
        if self._piles:
            logger.debug(f"Clearing {len(self._piles)} piles")
        self._piles.clear()

    def total_columns(self) -> int:
        return sum(len(p.columns) for p in self._piles.values())

    def __len__(self) -> int:
        return len(self._piles)

    def __contains__(self, window_id: Hashable) -> bool:
        return window_id in self._piles

    def __iter__(self) -> Iterator[Pile]:
        return iter(list(self._piles.values()))
