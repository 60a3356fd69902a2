"""
Occlusion Filter - drops snow hidden behind windows stacked in front.

Each column is sampled at four points (left, right and middle of its top
surface, plus the middle at half height). Only a column whose every sample
is covered is removed, so a partial overlap does not flicker columns in and
out. The four-point test is an approximation of the true overlap area.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Hashable, List, Sequence, Tuple

from .height_field import HeightFieldStore
from .models import Pile, WindowSnapshot

logger = logging.getLogger(__name__)


def is_point_occluded(x: float, y: float, target: WindowSnapshot,
                      windows: Sequence[WindowSnapshot]) -> bool:
    """True if a window in front of ``target`` covers screen point (x, y)."""
    for window in windows:
        if window.window_id == target.window_id:
            continue
        if window.stack_rank < target.stack_rank and window.rect.contains(x, y):
            return True
    return False


def column_sample_points(pile: Pile, index: int) -> List[Tuple[float, float]]:
    """Screen-space sample points for one column's visible surface."""
    left = pile.window_frame.x + pile.offset_of(index)
    right = left + pile.column_width
    middle = left + pile.column_width / 2
    top = pile.window_frame.top
    height = pile.height_at(index)
    surface = top + height
    return [
        (left, surface),
        (right, surface),
        (middle, surface),
        (middle, top + height / 2),
    ]


@dataclass
class OcclusionReport:
    """What one occlusion pass removed."""
    columns_removed: int = 0
    piles_removed: int = 0
    windows_closed: int = 0


class OcclusionFilter:
    """Prunes piles against the current window stack."""

    def filter_occluded(self, store: HeightFieldStore,
                        windows: Sequence[WindowSnapshot]) -> OcclusionReport:
        """
        Remove piles of vanished windows and fully covered columns.

        Also refreshes each surviving pile's cached window frame.
        """
        report = OcclusionReport()
        by_id: Dict[Hashable, WindowSnapshot] = {w.window_id: w for w in windows}

        for pile in store.all():
            window = by_id.get(pile.window_id)
            if window is None:
                store.remove(pile.window_id)
                report.windows_closed += 1
                report.piles_removed += 1
                continue

            pile.window_frame = window.rect

            hidden = [
                index for index in pile.columns
                if all(is_point_occluded(px, py, window, windows)
                       for px, py in column_sample_points(pile, index))
            ]
            for index in hidden:
                del pile.columns[index]
            report.columns_removed += len(hidden)

            if pile.is_empty:
                store.remove(pile.window_id)
                report.piles_removed += 1

        if report.windows_closed:
            logger.debug(f"Dropped piles of {report.windows_closed} closed windows")
        return report
