"""
Simulation Data Models - windows, piles, columns, particles and settle events.

Screen space has its origin at the bottom-left with y growing upward, so a
window's top edge is ``rect.y + rect.height`` and snow piles grow toward
larger y.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, Hashable, List, Optional, Tuple

from .constants import Fade, Geometry, Settling


def clamp_height(value: float, max_height: float) -> float:
    """Clamp a column height into ``[0, max_height]``; NaN becomes 0."""
    if value != value or value <= 0.0:
        return 0.0
    if value > max_height:
        return max_height
    return value


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in screen space."""
    x: float
    y: float
    width: float
    height: float

    @property
    def min_x(self) -> float:
        return self.x

    @property
    def max_x(self) -> float:
        return self.x + self.width

    @property
    def min_y(self) -> float:
        return self.y

    @property
    def max_y(self) -> float:
        return self.y + self.height

    @property
    def top(self) -> float:
        """Top edge, where snow settles."""
        return self.y + self.height

    def spans_x(self, x: float) -> bool:
        return self.x <= x <= self.x + self.width

    def contains(self, x: float, y: float) -> bool:
        """Edge-inclusive point containment."""
        return (self.x <= x <= self.x + self.width and
                self.y <= y <= self.y + self.height)


@dataclass(frozen=True)
class WindowSnapshot:
    """A visible foreign window as reported by the window directory."""
    window_id: Hashable
    rect: Rect
    stack_rank: int  # 0 = frontmost
    title: str = ""


@dataclass
class Column:
    """Snow height at one discretized offset of a pile."""
    height: float = 0.0
    age: float = 0.0


@dataclass
class Pile:
    """
    Accumulated snow on top of one window.

    Columns are keyed by integer index; the column's x offset from the
    window's left edge is ``index * column_width``.
    """
    window_id: Hashable
    window_frame: Rect
    column_width: float = Geometry.COLUMN_WIDTH
    max_height: float = Settling.MAX_HEIGHT
    max_age: float = Settling.MAX_COLUMN_AGE
    columns: Dict[int, Column] = field(default_factory=dict)
    total_age: float = 0.0

    @property
    def is_empty(self) -> bool:
        return not self.columns

    def offset_of(self, index: int) -> float:
        return index * self.column_width

    def index_for(self, relative_x: float) -> int:
        return int(math.floor(relative_x / self.column_width))

    def height_at(self, index: int) -> float:
        column = self.columns.get(index)
        return column.height if column else 0.0

    def height_at_x(self, x: float) -> float:
        """Height of the column under screen x, 0 where there is none."""
        return self.height_at(self.index_for(x - self.window_frame.x))

    def set_height(self, index: int, height: float, age: Optional[float] = None) -> Column:
        """Write a column height (clamped), creating the column if needed."""
        column = self.columns.get(index)
        if column is None:
            column = Column(age=age if age is not None else 0.0)
            self.columns[index] = column
        elif age is not None:
            column.age = age
        column.height = clamp_height(height, self.max_height)
        return column

    def max_height_value(self) -> float:
        return max((c.height for c in self.columns.values()), default=0.0)

    def total_height(self) -> float:
        return sum(c.height for c in self.columns.values())

    def average_age(self) -> float:
        if not self.columns:
            return 0.0
        return sum(c.age for c in self.columns.values()) / len(self.columns)

    def sorted_columns(self) -> List[Tuple[int, Column]]:
        return sorted(self.columns.items())

    def surface_points(self) -> List[Tuple[float, float]]:
        """Screen-space (x, y) of each column's top centre, left to right."""
        left = self.window_frame.x
        top = self.window_frame.top
        return [
            (left + self.offset_of(index) + self.column_width / 2, top + column.height)
            for index, column in self.sorted_columns()
        ]

    def opacity(self, fade_start_age: float = Fade.START_AGE) -> float:
        """Render opacity: solid while young, fading toward the max age."""
        avg_age = self.average_age()
        if avg_age < fade_start_age or self.max_age <= fade_start_age:
            return Fade.MAX_OPACITY
        progress = (avg_age - fade_start_age) / (self.max_age - fade_start_age)
        span = Fade.MAX_OPACITY - Fade.MIN_OPACITY
        return max(Fade.MIN_OPACITY, Fade.MAX_OPACITY - progress * span)


@dataclass
class Particle:
    """A falling snowflake. Owned by the particle field."""
    x: float
    y: float
    size: float
    speed: float
    drift: float = 0.0
    opacity: float = 1.0
    falling: bool = True


@dataclass(frozen=True)
class SettleEvent:
    """A particle reached a snow surface and should be respawned."""
    window_id: Hashable
    x: float
    y: float
    deposited: bool
    column_index: Optional[int] = None
    particle_index: Optional[int] = None


@dataclass(frozen=True)
class PileView:
    """Read-only copy of a pile for renderers."""
    window_id: Hashable
    window_frame: Rect
    column_width: float
    columns: Tuple[Tuple[float, float], ...]  # (offset, height), ascending
    opacity: float

    @classmethod
    def from_pile(cls, pile: Pile) -> 'PileView':
        return cls(
            window_id=pile.window_id,
            window_frame=pile.window_frame,
            column_width=pile.column_width,
            columns=tuple(
                (pile.offset_of(index), column.height)
                for index, column in pile.sorted_columns()
            ),
            opacity=pile.opacity(),
        )
