"""
Snow Renderer - draws windows, piles, flakes and the sleigh to a curses screen.

World space is y-up with the origin at the bottom-left; the terminal is
y-down. ``Viewport`` converts between the two. The bottom terminal row is
kept for the status line.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from ..models import Particle, PileView, WindowSnapshot
from ..sprites import SleighFlight
from .colors import Colors, curses

logger = logging.getLogger(__name__)

FULL_BLOCK = "█"
PARTIAL_BLOCKS = "▁▂▃▄▅▆▇"
FALLBACK_SLEIGH = "<*>=~=~"
SPRITE_SCALE = 2.0


class Viewport:
    """Maps world coordinates to terminal cells."""

    def __init__(self, world_width: float, world_height: float, cols: int, rows: int):
        self.world_width = max(1.0, float(world_width))
        self.world_height = max(1.0, float(world_height))
        self.cols = max(1, cols)
        self.rows = max(1, rows)

    @property
    def cell_width(self) -> float:
        return self.world_width / self.cols

    @property
    def cell_height(self) -> float:
        return self.world_height / self.rows

    def to_col(self, x: float) -> int:
        return int(x / self.cell_width)

    def to_row(self, y: float) -> int:
        return self.rows - 1 - int(y / self.cell_height)

    def to_cell(self, x: float, y: float) -> Tuple[int, int]:
        return self.to_row(y), self.to_col(x)

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols


class SnowRenderer:
    """Stateless drawing of one frame."""

    def __init__(self, screen, world_width: float, world_height: float):
        self.screen = screen
        self.world_width = world_width
        self.world_height = world_height
        self.viewport = self._make_viewport()

    def _make_viewport(self) -> Viewport:
        height, width = self.screen.getmaxyx()
        return Viewport(self.world_width, self.world_height, width, height - 1)

    def resize(self, world_width: float, world_height: float):
        self.world_width = world_width
        self.world_height = world_height
        self.viewport = self._make_viewport()

    def _put(self, row: int, col: int, text: str, attr: int = 0):
        """Write text with bounds checking."""
        vp = self.viewport
        if row < 0 or row > vp.rows or col < 0 or col >= vp.cols:
            return
        text = text[:vp.cols - col]
        if not text:
            return
        try:
            self.screen.addstr(row, col, text, attr)
        except curses.error:
            # Writing the bottom-right cell always raises
            pass

    def draw_window(self, window: WindowSnapshot):
        """Blank the window's area and outline it."""
        vp = self.viewport
        rect = window.rect
        top, left = vp.to_cell(rect.x, rect.top)
        bottom, right = vp.to_cell(rect.max_x, rect.y)
        right = max(right, left + 1)
        bottom = max(bottom, top + 1)
        frame_attr = Colors.attr(Colors.WINDOW_FRAME)

        width = right - left + 1
        for row in range(max(0, top), min(vp.rows, bottom + 1)):
            if row in (top, bottom):
                edge = "+" + "-" * (width - 2) + "+"
            else:
                edge = "|" + " " * (width - 2) + "|"
            if left < 0:
                edge = edge[-left:]
            self._put(row, max(0, left), edge, frame_attr)

        if window.title and width > 4:
            self._put(top, max(0, left) + 2, window.title[:width - 4],
                      Colors.attr(Colors.WINDOW_TITLE, bold=True))

    def pile_cells(self, pile: PileView) -> Dict[Tuple[int, int], str]:
        """Terminal cells covered by a pile, with their glyphs."""
        vp = self.viewport
        frame = pile.window_frame
        base_row = vp.to_row(frame.top)
        tallest: Dict[int, float] = {}
        for offset, height in pile.columns:
            col = vp.to_col(frame.x + offset + pile.column_width / 2)
            tallest[col] = max(tallest.get(col, 0.0), height)

        cells: Dict[Tuple[int, int], str] = {}
        for col, height in tallest.items():
            rows_high = height / vp.cell_height
            full = int(rows_high)
            for i in range(full):
                cells[(base_row - 1 - i, col)] = FULL_BLOCK
            fraction = rows_high - full
            level = int(fraction * (len(PARTIAL_BLOCKS) + 1))
            if level > 0:
                cells[(base_row - 1 - full, col)] = PARTIAL_BLOCKS[min(level, len(PARTIAL_BLOCKS)) - 1]
        return cells

    def draw_pile(self, pile: PileView):
        attr = Colors.attr(Colors.for_opacity(pile.opacity), bold=pile.opacity >= 0.8)
        for (row, col), glyph in self.pile_cells(pile).items():
            if self.viewport.in_bounds(row, col):
                self._put(row, col, glyph, attr)

    def draw_particles(self, particles: Sequence[Particle]):
        vp = self.viewport
        for particle in particles:
            if not particle.falling:
                continue
            row, col = vp.to_cell(particle.x, particle.y)
            if not vp.in_bounds(row, col):
                continue
            glyph = "." if particle.size < 3 else "+" if particle.size < 5 else "*"
            self._put(row, col, glyph, Colors.attr(Colors.FLAKE, dim=particle.opacity < 0.75))

    def draw_sleigh(self, sleigh: SleighFlight):
        if not sleigh.active:
            return
        vp = self.viewport
        frame = sleigh.frame
        if frame is None:
            row, col = vp.to_cell(max(0.0, sleigh.x), sleigh.y)
            start = vp.to_col(sleigh.x)
            text = FALLBACK_SLEIGH
            if start < 0:
                text = text[-start:]
            self._put(row, col, text, Colors.attr(Colors.SLEIGH_RED, bold=True))
            return

        cells: Dict[Tuple[int, int], int] = {}
        for py, pixel_row in enumerate(frame.pixels):
            wy = sleigh.y + (frame.height - py - 1) * SPRITE_SCALE
            for px, rgb in enumerate(pixel_row):
                if rgb is None:
                    continue
                cell = vp.to_cell(sleigh.x + px * SPRITE_SCALE, wy)
                cells[cell] = Colors.for_rgb(rgb)
        for (row, col), pair in cells.items():
            if vp.in_bounds(row, col):
                self._put(row, col, FULL_BLOCK, Colors.attr(pair))

    def draw_status(self, text: str):
        self._put(self.viewport.rows, 0, text.ljust(self.viewport.cols - 1),
                  Colors.attr(Colors.STATUS))

    def render(self, windows: Sequence[WindowSnapshot], piles: List[PileView],
               particles: Sequence[Particle], sleigh: Optional[SleighFlight] = None,
               status: str = ""):
        """Draw one complete frame, back to front."""
        self.screen.erase()
        by_window = {pile.window_id: pile for pile in piles}
        for window in sorted(windows, key=lambda w: w.stack_rank, reverse=True):
            self.draw_window(window)
            pile = by_window.get(window.window_id)
            if pile is not None:
                self.draw_pile(pile)
        self.draw_particles(particles)
        if sleigh is not None:
            self.draw_sleigh(sleigh)
        if status:
            self.draw_status(status)
        self.screen.refresh()
