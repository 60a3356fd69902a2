"""
Collision Detector - decides when a falling particle lands on a pile.
"""

import logging
import math
from typing import Optional, Sequence

from .accretion import AccretionEngine
from .config import SettlingConfig
from .height_field import HeightFieldStore
from .models import Particle, SettleEvent, WindowSnapshot
from .occlusion import is_point_occluded

logger = logging.getLogger(__name__)


class CollisionDetector:
    """Particle-to-surface test against the current window snapshot."""

    def __init__(self, store: HeightFieldStore,
                 accretion: AccretionEngine,
                 config: Optional[SettlingConfig] = None):
        self.store = store
        self.accretion = accretion
        self.config = config or store.config

    def surface_height(self, window: WindowSnapshot, x: float) -> float:
        """Top edge plus the snow already piled under x."""
        pile = self.store.get(window.window_id)
        return window.rect.top + (pile.height_at_x(x) if pile else 0.0)

    def find_target_window(self, x: float, y: float,
                           windows: Sequence[WindowSnapshot]) -> Optional[WindowSnapshot]:
        """Frontmost window whose snow surface is within tolerance of (x, y)."""
        tolerance = self.config.collision_tolerance
        best: Optional[WindowSnapshot] = None
        for window in windows:
            if not window.rect.spans_x(x):
                continue
            if abs(y - self.surface_height(window, x)) > tolerance:
                continue
            if best is None or window.stack_rank < best.stack_rank:
                best = window
        return best

    def test_collision(self, particle: Particle,
                       windows: Sequence[WindowSnapshot]) -> Optional[SettleEvent]:
        """
        Check one particle against the window stack.

        Returns a SettleEvent whenever the particle landed, whether or not
        snow was recorded (landing behind a frontward window records
        nothing). The particle itself is never modified.
        """
        if not particle.falling or not (math.isfinite(particle.x) and math.isfinite(particle.y)):
            return None

        window = self.find_target_window(particle.x, particle.y, windows)
        if window is None:
            return None

        collision_y = self.surface_height(window, particle.x)
        if not (collision_y - particle.speed * 2 <= particle.y <= collision_y):
            return None

        if is_point_occluded(particle.x, collision_y, window, windows):
            return SettleEvent(window.window_id, particle.x, collision_y, deposited=False)

        existing = self.store.get(window.window_id)
        pile = self.store.upsert(window.window_id, window.rect)
        index = self.accretion.deposit(pile, particle.x, particle.size)
        if existing is None and pile.is_empty:
            self.store.remove(window.window_id)

        return SettleEvent(
            window.window_id,
            particle.x,
            collision_y,
            deposited=index is not None,
            column_index=index,
        )
