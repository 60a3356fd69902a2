"""
Settling Simulation - owns the height fields and drives one tick per frame.

Per tick:
    window snapshot -> occlusion -> decay -> collision/accretion per particle

Rendering reads ``snapshot()`` after the tick completes. A lock guards
tick and snapshot so a renderer on another thread never sees a pile halfway
through redistribution.
"""

import logging
import math
import random
import threading
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Sequence

from .accretion import AccretionEngine
from .collision import CollisionDetector
from .config import SettlingConfig, SnowSettings
from .decay import DecayEngine
from .exceptions import WindowDirectoryUnavailable
from .height_field import HeightFieldStore
from .models import Particle, PileView, SettleEvent, WindowSnapshot
from .occlusion import OcclusionFilter
from .redistribution import RedistributionEngine
from .utils.error_handling import ErrorCategory, handle_error
from .windows import WindowDirectory

logger = logging.getLogger(__name__)


@dataclass
class TickResult:
    """Summary of one simulation tick."""
    events: List[SettleEvent]
    windows_available: bool
    columns_occluded: int = 0
    columns_pruned: int = 0
    piles_removed: int = 0


class SettlingSimulation:
    """
    Snow accumulation on top of foreign windows.

    Owns the HeightFieldStore and all engines; the caller owns the frame
    loop and the particles. Nothing here is global.
    """

    def __init__(self, directory: WindowDirectory,
                 config: Optional[SettlingConfig] = None,
                 settings: Optional[SnowSettings] = None,
                 rng: Optional[random.Random] = None):
        self.directory = directory
        self.config = (config or SettlingConfig()).validate()
        self.settings = settings or SnowSettings()
        self.rng = rng or random.Random()

        self.store = HeightFieldStore(self.config)
        self.redistribution = RedistributionEngine(self.config, self.rng)
        self.accretion = AccretionEngine(self.config, self.redistribution)
        self.decay = DecayEngine(self.config, self.redistribution)
        self.occlusion = OcclusionFilter()
        self.collision = CollisionDetector(self.store, self.accretion, self.config)

        self._lock = threading.Lock()
        self._windows: List[WindowSnapshot] = []
        self._tick_count = 0
        self._deposits = 0
        self._directory_failures = 0

    @property
    def settling_enabled(self) -> bool:
        return self.settings.settling_enabled

    def set_settling_enabled(self, enabled: bool):
        """Toggle settling; turning it off drops all settled snow."""
        with self._lock:
            self.settings.settling_enabled = enabled
            if not enabled:
                self.store.clear()
        logger.info(f"Settling {'enabled' if enabled else 'disabled'}")

    def clear(self):
        """Remove all settled snow."""
        with self._lock:
            self.store.clear()

    def _query_windows(self) -> Optional[List[WindowSnapshot]]:
        try:
            return self.directory.get_visible_windows()
        except WindowDirectoryUnavailable as e:
            self._directory_failures += 1
            handle_error(e, "window_directory_refresh", category=ErrorCategory.WINDOWING)
            return None

    def tick(self, delta_time: float,
             particles: Sequence[Particle] = ()) -> TickResult:
        """
        Advance the simulation by ``delta_time`` seconds.

        Args:
            delta_time: Seconds since the previous tick
            particles: Current falling particles (read, never modified)

        Returns:
            TickResult whose events carry the index of each landed particle
            so the caller can respawn it
        """
        if delta_time is None or not math.isfinite(delta_time) or delta_time < 0:
            delta_time = 0.0

        if not self.settings.settling_enabled:
            return TickResult(events=[], windows_available=True)

        windows = self._query_windows()

        with self._lock:
            self._tick_count += 1
            result = TickResult(events=[], windows_available=windows is not None)

            if windows is not None:
                self._windows = list(windows)
                occlusion = self.occlusion.filter_occluded(self.store, self._windows)
                result.columns_occluded = occlusion.columns_removed
                result.piles_removed += occlusion.piles_removed

            decay = self.decay.tick(self.store, delta_time)
            result.columns_pruned = decay.columns_pruned
            result.piles_removed += decay.piles_removed

            if windows is None:
                return result

            for i, particle in enumerate(particles):
                event = self.collision.test_collision(particle, self._windows)
                if event is None:
                    continue
                if event.deposited:
                    self._deposits += 1
                result.events.append(replace(event, particle_index=i))

            return result

    def snapshot(self) -> List[PileView]:
        """Immutable copies of every pile for rendering."""
        with self._lock:
            return [PileView.from_pile(pile) for pile in self.store.all()]

    @property
    def windows(self) -> List[WindowSnapshot]:
        """Window snapshot used by the most recent successful tick."""
        with self._lock:
            return list(self._windows)

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                'ticks': self._tick_count,
                'piles': len(self.store),
                'columns': self.store.total_columns(),
                'deposits': self._deposits,
                'directory_failures': self._directory_failures,
                'settling_enabled': self.settings.settling_enabled,
            }
