"""
Redistribution Engine - avalanche relaxation toward the angle of repose.

Columns steeper than the slope threshold hand part of their excess height
to their lower neighbour. Every subtraction has an equal addition, so a
pass conserves the pile's total height up to float rounding. The pass cap
bounds per-call cost instead of solving for an exact fixed point.
"""

import logging
import math
import random
from enum import Enum
from typing import Iterable, Optional, Tuple

from .config import SettlingConfig
from .models import Pile

logger = logging.getLogger(__name__)


class RedistributionMode(Enum):
    """How hard a redistribution call pushes toward the angle of repose."""
    GENTLE = "gentle"          # Once per tick, spreads piles sideways
    AGGRESSIVE = "aggressive"  # After a deposit, existing neighbours only


def depositable_span(pile: Pile, corner_radius: float) -> Tuple[int, int]:
    """
    Inclusive range of column indices a deposit can reach.

    Matches the accretion corner test, so the range is empty (first > last)
    for windows narrower than two corners.
    """
    width = pile.window_frame.width
    if width < 2 * corner_radius:
        return 0, -1
    first = int(math.floor(corner_radius / pile.column_width))
    last = int(math.floor((width - corner_radius) / pile.column_width))
    return first, last


class RedistributionEngine:
    """Slope limiter with an injectable random source."""

    def __init__(self, config: Optional[SettlingConfig] = None,
                 rng: Optional[random.Random] = None):
        self.config = config or SettlingConfig()
        self.rng = rng or random.Random()

    def slope_threshold(self, mode: RedistributionMode) -> float:
        """Draw this call's height-difference limit."""
        cfg = self.config
        variation = cfg.aggressive_variation if mode is RedistributionMode.AGGRESSIVE else cfg.gentle_variation
        threshold = cfg.base_slope
        if variation > 0:
            threshold += self.rng.uniform(-variation, variation)
        return max(cfg.min_slope, threshold)

    def _jitter(self) -> float:
        j = self.config.transfer_jitter
        if j <= 0:
            return 1.0
        return self.rng.uniform(1.0 - j, 1.0 + j)

    def redistribute(self, pile: Pile,
                     mode: RedistributionMode = RedistributionMode.GENTLE,
                     center: Optional[int] = None,
                     exclude: Iterable[int] = ()) -> int:
        """
        Relax the pile's slopes in place.

        Args:
            pile: Pile to relax
            mode: GENTLE (tick) or AGGRESSIVE (after a deposit)
            center: Only visit columns within ``passes`` of this index
            exclude: Indices that must not be created by spreading

        Returns:
            Number of transfers performed
        """
        if not pile.columns:
            return 0

        cfg = self.config
        aggressive = mode is RedistributionMode.AGGRESSIVE
        rate = cfg.aggressive_rate if aggressive else cfg.gentle_rate
        passes = cfg.aggressive_passes if aggressive else cfg.gentle_passes
        threshold = self.slope_threshold(mode)
        first, last = depositable_span(pile, cfg.corner_radius)
        blocked = set(exclude)

        transfers = 0
        for _ in range(passes):
            moved = False
            indices = sorted(pile.columns)
            if center is not None:
                indices = [i for i in indices if abs(i - center) <= passes]

            for index in indices:
                source = pile.columns.get(index)
                if source is None:
                    continue

                neighbours = [index - 1, index + 1]
                self.rng.shuffle(neighbours)

                for n in neighbours:
                    target = pile.columns.get(n)
                    if target is None:
                        # Only tick-time settling spreads into empty slots
                        if aggressive or n in blocked or not first <= n <= last:
                            continue
                        target_height = 0.0
                    else:
                        target_height = target.height

                    difference = source.height - target_height
                    if difference <= threshold:
                        continue

                    amount = min((difference - threshold) * rate * self._jitter(), difference / 2.0)
                    if amount < cfg.transfer_epsilon:
                        continue

                    if target is None:
                        target = pile.set_height(n, 0.0, age=source.age)
                    pile.set_height(index, source.height - amount)
                    pile.set_height(n, target.height + amount)
                    transfers += 1
                    moved = True

            if not moved:
                break

        return transfers
