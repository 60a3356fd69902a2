"""
Accretion Engine - turns a landed particle into pile height.
"""

import logging
import math
from typing import Optional

from .config import SettlingConfig
from .models import Pile
from .redistribution import RedistributionEngine, RedistributionMode

logger = logging.getLogger(__name__)


class AccretionEngine:
    """Adds snow to the column under a deposit point."""

    def __init__(self, config: Optional[SettlingConfig] = None,
                 redistribution: Optional[RedistributionEngine] = None):
        self.config = config or SettlingConfig()
        self.redistribution = redistribution or RedistributionEngine(self.config)

    def in_corner_margin(self, pile: Pile, x: float) -> bool:
        """True if screen x is off the window or over a rounded corner."""
        relative_x = x - pile.window_frame.x
        width = pile.window_frame.width
        radius = self.config.corner_radius
        return relative_x < radius or relative_x > width - radius

    def deposit(self, pile: Pile, x: float, amount: float) -> Optional[int]:
        """
        Deposit ``amount`` (a particle size) at screen x on ``pile``.

        Returns:
            The affected column index, or None if nothing was recorded
            (bad amount, corner margin, or column already full).
        """
        if amount is None or not math.isfinite(amount) or amount <= 0:
            return None
        if not math.isfinite(x) or self.in_corner_margin(pile, x):
            return None

        index = pile.index_for(x - pile.window_frame.x)
        current = pile.height_at(index)
        if current >= pile.max_height:
            return None

        capped = min(amount * self.config.deposit_scale, pile.max_height - current)
        pile.set_height(index, current + capped, age=0.0)

        self.redistribution.redistribute(pile, RedistributionMode.AGGRESSIVE, center=index)
        return index
