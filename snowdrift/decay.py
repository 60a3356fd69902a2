"""
Temporal Decay Engine - ageing, compaction, melt and pruning.

Two processes with different onsets: compaction starts a couple of seconds
after a column was last fed and stops at a floor, melt starts only after a
long idle period and is the only thing (besides pruning) that removes snow
entirely.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional

from .config import SettlingConfig
from .height_field import HeightFieldStore
from .models import Pile
from .redistribution import RedistributionEngine, RedistributionMode

logger = logging.getLogger(__name__)


@dataclass
class DecayReport:
    """What one decay tick did."""
    columns_pruned: int = 0
    piles_removed: int = 0
    transfers: int = 0


class DecayEngine:
    """Applies one tick of decay to every pile in a store."""

    def __init__(self, config: Optional[SettlingConfig] = None,
                 redistribution: Optional[RedistributionEngine] = None):
        self.config = config or SettlingConfig()
        self.redistribution = redistribution or RedistributionEngine(self.config)

    def _decay_pile(self, pile: Pile, delta_time: float) -> List[int]:
        cfg = self.config
        pile.total_age += delta_time

        pruned = []
        for index, column in list(pile.columns.items()):
            column.age += delta_time
            height = column.height

            if column.age > cfg.idle_melt_threshold:
                height -= cfg.melt_per_tick

            if column.age > cfg.settle_threshold and height > cfg.compaction_floor:
                height = max(cfg.min_compacted_height, height - cfg.compaction_per_tick)

            pile.set_height(index, height)

            if column.height <= cfg.min_height_epsilon or column.age > pile.max_age:
                del pile.columns[index]
                pruned.append(index)

        return pruned

    def tick(self, store: HeightFieldStore, delta_time: float) -> DecayReport:
        """Age, compact, melt and prune every pile by ``delta_time`` seconds."""
        if delta_time is None or not math.isfinite(delta_time) or delta_time < 0:
            delta_time = 0.0

        report = DecayReport()
        for pile in store.all():
            pruned = self._decay_pile(pile, delta_time)
            report.columns_pruned += len(pruned)

            if pile.columns:
                report.transfers += self.redistribution.redistribute(
                    pile, RedistributionMode.GENTLE, exclude=pruned)

            if pile.is_empty:
                store.remove(pile.window_id)
                report.piles_removed += 1

        if report.piles_removed:
            logger.debug(f"Decay removed {report.piles_removed} piles "
                         f"({report.columns_pruned} columns)")
        return report
