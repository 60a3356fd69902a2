"""
Tests for the Constants module.

Tests the tuning constants and the relationships the engines rely on.
"""

import os
import sys


# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from snowdrift.constants import (
    Decay,
    Fade,
    Geometry,
    ParticleCounts,
    Settling,
    Sleigh,
    Slope,
    Timing,
)


# ===========================================================================
# Geometry and Settling Tests
# ===========================================================================

class TestGeometry:
    def test_values(self):
        assert Geometry.COLUMN_WIDTH == 8.0
        assert Geometry.CORNER_RADIUS == 10.0
        assert Geometry.MIN_WINDOW_SIZE == 50.0
        assert Geometry.COLLISION_TOLERANCE == 5.0

    def test_corners_fit_in_smallest_window(self):
        assert 2 * Geometry.CORNER_RADIUS < Geometry.MIN_WINDOW_SIZE


class TestSettling:
    def test_values(self):
        assert Settling.MAX_HEIGHT == 80.0
        assert Settling.DEPOSIT_SCALE == 0.5
        assert Settling.MIN_HEIGHT_EPSILON == 0.1
        assert Settling.MAX_COLUMN_AGE == 600.0

    def test_epsilon_below_max(self):
        assert 0 < Settling.MIN_HEIGHT_EPSILON < Settling.MAX_HEIGHT


# ===========================================================================
# Decay and Slope Tests
# ===========================================================================

class TestDecay:
    def test_compaction_starts_before_melt(self):
        assert Decay.SETTLE_THRESHOLD < Decay.IDLE_MELT_THRESHOLD

    def test_melt_onset_before_max_age(self):
        assert Decay.IDLE_MELT_THRESHOLD < Settling.MAX_COLUMN_AGE

    def test_compaction_floor(self):
        assert Decay.MIN_COMPACTED_HEIGHT <= Decay.COMPACTION_FLOOR
        assert Decay.COMPACTION_FLOOR > Settling.MIN_HEIGHT_EPSILON


class TestSlope:
    def test_aggressive_is_stronger(self):
        assert Slope.AGGRESSIVE_RATE > Slope.GENTLE_RATE
        assert Slope.AGGRESSIVE_VARIATION > Slope.GENTLE_VARIATION
        assert Slope.AGGRESSIVE_PASSES > Slope.GENTLE_PASSES

    def test_threshold_stays_positive(self):
        assert Slope.BASE_THRESHOLD - Slope.AGGRESSIVE_VARIATION > Slope.MIN_THRESHOLD

    def test_rates_never_overshoot(self):
        assert Slope.AGGRESSIVE_RATE * (1 + Slope.TRANSFER_JITTER) <= 0.5


# ===========================================================================
# Timing, Fade, Counts, Sleigh Tests
# ===========================================================================

class TestTiming:
    def test_frame_interval_matches_rate(self):
        assert abs(Timing.FRAME_INTERVAL - 1.0 / Timing.FRAME_RATE) < 1e-12

    def test_refresh_slower_than_frames(self):
        assert Timing.WINDOW_REFRESH_INTERVAL > Timing.FRAME_INTERVAL


class TestFade:
    def test_opacity_range(self):
        assert 0 < Fade.MIN_OPACITY < Fade.MAX_OPACITY <= 1.0

    def test_fade_starts_before_max_age(self):
        assert Fade.START_AGE < Settling.MAX_COLUMN_AGE


class TestParticleCounts:
    def test_ordered(self):
        assert ParticleCounts.LIGHT < ParticleCounts.MEDIUM < ParticleCounts.HEAVY
        assert (ParticleCounts.LIGHT, ParticleCounts.MEDIUM, ParticleCounts.HEAVY) == (100, 250, 500)


class TestSleigh:
    def test_four_frames(self):
        assert len(Sleigh.FRAME_NAMES) == 4
        assert all(name.startswith("RegularSantaRudolf") for name in Sleigh.FRAME_NAMES)

    def test_ranges(self):
        assert Sleigh.MIN_SPEED < Sleigh.MAX_SPEED
        assert Sleigh.MIN_INTERVAL < Sleigh.MAX_INTERVAL
        assert Sleigh.START_X < 0
