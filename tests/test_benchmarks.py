"""
Tests for the benchmark runner's frame budget check.
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from benchmarks.run_benchmarks import (
    FRAME_BUDGET_US,
    FRAME_SHARE_LIMITS,
    check_frame_budget,
    frame_share,
)


def stats(p99_us):
    return {"mean_us": p99_us / 2, "p99_us": p99_us, "ops_per_sec": 1.0}


class TestFrameBudget:
    def test_budget_is_one_frame_at_60hz(self):
        assert FRAME_BUDGET_US == pytest.approx(16666.67, rel=1e-4)

    def test_frame_share(self):
        assert frame_share(stats(FRAME_BUDGET_US / 4)) == pytest.approx(0.25)

    def test_within_budget(self):
        results = {"settling": {"tick_medium": stats(FRAME_BUDGET_US * 0.2)}}
        assert check_frame_budget(results) == []

    def test_over_budget(self):
        results = {"settling": {
            "tick_medium": stats(FRAME_BUDGET_US * 0.3),
            "deposit": stats(1.0),
        }}
        assert check_frame_budget(results) == ["tick_medium"]

    def test_unlimited_benchmarks_ignored(self):
        assert "parse_xpm" not in FRAME_SHARE_LIMITS
        results = {"sprites": {"parse_xpm": stats(FRAME_BUDGET_US * 10)}}
        assert check_frame_budget(results) == []
