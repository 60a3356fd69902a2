"""
Tests for the simulation data models.
"""

import math
import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from snowdrift.models import (
    Column,
    Pile,
    PileView,
    Rect,
    WindowSnapshot,
    clamp_height,
)


def make_pile(x=100.0, y=0.0, width=200.0, height=100.0) -> Pile:
    return Pile(window_id="w1", window_frame=Rect(x, y, width, height))


# ===========================================================================
# clamp_height Tests
# ===========================================================================

class TestClampHeight:
    @pytest.mark.parametrize("value,expected", [
        (5.0, 5.0),
        (0.0, 0.0),
        (-1e-12, 0.0),
        (-3.0, 0.0),
        (80.0, 80.0),
        (120.0, 80.0),
        (float('nan'), 0.0),
    ])
    def test_clamps(self, value, expected):
        assert clamp_height(value, 80.0) == expected


# ===========================================================================
# Rect Tests
# ===========================================================================

class TestRect:
    def test_edges(self):
        r = Rect(10, 20, 100, 50)
        assert (r.min_x, r.max_x, r.min_y, r.max_y) == (10, 110, 20, 70)
        assert r.top == 70

    def test_contains_is_edge_inclusive(self):
        r = Rect(0, 0, 10, 10)
        assert r.contains(0, 0)
        assert r.contains(10, 10)
        assert r.contains(5, 5)
        assert not r.contains(10.01, 5)
        assert not r.contains(5, -0.01)

    def test_spans_x(self):
        r = Rect(100, 0, 200, 10)
        assert r.spans_x(100)
        assert r.spans_x(300)
        assert not r.spans_x(99.9)

    def test_frozen(self):
        r = Rect(0, 0, 1, 1)
        with pytest.raises(Exception):
            r.x = 5

    def test_window_snapshot(self):
        w = WindowSnapshot(42, Rect(0, 0, 100, 100), stack_rank=0)
        assert w.title == ""
        assert w.window_id == 42


# ===========================================================================
# Pile Tests
# ===========================================================================

class TestPile:
    def test_new_pile_is_empty(self):
        pile = make_pile()
        assert pile.is_empty
        assert pile.max_height_value() == 0.0
        assert pile.average_age() == 0.0

    def test_index_and_offset(self):
        pile = make_pile()
        assert pile.index_for(40) == 5
        assert pile.index_for(47.99) == 5
        assert pile.index_for(-0.5) == -1
        assert pile.offset_of(5) == 40

    def test_set_height_creates_and_clamps(self):
        pile = make_pile()
        column = pile.set_height(3, 500.0, age=1.5)
        assert column.height == pile.max_height
        assert column.age == 1.5
        pile.set_height(3, -2.0)
        assert pile.height_at(3) == 0.0
        assert pile.columns[3].age == 1.5

    def test_height_at_missing_is_zero(self):
        assert make_pile().height_at(7) == 0.0

    def test_height_at_x_uses_window_origin(self):
        pile = make_pile(x=100)
        pile.set_height(5, 3.0)
        assert pile.height_at_x(141) == 3.0
        assert pile.height_at_x(149) == 0.0

    def test_totals(self):
        pile = make_pile()
        pile.columns[1] = Column(2.0, 10.0)
        pile.columns[2] = Column(4.0, 20.0)
        assert pile.total_height() == 6.0
        assert pile.max_height_value() == 4.0
        assert pile.average_age() == 15.0

    def test_sorted_columns_and_surface(self):
        pile = make_pile(x=100, height=100)
        pile.set_height(4, 1.0)
        pile.set_height(2, 2.0)
        assert [i for i, _ in pile.sorted_columns()] == [2, 4]
        assert pile.surface_points() == [(100 + 16 + 4, 102.0), (100 + 32 + 4, 101.0)]


class TestPileOpacity:
    def test_young_pile_is_solid(self):
        pile = make_pile()
        pile.set_height(2, 5.0, age=10.0)
        assert pile.opacity() == 0.95

    def test_fades_linearly(self):
        pile = make_pile()
        pile.set_height(2, 5.0, age=420.0)
        assert pile.opacity() == pytest.approx(0.95 - 0.5 * 0.65)

    def test_floor(self):
        pile = make_pile()
        pile.set_height(2, 5.0, age=600.0)
        assert pile.opacity() == pytest.approx(0.3)


# ===========================================================================
# PileView Tests
# ===========================================================================

class TestPileView:
    def test_from_pile_copies(self):
        pile = make_pile()
        pile.set_height(6, 2.0)
        pile.set_height(3, 1.0)
        view = PileView.from_pile(pile)
        assert view.columns == ((24.0, 1.0), (48.0, 2.0))
        assert view.window_frame == pile.window_frame

        pile.set_height(3, 9.0)
        assert view.columns[0] == (24.0, 1.0)
        assert math.isclose(view.opacity, 0.95)
