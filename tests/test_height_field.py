"""
Tests for the Height-Field Store.
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from snowdrift.config import SettlingConfig
from snowdrift.height_field import HeightFieldStore
from snowdrift.models import Rect


class TestHeightFieldStore:
    def test_upsert_creates_pile_from_config(self):
        store = HeightFieldStore(SettlingConfig(column_width=4.0, max_height=40.0))
        pile = store.upsert("a", Rect(0, 0, 100, 100))
        assert pile.column_width == 4.0
        assert pile.max_height == 40.0
        assert "a" in store
        assert len(store) == 1

    def test_upsert_refreshes_frame(self):
        store = HeightFieldStore()
        first = store.upsert("a", Rect(0, 0, 100, 100))
        second = store.upsert("a", Rect(50, 0, 100, 100))
        assert first is second
        assert first.window_frame.x == 50

    @pytest.mark.parametrize("rect", [Rect(0, 0, -1, 10), Rect(0, 0, 10, -1)])
    def test_negative_size_rejected(self, rect):
        with pytest.raises(ValueError):
            HeightFieldStore().upsert("a", rect)

    def test_get_and_remove(self):
        store = HeightFieldStore()
        pile = store.upsert("a", Rect(0, 0, 100, 100))
        assert store.get("a") is pile
        assert store.get("missing") is None
        assert store.remove("a") is pile
        assert store.remove("a") is None
        assert len(store) == 0

    def test_discard_empty(self):
        store = HeightFieldStore()
        store.upsert("empty", Rect(0, 0, 100, 100))
        full = store.upsert("full", Rect(0, 0, 100, 100))
        full.set_height(3, 1.0)
        assert store.discard_empty() == 1
        assert store.window_ids() == ["full"]
        assert store.total_columns() == 1

    def test_clear(self):
        store = HeightFieldStore()
        store.upsert("a", Rect(0, 0, 100, 100))
        store.upsert("b", Rect(0, 0, 100, 100))
        store.clear()
        assert store.all() == []

    def test_iteration_tolerates_removal(self):
        store = HeightFieldStore()
        for wid in "abc":
            store.upsert(wid, Rect(0, 0, 100, 100))
        for pile in store:
            store.remove(pile.window_id)
        assert len(store) == 0
