from __future__ import annotations

from decimal import Decimal

import pytest

from daypass.errors import ValidationError
from daypass.models import BracketTable, Product, Selection, slot_keys


class TestBracketTable:
    def test_price_is_one_based(self):
        table = BracketTable.of([100, 90, 80, 70, 60, 50])
        assert table.price(1) == Decimal("100")
        assert table.price(6) == Decimal("50")

    @pytest.mark.parametrize("k", [0, 7, -1])
    def test_price_outside_range_raises(self, k):
        with pytest.raises(ValueError):
            BracketTable.zeros().price(k)

    def test_needs_exactly_six_prices(self):
        with pytest.raises(ValidationError):
            BracketTable.of([100, 90])

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            BracketTable.of([100, 90, 80, 70, 60, -1])

    def test_non_numeric_price_rejected(self):
        with pytest.raises(ValidationError):
            BracketTable.of([100, "abc", 80, 70, 60, 50])

    def test_float_amounts_keep_cents(self):
        table = BracketTable.of([89.9, 0, 0, 0, 0, 0])
        assert table.price(1) == Decimal("89.90")

    def test_is_non_increasing(self):
        assert BracketTable.of([100, 90, 90, 70, 60, 50]).is_non_increasing()
        assert not BracketTable.of([100, 110, 80, 70, 60, 50]).is_non_increasing()


class TestProduct:
    def test_label_falls_back_to_day(self):
        assert Product(batch_id="b", day=3, category="M").label == "Day 3"
        assert Product(batch_id="b", day=3, category="M", display_name="  ").label == "Day 3"
        assert Product(batch_id="b", day=3, category="M", display_name="Opening night").label == "Opening night"

    def test_available_only_with_stock(self):
        assert not Product(batch_id="b", day=1, category="F", stock=0).is_available
        assert Product(batch_id="b", day=1, category="F", stock=1).is_available


def test_slot_keys_order():
    keys = slot_keys()
    assert len(keys) == 12
    assert keys[:4] == [(1, "M"), (1, "F"), (2, "M"), (2, "F")]
    assert keys[-1] == (6, "F")


class TestSelection:
    def test_derived_counts(self):
        sel = Selection({(3, "M"): 2, (5, "M"): 1, (1, "F"): 1})
        assert sel.distinct_days("M") == 2
        assert sel.total_units("M") == 3
        assert sel.distinct_days("F") == 1
        assert sel.days("M") == [(3, 2), (5, 1)]

    def test_zero_removes_entry(self):
        sel = Selection()
        sel.set(2, "F", 1)
        sel.set(2, "F", 0)
        assert sel.is_empty()
        assert sel.quantity(2, "F") == 0

    @pytest.mark.parametrize(
        "day, category, qty",
        [(0, "M", 1), (7, "M", 1), (1, "X", 1), (1, "M", 3), (1, "M", -1), ("1", "M", 1), (1, "M", True)],
    )
    def test_malformed_input_fails_fast(self, day, category, qty):
        with pytest.raises(ValueError):
            Selection().set(day, category, qty)

    def test_clear(self):
        sel = Selection({(1, "M"): 1})
        sel.clear()
        assert sel == Selection()
