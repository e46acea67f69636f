from __future__ import annotations

from decimal import Decimal

import pytest

from daypass.db import _connect, ensure_schema
from daypass.models import BracketTable, Product, slot_keys
from daypass.services.batches import create_batch

STANDARD_PRICES = (100, 90, 80, 70, 60, 50)


@pytest.fixture
def conn():
    c = _connect(":memory:")
    ensure_schema(c)
    yield c
    c.close()


@pytest.fixture
def batch(conn):
    return create_batch(conn, name="Carnival", description="Main batch")


def make_matrix(batch_id, *, prices=STANDARD_PRICES, stock=10, overrides=None):
    """All 12 products with the same brackets; overrides maps (day, category) -> field dict."""
    overrides = overrides or {}
    out = []
    for day, category in slot_keys():
        fields = {"stock": stock, "brackets": BracketTable.of(prices)}
        fields.update(overrides.get((day, category), {}))
        out.append(Product(batch_id=batch_id, day=day, category=category, **fields))
    return out


def money(value) -> Decimal:
    return Decimal(str(value))
