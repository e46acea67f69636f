from __future__ import annotations

from decimal import Decimal

from daypass.db import _column_exists, ensure_schema
from daypass.models import Selection
from daypass.services.auth import sign_up
from daypass.services.batches import list_batches
from daypass.services.catalog import load_storefront_catalog
from daypass.services.demo_data import DEMO_SOLD_OUT, load_demo_data, wipe_all
from daypass.services.pricing import quote
from daypass.services.products import bracket_warnings


def test_demo_batch_is_live(conn):
    batch_id = load_demo_data(conn)
    catalog = load_storefront_catalog(conn)
    assert catalog.batch_id == batch_id
    assert all(not p.is_placeholder for p in catalog)
    assert not catalog.is_available(*DEMO_SOLD_OUT)
    assert bracket_warnings(catalog) == []


def test_demo_prices(conn):
    load_demo_data(conn)
    catalog = load_storefront_catalog(conn)
    q = quote(catalog, Selection({(1, "M"): 1, (2, "M"): 1, (3, "F"): 2}))
    assert q.category("M").total == Decimal("340")  # 2 x 170
    assert q.category("F").total == Decimal("320")  # 160 + 160
    assert q.savings == Decimal("20")


def test_second_demo_load_replaces_active(conn):
    first = load_demo_data(conn)
    second = load_demo_data(conn)
    assert [b.id for b in list_batches(conn) if b.active] == [second]
    assert first != second


def test_wipe_all(conn):
    load_demo_data(conn)
    sign_up(conn, "a@example.com", "secret123")
    wipe_all(conn)
    for table in ("batches", "products", "admin_users"):
        assert conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0] == 0


def test_schema_migration_adds_product_columns():
    from daypass.db import _connect

    c = _connect(":memory:")
    c.executescript(
        """
        CREATE TABLE batches (id TEXT PRIMARY KEY, name TEXT NOT NULL, description TEXT,
                              active INTEGER NOT NULL DEFAULT 0, created_at TEXT NOT NULL);
        CREATE TABLE products (id TEXT PRIMARY KEY, batch_id TEXT NOT NULL, day INTEGER NOT NULL,
                               category TEXT NOT NULL, stock INTEGER NOT NULL DEFAULT 0,
                               price_bracket_1 REAL, price_bracket_2 REAL, price_bracket_3 REAL,
                               price_bracket_4 REAL, price_bracket_5 REAL, price_bracket_6 REAL,
                               UNIQUE (batch_id, day, category));
        """
    )
    ensure_schema(c)
    assert _column_exists(c, "products", "display_name")
    assert _column_exists(c, "products", "description")
    ensure_schema(c)
    c.close()
