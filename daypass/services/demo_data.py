from __future__ import annotations

import logging
from decimal import Decimal

from daypass.db import tx
from daypass.models import BracketTable, Product, slot_keys
from daypass.services.batches import create_batch, set_batch_active
from daypass.services.products import save_product_matrix

logger = logging.getLogger(__name__)

DEMO_BATCH_NAME = "Carnival 2025 - First batch"
# Base single-day price per category; each extra distinct day takes 10 off the unit price.
DEMO_BASE_PRICE = {"M": Decimal("180.00"), "F": Decimal("160.00")}
DEMO_STEP = Decimal("10.00")
DEMO_STOCK = 50
# One slot ships sold out so the storefront shows the unavailable state.
DEMO_SOLD_OUT = (6, "F")


def demo_products(batch_id: str) -> list[Product]:
    products = []
    for day, category in slot_keys():
        base = DEMO_BASE_PRICE[category]
        products.append(
            Product(
                batch_id=batch_id,
                day=day,
                category=category,
                stock=0 if (day, category) == DEMO_SOLD_OUT else DEMO_STOCK,
                brackets=BracketTable(tuple(base - DEMO_STEP * k for k in range(6))),
                description=f"Access pass for day {day}.",
            )
        )
    return products


def load_demo_data(conn, *, activate: bool = True) -> str:
    """Create a demo batch with a full price matrix; returns the new batch id."""
    batch = create_batch(conn, name=DEMO_BATCH_NAME, description="Demo batch with descending prices.")
    save_product_matrix(conn, batch.id, demo_products(batch.id))
    if activate:
        set_batch_active(conn, batch.id, True)
    logger.info("Loaded demo batch %s", batch.id)
    return batch.id


def wipe_all(conn) -> None:
    # Keep schema, delete data (order matters for FKs).
    tx(conn, [(f"DELETE FROM {t};", ()) for t in ["products", "batches", "admin_users"]])
    logger.info("Wiped all catalog and admin data")
