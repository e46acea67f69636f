from __future__ import annotations

import logging
from typing import Iterable, Iterator, Optional

from daypass.models import CATEGORIES, DAYS, Batch, Product, slot_keys
from daypass.services.batches import get_active_batch, get_batch
from daypass.services.products import list_products

logger = logging.getLogger(__name__)


def placeholder_product(batch_id: Optional[str], day: int, category: str) -> Product:
    """Zero-priced, zero-stock stand-in for a matrix slot with no stored row."""
    return Product(batch_id=batch_id, day=day, category=category)


class CatalogModel:
    """
    Read-only price matrix of one batch: exactly one product per (day, category).

    Slots missing from the store are filled with placeholders in memory only; they are
    written when an admin saves the matrix.
    """

    def __init__(self, batch: Optional[Batch], products: Iterable[Product] = ()) -> None:
        self.batch = batch
        batch_id = batch.id if batch else None

        stored: dict[tuple[int, str], Product] = {}
        for p in products:
            if p.day not in DAYS or p.category not in CATEGORIES:
                logger.warning("Ignoring product outside the day/category matrix: %r", p.key)
                continue
            stored[p.key] = p

        self._products: dict[tuple[int, str], Product] = {
            key: stored.get(key) or placeholder_product(batch_id, *key) for key in slot_keys()
        }

    @property
    def batch_id(self) -> Optional[str]:
        return self.batch.id if self.batch else None

    def lookup(self, day: int, category: str) -> Optional[Product]:
        return self._products.get((day, category))

    def is_available(self, day: int, category: str) -> bool:
        p = self.lookup(day, category)
        return p is not None and p.is_available

    def display_name(self, day: int, category: str) -> Optional[str]:
        p = self.lookup(day, category)
        return p.label if p else None

    def description(self, day: int, category: str) -> Optional[str]:
        p = self.lookup(day, category)
        return p.description if p else None

    def products(self, category: Optional[str] = None) -> list[Product]:
        return [p for p in self._products.values() if category is None or p.category == category]

    def is_empty(self) -> bool:
        """True when nothing can be bought (no batch, or every slot sold out)."""
        return not any(p.is_available for p in self._products.values())

    def __iter__(self) -> Iterator[Product]:
        return iter(self._products.values())

    def __len__(self) -> int:
        return len(self._products)


def load_catalog(conn, batch_id: str, *, batch: Optional[Batch] = None) -> CatalogModel:
    """Always 12 products, day ascending then M, F. A batch deleted meanwhile gives batch=None."""
    if batch is None:
        batch = get_batch(conn, batch_id)
    return CatalogModel(batch, list_products(conn, batch_id))


def load_storefront_catalog(conn) -> CatalogModel:
    """
    Catalog of the active batch, or an empty catalog when no batch is active.

    The batch and its products are two separate reads; if the batch is deactivated or
    deleted in between, whatever products come back (possibly none) are used as is.
    """
    batch = get_active_batch(conn)
    if batch is None:
        return CatalogModel(None)
    return load_catalog(conn, batch.id, batch=batch)
