from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

import pandas as pd

from daypass.db import q, x
from daypass.errors import MatrixSaveError, StoreError, ValidationError
from daypass.models import (
    BRACKET_COLUMNS,
    BracketTable,
    CATEGORY_LABELS,
    Product,
    check_category,
    check_day,
    slot_keys,
)
from daypass.services.batches import require_batch
from daypass.utils import clean_text, new_id, to_money, to_whole

logger = logging.getLogger(__name__)

# Admin grid columns; bracket columns are named by how many distinct days they price.
FRAME_COLUMNS = ["Day", "Category", "Name", "Description", "Stock"] + [
    f"{k} day" if k == 1 else f"{k} days" for k in range(1, len(BRACKET_COLUMNS) + 1)
]
_FRAME_BRACKETS = FRAME_COLUMNS[5:]
_LABEL_TO_CATEGORY = {v: k for k, v in CATEGORY_LABELS.items()}


def _row_to_product(row) -> Product:
    return Product(
        id=str(row["id"]),
        batch_id=str(row["batch_id"]),
        day=int(row["day"]),
        category=str(row["category"]),
        stock=int(row["stock"]),
        brackets=BracketTable.of(row[c] for c in BRACKET_COLUMNS),
        display_name=row["display_name"],
        description=row["description"],
    )


def list_products(conn, batch_id: str, *, day: Optional[int] = None, category: Optional[str] = None) -> list[Product]:
    sql = "SELECT * FROM products WHERE batch_id=?"
    params: list[Any] = [str(batch_id)]
    if day is not None:
        sql += " AND day=?"
        params.append(check_day(day))
    if category is not None:
        sql += " AND category=?"
        params.append(check_category(category))
    sql += " ORDER BY day ASC, CASE category WHEN 'M' THEN 0 ELSE 1 END"
    return [_row_to_product(r) for r in q(conn, sql, params)]


_FIELD_NAMES = ("display_name", "description", "stock", "brackets")


def _normalize_fields(fields: dict) -> dict:
    """Validate the product fields that are present; absent keys stay absent."""
    unknown = sorted(set(fields) - set(_FIELD_NAMES))
    if unknown:
        raise ValidationError(f"Unknown product field(s): {', '.join(unknown)}.")

    out: dict[str, Any] = {}
    if "stock" in fields:
        try:
            stock = to_whole(fields["stock"])
        except (TypeError, ValueError):
            raise ValidationError("Stock must be a whole number.")
        if stock < 0:
            raise ValidationError("Stock must be >= 0.")
        out["stock"] = stock

    if "brackets" in fields:
        brackets = fields["brackets"]
        if brackets is None:
            brackets = BracketTable.zeros()
        elif not isinstance(brackets, BracketTable):
            brackets = BracketTable.of(brackets)
        out["brackets"] = brackets

    for key in ("display_name", "description"):
        if key in fields:
            out[key] = clean_text(fields[key])
    return out


def upsert_product(conn, batch_id: str, day: int, category: str, fields: dict) -> None:
    """
    Insert or update the product at (batch_id, day, category).

    A new row takes defaults (stock 0, zero prices, no name) for the fields not given.
    An existing row only has the given fields overwritten. Writing the same fields
    twice leaves the row as it was, so a retry is safe.
    """
    check_day(day)
    check_category(category)
    f = _normalize_fields(fields)

    row = {"display_name": None, "description": None, "stock": 0, "brackets": BracketTable.zeros(), **f}
    prices = [float(p) for p in row["brackets"]]

    changed = [c for c in ("display_name", "description", "stock") if c in f]
    if "brackets" in f:
        changed += BRACKET_COLUMNS
    if changed:
        on_conflict = "DO UPDATE SET " + ", ".join(f"{c}=excluded.{c}" for c in changed)
    else:
        on_conflict = "DO NOTHING"

    cols = ", ".join(BRACKET_COLUMNS)
    marks = ", ".join("?" for _ in BRACKET_COLUMNS)
    x(
        conn,
        f"""
        INSERT INTO products (id, batch_id, day, category, display_name, description, stock, {cols})
        VALUES (?, ?, ?, ?, ?, ?, ?, {marks})
        ON CONFLICT (batch_id, day, category) {on_conflict}
        """,
        (new_id(), str(batch_id), int(day), str(category), row["display_name"], row["description"], row["stock"], *prices),
    )


def _validate_matrix(products: Iterable[Product]) -> dict[tuple[int, str], Product]:
    by_key: dict[tuple[int, str], Product] = {}
    for p in products:
        try:
            key = (check_day(p.day), check_category(p.category))
        except ValueError as e:
            raise ValidationError(str(e))
        if key in by_key:
            raise ValidationError(f"Duplicate entry for day {key[0]} / {CATEGORY_LABELS[key[1]]}.")
        _normalize_fields({"stock": p.stock, "brackets": p.brackets})
        by_key[key] = p

    missing = [k for k in slot_keys() if k not in by_key]
    if missing:
        names = ", ".join(f"day {d} / {CATEGORY_LABELS[c]}" for d, c in missing)
        raise ValidationError(f"The product matrix needs all 12 entries; missing: {names}.")
    return by_key


def save_product_matrix(conn, batch_id: str, products: Iterable[Product]) -> int:
    """
    Upsert all 12 (day, category) products of a batch, in catalog order.

    Everything is validated before the first write. A failed upsert stops the save and
    raises MatrixSaveError naming the entry; rows already written stay written.
    Returns the number of rows written.
    """
    require_batch(conn, batch_id)
    by_key = _validate_matrix(products)

    written = 0
    for day, category in slot_keys():
        p = by_key[(day, category)]
        try:
            upsert_product(
                conn,
                batch_id,
                day,
                category,
                {
                    "display_name": p.display_name,
                    "description": p.description,
                    "stock": p.stock,
                    "brackets": p.brackets,
                },
            )
        except StoreError as e:
            logger.error("Matrix save for batch %s stopped at day %s / %s: %s", batch_id, day, category, e)
            raise MatrixSaveError(
                f"Could not save day {day} / {CATEGORY_LABELS[category]} ({written} of 12 saved): {e}",
                day=day,
                category=category,
                written=written,
                cause=e,
            ) from e
        written += 1

    logger.info("Saved product matrix for batch %s", batch_id)
    return written


def bracket_warnings(products: Iterable[Product]) -> list[str]:
    """Products whose prices rise with more days, which would make savings negative."""
    out: list[str] = []
    for p in products:
        if not p.brackets.is_non_increasing():
            out.append(f"Day {p.day} / {CATEGORY_LABELS[p.category]}: prices increase with more days.")
    return out


# -------------------------
# Admin grid (pandas)
# -------------------------

def products_frame(products: Iterable[Product]) -> pd.DataFrame:
    rows = []
    for p in products:
        row = {
            "Day": p.day,
            "Category": CATEGORY_LABELS[p.category],
            "Name": p.display_name or "",
            "Description": p.description or "",
            "Stock": p.stock,
        }
        for col, price in zip(_FRAME_BRACKETS, p.brackets):
            row[col] = float(price)
        rows.append(row)
    return pd.DataFrame(rows, columns=FRAME_COLUMNS)


def _cell_text(value: Any) -> Optional[str]:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    return clean_text(value)


def products_from_frame(batch_id: str, frame: pd.DataFrame) -> list[Product]:
    """Parse the edited admin grid back into products (ValidationError on bad cells)."""
    missing = [c for c in FRAME_COLUMNS if c not in frame.columns]
    if missing:
        raise ValidationError(f"Missing columns: {', '.join(missing)}.")

    out: list[Product] = []
    for _, r in frame.iterrows():
        try:
            day = int(r["Day"])
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid day: {r['Day']!r}.")
        category = _LABEL_TO_CATEGORY.get(str(r["Category"]), str(r["Category"]))
        where = f"day {day} / {r['Category']}"

        stock_cell = r["Stock"]
        if stock_cell is None or pd.isna(stock_cell):
            stock = 0
        else:
            try:
                stock = to_whole(stock_cell)
            except (TypeError, ValueError):
                raise ValidationError(f"Stock must be a whole number ({where}).")
        if stock < 0:
            raise ValidationError(f"Stock must be >= 0 ({where}).")

        prices = []
        for col in _FRAME_BRACKETS:
            cell = r[col]
            if cell is None or pd.isna(cell):
                cell = 0
            try:
                prices.append(to_money(cell))
            except ValueError:
                raise ValidationError(f"Price '{col}' must be a number ({where}).")
        try:
            brackets = BracketTable(tuple(prices))
        except ValidationError as e:
            raise ValidationError(f"{e} ({where})")

        out.append(
            Product(
                batch_id=batch_id,
                day=day,
                category=category,
                stock=stock,
                brackets=brackets,
                display_name=_cell_text(r["Name"]),
                description=_cell_text(r["Description"]),
            )
        )
    return out
