from __future__ import annotations

import logging
from typing import Optional

from daypass.db import q, x, tx
from daypass.errors import NotFoundError, ValidationError
from daypass.models import Batch
from daypass.utils import clean_text, iso_now, new_id

logger = logging.getLogger(__name__)

# created_at has second resolution; rowid keeps same-second inserts newest-first.
_NEWEST_FIRST = "ORDER BY created_at DESC, rowid DESC"


def _row_to_batch(row) -> Batch:
    return Batch(
        id=str(row["id"]),
        name=str(row["name"]),
        description=row["description"],
        active=bool(row["active"]),
        created_at=str(row["created_at"]),
    )


def list_batches(conn) -> list[Batch]:
    return [_row_to_batch(r) for r in q(conn, f"SELECT * FROM batches {_NEWEST_FIRST}")]


def get_batch(conn, batch_id: str) -> Optional[Batch]:
    rows = q(conn, "SELECT * FROM batches WHERE id=?", (str(batch_id),))
    return _row_to_batch(rows[0]) if rows else None


def require_batch(conn, batch_id: str) -> Batch:
    batch = get_batch(conn, batch_id)
    if batch is None:
        raise NotFoundError("Batch not found.")
    return batch


def list_active_batches(conn) -> list[Batch]:
    return [_row_to_batch(r) for r in q(conn, f"SELECT * FROM batches WHERE active=1 {_NEWEST_FIRST}")]


def get_active_batch(conn) -> Optional[Batch]:
    """
    The batch the storefront sells from.

    Activation keeps at most one batch active, but a database edited by hand (or by an
    older release) can carry several. The newest one wins and the rest are reported.
    """
    active = list_active_batches(conn)
    if not active:
        return None
    if len(active) > 1:
        logger.warning(
            "%d batches are active; storefront uses the newest (%s)", len(active), active[0].id
        )
    return active[0]


def create_batch(conn, *, name: str, description: Optional[str] = None) -> Batch:
    name = clean_text(name)
    if not name:
        raise ValidationError("Batch name is required.")

    batch = Batch(
        id=new_id(),
        name=name,
        description=clean_text(description),
        active=False,
        created_at=iso_now(),
    )
    x(
        conn,
        "INSERT INTO batches (id, name, description, active, created_at) VALUES (?, ?, ?, 0, ?)",
        (batch.id, batch.name, batch.description, batch.created_at),
    )
    logger.info("Created batch %s (%s)", batch.id, batch.name)
    return batch


def set_batch_active(conn, batch_id: str, active: bool) -> Batch:
    """
    Activate or deactivate a batch.

    Activating deactivates every other batch in the same transaction, so at most one
    batch is ever active. Deactivating only touches this batch; no active batch is a
    valid state and the storefront shows an empty catalog.
    """
    require_batch(conn, batch_id)

    if active:
        tx(
            conn,
            [
                ("UPDATE batches SET active=0 WHERE active=1 AND id<>?", (str(batch_id),)),
                ("UPDATE batches SET active=1 WHERE id=?", (str(batch_id),)),
            ],
        )
    else:
        x(conn, "UPDATE batches SET active=0 WHERE id=?", (str(batch_id),))

    logger.info("Batch %s %s", batch_id, "activated" if active else "deactivated")
    return require_batch(conn, batch_id)


def delete_batch(conn, batch_id: str, *, missing_ok: bool = False) -> bool:
    """
    Delete a batch; its products go with it (FK cascade).

    Returns False when the batch was already gone and missing_ok is set.
    """
    changed = x(conn, "DELETE FROM batches WHERE id=?", (str(batch_id),))
    if changed == 0:
        if missing_ok:
            return False
        raise NotFoundError("Batch not found.")
    logger.info("Deleted batch %s", batch_id)
    return True
