from __future__ import annotations

import logging
import sqlite3
import threading
from pathlib import Path
from typing import Any, Iterable

import streamlit as st

from daypass.errors import StoreError
from daypass.schema import SCHEMA_SQL

logger = logging.getLogger(__name__)

# get_conn hands one connection to every session; a commit from one writer must not
# land in the middle of another writer's transaction.
_write_lock = threading.Lock()


def _connect(db_path: Path | str) -> sqlite3.Connection:
    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


@st.cache_resource
def get_conn(db_path: Path) -> sqlite3.Connection:
    return _connect(db_path)


def _column_exists(conn: sqlite3.Connection, table: str, column: str) -> bool:
    rows = conn.execute(f"PRAGMA table_info({table});").fetchall()
    cols = [r["name"] for r in rows]
    return column in cols


def ensure_schema(conn: sqlite3.Connection) -> None:
    # Create base schema (for new installs)
    conn.executescript(SCHEMA_SQL)

    # ---- migrations for existing installs ----
    # Product label override and description were added after the first release
    if not _column_exists(conn, "products", "display_name"):
        conn.execute("ALTER TABLE products ADD COLUMN display_name TEXT;")
        logger.info("Added products.display_name column")
    if not _column_exists(conn, "products", "description"):
        conn.execute("ALTER TABLE products ADD COLUMN description TEXT;")
        logger.info("Added products.description column")

    conn.commit()


def q(conn: sqlite3.Connection, sql: str, params: Iterable[Any] = ()) -> list[sqlite3.Row]:
    try:
        cur = conn.execute(sql, tuple(params))
        rows = cur.fetchall()
        cur.close()
    except sqlite3.Error as e:
        logger.error("Store read failed: %s", e)
        raise StoreError(f"Catalog store read failed: {e}") from e
    return rows


def x(conn: sqlite3.Connection, sql: str, params: Iterable[Any] = ()) -> int:
    """Execute one write and commit. Returns the number of rows changed."""
    with _write_lock:
        try:
            cur = conn.execute(sql, tuple(params))
            conn.commit()
            changed = cur.rowcount
            cur.close()
        except sqlite3.Error as e:
            conn.rollback()
            logger.error("Store write failed: %s", e)
            raise StoreError(f"Catalog store write failed: {e}") from e
    return int(changed)


def tx(conn: sqlite3.Connection, statements: Iterable[tuple[str, Iterable[Any]]]) -> None:
    """Run several writes in one transaction: all of them commit or none do."""
    with _write_lock:
        try:
            with conn:
                for sql, params in statements:
                    conn.execute(sql, tuple(params))
        except sqlite3.Error as e:
            logger.error("Store transaction failed: %s", e)
            raise StoreError(f"Catalog store write failed: {e}") from e
