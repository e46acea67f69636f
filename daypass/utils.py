from __future__ import annotations

import uuid
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any

CENTS = Decimal("0.01")


def iso_now() -> str:
    # Use UTC ISO timestamps for consistency.
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def new_id() -> str:
    return uuid.uuid4().hex


def to_money(value: Any) -> Decimal:
    """
    Coerce a stored or typed amount into a 2-place Decimal.

    Floats go through str() so 89.9 becomes Decimal("89.90"), not its binary expansion.
    Raises ValueError for anything that is not a number.
    """
    if value is None:
        return Decimal("0.00")
    if isinstance(value, Decimal):
        d = value
    else:
        try:
            d = Decimal(str(value).strip() or "0")
        except InvalidOperation:
            raise ValueError(f"Not a number: {value!r}")
    if not d.is_finite():
        raise ValueError(f"Not a number: {value!r}")
    return d.quantize(CENTS)


def to_whole(value: Any) -> int:
    """int() that refuses to truncate: 2.7 and "2.5" raise ValueError, 3.0 gives 3."""
    if isinstance(value, bool):
        raise ValueError(f"Not a whole number: {value!r}")
    try:
        n = int(value)
    except (TypeError, ValueError):
        n = int(float(value))
    if float(value) != n:
        raise ValueError(f"Not a whole number: {value!r}")
    return n


def clean_text(value: Any) -> str | None:
    if value is None:
        return None
    s = str(value).strip()
    return s if s else None
