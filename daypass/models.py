from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Iterator, Optional

from daypass.errors import ValidationError
from daypass.utils import to_money

DAYS = (1, 2, 3, 4, 5, 6)
CATEGORIES = ("M", "F")
CATEGORY_LABELS = {"M": "Male", "F": "Female"}

BRACKET_COUNT = 6
# Column names in the products table, index 0 holds bracket 1.
BRACKET_COLUMNS = tuple(f"price_bracket_{i}" for i in range(1, BRACKET_COUNT + 1))

QUANTITIES = (0, 1, 2)


def check_day(day: int) -> int:
    if isinstance(day, bool) or not isinstance(day, int) or day not in DAYS:
        raise ValueError(f"Day must be one of {DAYS}, got {day!r}.")
    return day


def check_category(category: str) -> str:
    if category not in CATEGORIES:
        raise ValueError(f"Category must be one of {CATEGORIES}, got {category!r}.")
    return category


def slot_keys() -> list[tuple[int, str]]:
    """All 12 (day, category) keys in catalog order: day ascending, then M, F."""
    return [(d, c) for d in DAYS for c in CATEGORIES]


def default_label(day: int) -> str:
    return f"Day {day}"


@dataclass(frozen=True)
class BracketTable:
    """
    Six unit prices; bracket k is the price when k distinct days are selected.

    Indexing is 1-based to match the bracket numbers shown to admins.
    """

    prices: tuple[Decimal, ...]

    def __post_init__(self) -> None:
        if len(self.prices) != BRACKET_COUNT:
            raise ValidationError(f"A bracket table needs exactly {BRACKET_COUNT} prices, got {len(self.prices)}.")
        for i, p in enumerate(self.prices, start=1):
            if p < 0:
                raise ValidationError(f"Bracket {i} price must be >= 0.")

    @classmethod
    def of(cls, values: Iterable) -> "BracketTable":
        try:
            prices = tuple(to_money(v) for v in values)
        except ValueError as e:
            raise ValidationError(f"Invalid bracket price: {e}")
        return cls(prices)

    @classmethod
    def zeros(cls) -> "BracketTable":
        return cls(tuple(Decimal("0.00") for _ in range(BRACKET_COUNT)))

    def price(self, k: int) -> Decimal:
        if isinstance(k, bool) or not isinstance(k, int) or not 1 <= k <= BRACKET_COUNT:
            raise ValueError(f"Bracket index must be in 1..{BRACKET_COUNT}, got {k!r}.")
        return self.prices[k - 1]

    def is_non_increasing(self) -> bool:
        return all(a >= b for a, b in zip(self.prices, self.prices[1:]))

    def __iter__(self) -> Iterator[Decimal]:
        return iter(self.prices)


@dataclass
class Batch:
    id: str
    name: str
    description: Optional[str]
    active: bool
    created_at: str


@dataclass
class Product:
    batch_id: Optional[str]
    day: int
    category: str
    stock: int = 0
    brackets: BracketTable = field(default_factory=BracketTable.zeros)
    display_name: Optional[str] = None
    description: Optional[str] = None
    id: Optional[str] = None

    @property
    def key(self) -> tuple[int, str]:
        return (self.day, self.category)

    @property
    def is_available(self) -> bool:
        return self.stock > 0

    @property
    def label(self) -> str:
        if self.display_name and self.display_name.strip():
            return self.display_name.strip()
        return default_label(self.day)

    @property
    def is_placeholder(self) -> bool:
        return self.id is None


class Selection:
    """
    A buyer's in-progress picks: (day, category) -> quantity in {0, 1, 2}.

    Keys and quantities are checked on every write; a bad one is a caller bug
    and raises ValueError instead of being clamped.
    """

    def __init__(self, quantities: Optional[dict[tuple[int, str], int]] = None) -> None:
        self._quantities: dict[tuple[int, str], int] = {}
        for (day, category), qty in (quantities or {}).items():
            self.set(day, category, qty)

    def set(self, day: int, category: str, quantity: int) -> None:
        key = (check_day(day), check_category(category))
        if isinstance(quantity, bool) or quantity not in QUANTITIES:
            raise ValueError(f"Quantity must be one of {QUANTITIES}, got {quantity!r}.")
        if quantity == 0:
            self._quantities.pop(key, None)
        else:
            self._quantities[key] = int(quantity)

    def quantity(self, day: int, category: str) -> int:
        return self._quantities.get((check_day(day), check_category(category)), 0)

    def days(self, category: str) -> list[tuple[int, int]]:
        """(day, quantity) pairs with quantity > 0, day ascending."""
        check_category(category)
        return sorted((d, q) for (d, c), q in self._quantities.items() if c == category)

    def distinct_days(self, category: str) -> int:
        return len(self.days(category))

    def total_units(self, category: str) -> int:
        return sum(q for _, q in self.days(category))

    def clear(self) -> None:
        self._quantities.clear()

    def is_empty(self) -> bool:
        return not self._quantities

    def as_dict(self) -> dict[tuple[int, str], int]:
        return dict(self._quantities)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Selection):
            return NotImplemented
        return self._quantities == other._quantities

    def __repr__(self) -> str:
        return f"Selection({self._quantities!r})"
