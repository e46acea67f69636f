"""
Quantity-bracket pricing for a buyer's selection.

Each category is priced on its own. With N distinct days selected in a category,
every single unit costs bracket[N]. A day with two units pays bracket[1] for the
first unit and bracket[N] for the second. The reference total prices every unit at
bracket[1]; savings is reference minus total.

Worked example, brackets [100, 90, 80, 70, 60, 50]:
    day 3 x2, day 5 x1  ->  N = 2
    day 3: 100 + 90, day 5: 90  ->  total 280, reference 300, savings 20

Pure and synchronous: callers re-run quote() after every selection change.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from daypass.errors import ValidationError
from daypass.models import CATEGORIES, Selection
from daypass.services.catalog import CatalogModel

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class LineQuote:
    day: int
    category: str
    quantity: int
    unit_prices: tuple[Decimal, ...]
    reference_total: Decimal

    @property
    def total(self) -> Decimal:
        return sum(self.unit_prices, ZERO)


@dataclass(frozen=True)
class CategoryQuote:
    category: str
    distinct_days: int = 0
    total_units: int = 0
    total: Decimal = ZERO
    reference_total: Decimal = ZERO
    lines: tuple[LineQuote, ...] = ()

    @property
    def savings(self) -> Decimal:
        return self.reference_total - self.total


@dataclass(frozen=True)
class Quote:
    categories: dict[str, CategoryQuote] = field(default_factory=dict)

    @property
    def grand_total(self) -> Decimal:
        return sum((c.total for c in self.categories.values()), ZERO)

    @property
    def reference_total(self) -> Decimal:
        return sum((c.reference_total for c in self.categories.values()), ZERO)

    @property
    def savings(self) -> Decimal:
        return self.reference_total - self.grand_total

    @property
    def total_units(self) -> int:
        return sum(c.total_units for c in self.categories.values())

    def is_empty(self) -> bool:
        return self.total_units == 0

    def category(self, category: str) -> CategoryQuote:
        return self.categories[category]


def quote_category(catalog: CatalogModel, selection: Selection, category: str) -> CategoryQuote:
    picked = selection.days(category)
    if not picked:
        return CategoryQuote(category=category)

    distinct_days = len(picked)
    lines: list[LineQuote] = []
    for day, qty in picked:
        product = catalog.lookup(day, category)
        if product is None:
            raise ValueError(f"No catalog slot for day {day} / {category}.")
        # Unavailable slots are the UI's job to block; they are still priced here.
        brackets = product.brackets
        if qty == 1:
            unit_prices = (brackets.price(distinct_days),)
        else:
            unit_prices = (brackets.price(1), brackets.price(distinct_days))
        lines.append(
            LineQuote(
                day=day,
                category=category,
                quantity=qty,
                unit_prices=unit_prices,
                reference_total=brackets.price(1) * qty,
            )
        )

    return CategoryQuote(
        category=category,
        distinct_days=distinct_days,
        total_units=sum(line.quantity for line in lines),
        total=sum((line.total for line in lines), ZERO),
        reference_total=sum((line.reference_total for line in lines), ZERO),
        lines=tuple(lines),
    )


def quote(catalog: CatalogModel, selection: Selection) -> Quote:
    return Quote(categories={c: quote_category(catalog, selection, c) for c in CATEGORIES})


def checkout_preview(q: Quote) -> Quote:
    """Gate for the checkout button. Payment itself is not handled here."""
    if q.is_empty():
        raise ValidationError("Cart is empty. Select at least one day to continue.")
    return q


def format_money(amount: Decimal, currency: str = "R$") -> str:
    return f"{currency} {amount:,.2f}"
