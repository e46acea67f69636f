from __future__ import annotations

import streamlit as st
import pandas as pd

from daypass.config import get_settings
from daypass.db import get_conn, ensure_schema
from daypass.errors import DayPassError
from daypass.models import CATEGORIES, CATEGORY_LABELS, DAYS, QUANTITIES, Selection
from daypass.services.catalog import CatalogModel, load_storefront_catalog
from daypass.services.pricing import checkout_preview, format_money, quote

SELECTION_KEY = "daypass_selection"
SELECTION_BATCH_KEY = "daypass_selection_batch"

st.title("🎟️ Choose your days")
st.caption("The more days you pick, the lower the price per pass.")

settings = get_settings()
conn = get_conn(settings.db_path)
ensure_schema(conn)

try:
    catalog = load_storefront_catalog(conn)
except DayPassError as e:
    st.error(f"Could not load the catalog: {e}")
    st.stop()

# A different active batch invalidates the old picks.
if st.session_state.get(SELECTION_BATCH_KEY) != catalog.batch_id:
    st.session_state[SELECTION_KEY] = Selection()
    st.session_state[SELECTION_BATCH_KEY] = catalog.batch_id
    for day in DAYS:
        for category in CATEGORIES:
            st.session_state.pop(f"qty_{category}_{day}", None)

selection: Selection = st.session_state.setdefault(SELECTION_KEY, Selection())

if catalog.batch is None:
    st.info("No batch is on sale right now. Check back soon.", icon="ℹ️")
    st.stop()

if catalog.batch.description:
    st.write(catalog.batch.description)


def _day_picker(catalog: CatalogModel, category: str, day: int) -> None:
    key = f"qty_{category}_{day}"
    available = catalog.is_available(day, category)
    if not available:
        # Sold-out slots are never selectable.
        st.session_state[key] = 0

    label = catalog.display_name(day, category)
    qty = st.radio(
        label if available else f"{label} (sold out)",
        options=list(QUANTITIES),
        horizontal=True,
        key=key,
        disabled=not available,
        help=catalog.description(day, category),
        format_func=lambda n: {0: "None", 1: "1 pass", 2: "2 passes"}[n],
    )
    selection.set(day, category, int(qty) if available else 0)


col_m, col_f, col_sum = st.columns([1, 1, 1], gap="large")

for col, category in ((col_m, "M"), (col_f, "F")):
    with col:
        st.subheader(CATEGORY_LABELS[category])
        for day in DAYS:
            _day_picker(catalog, category, day)
        n = selection.distinct_days(category)
        st.caption(f"{n} day{'s' if n != 1 else ''} selected")

# Re-priced on every rerun, i.e. after every widget change.
result = quote(catalog, selection)

with col_sum:
    st.subheader("🛒 Summary")
    if result.is_empty():
        st.info("Select the days you want to see the price.")
    else:
        for category in CATEGORIES:
            cq = result.category(category)
            if cq.total_units == 0:
                continue
            st.metric(
                f"{CATEGORY_LABELS[category]} · {cq.total_units} pass{'es' if cq.total_units != 1 else ''}",
                format_money(cq.total, settings.currency),
            )

        lines = [
            {
                "Category": CATEGORY_LABELS[line.category],
                "Pass": catalog.display_name(line.day, line.category),
                "Qty": line.quantity,
                "Unit prices": " + ".join(format_money(p, settings.currency) for p in line.unit_prices),
                "Subtotal": format_money(line.total, settings.currency),
            }
            for cq in result.categories.values()
            for line in cq.lines
        ]
        st.dataframe(pd.DataFrame(lines), width="stretch", hide_index=True)

        st.divider()
        c1, c2 = st.columns(2)
        c1.metric("Total", format_money(result.grand_total, settings.currency))
        c2.metric("You save", format_money(result.savings, settings.currency))
        st.caption(f"Without multi-day discount: {format_money(result.reference_total, settings.currency)}")

    if st.button("Checkout", type="primary", width="stretch"):
        try:
            checkout_preview(result)
            st.info("Payments are coming soon. Your selection is kept on this page.")
        except DayPassError as e:
            st.error(str(e))

    if st.button("Clear selection", width="stretch"):
        selection.clear()
        for day in DAYS:
            for category in CATEGORIES:
                st.session_state.pop(f"qty_{category}_{day}", None)
        st.rerun()

    st.caption("💡 Tip: the more days you buy, the lower the price per pass!")
