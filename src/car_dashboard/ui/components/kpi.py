from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

import streamlit as st

from car_dashboard.data.models import KPIComparison, KPISummary
from car_dashboard.ui.components.formatting import (
    MISSING,
    format_currency,
    format_number,
    format_percent,
    format_points,
)


@dataclass
class KpiCard:
    label: str
    value: Optional[float] = None
    value_display: Optional[str] = None
    currency: Optional[str] = None
    decimals: int = 0
    delta: Optional[float] = None
    delta_format: str = "pct"  # pct | pts
    delta_color: str = "normal"  # normal | inverse | off
    help_text: Optional[str] = None


def _format_value(card: KpiCard) -> str:
    if card.value_display is not None:
        return card.value_display
    if card.currency:
        return format_currency(card.value, currency=card.currency, decimals=card.decimals)
    return format_number(card.value, decimals=card.decimals)


def _format_delta(card: KpiCard) -> Optional[str]:
    if card.delta is None:
        return None
    if card.delta_format == "pts":
        return format_points(card.delta)
    return format_percent(card.delta, signed=True)


def comparison_cards(
    summary: KPISummary,
    comparison: Optional[KPIComparison] = None,
    currency: str = "$",
) -> List[KpiCard]:
    """The four headline cards; deltas come from the previous-window comparison."""
    changes = comparison.changes if comparison is not None else None
    return [
        KpiCard(
            label="Price Trend",
            value_display=format_percent(summary.percentage_change, signed=True),
            delta=changes.percentage_change if changes else None,
            delta_format="pts",
            help_text="Least-squares trend across listings ordered by listing date.",
        ),
        KpiCard(
            label="Total Listings",
            value=summary.total_listings,
            delta=changes.total_listings if changes else None,
        ),
        KpiCard(
            label="Avg. Days on Market",
            value=summary.average_days_on_market,
            decimals=1,
            delta=changes.average_days_on_market if changes else None,
            delta_color="inverse",
        ),
        KpiCard(
            label="Average Price",
            value=summary.average_price,
            currency=currency,
            delta=changes.average_price if changes else None,
        ),
    ]


def render_kpi_cards(cards: Sequence[KpiCard], columns: int = 4) -> None:
    """
    Render KPI cards in a responsive grid using Streamlit columns.
    """
    cards = list(cards)
    if not cards:
        st.info("No KPIs available for the current filters.")
        return

    columns = max(columns, 1)
    for idx in range(0, len(cards), columns):
        row_cards = cards[idx: idx + columns]
        cols = st.columns(len(row_cards))
        for col, card in zip(cols, row_cards):
            with col:
                delta = _format_delta(card)
                st.metric(
                    label=card.label,
                    value=_format_value(card),
                    delta=None if delta == MISSING else delta,
                    delta_color=card.delta_color,
                )
                if card.help_text:
                    st.caption(card.help_text)
