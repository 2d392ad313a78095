from __future__ import annotations

from typing import List

import streamlit as st

from car_dashboard.data.kpis import calculate_kpis
from car_dashboard.data.models import ListingRecord
from car_dashboard.data.transforms import daily_price_series, listed_vs_sold_series
from car_dashboard.ui.components.charts import line_chart, multi_line_chart, render_plotly
from car_dashboard.ui.components.kpi import comparison_cards, render_kpi_cards
from car_dashboard.ui.pages.context import PageContext


def render(filtered: List[ListingRecord], context: PageContext) -> None:
    st.subheader("Market Overview")

    summary = context.comparison.current if context.comparison else calculate_kpis(filtered)
    render_kpi_cards(comparison_cards(summary, context.comparison, context.config.currency_symbol))
    if context.comparison is not None:
        st.caption("Changes compare against the preceding period of equal length.")

    daily = daily_price_series(filtered)
    if daily.empty:
        st.info("No dated listings to chart for the current filters.")
    else:
        price_fig = multi_line_chart(
            daily,
            x="date",
            series={
                "average_price": "Average price",
                "ma7": "7-day average",
                "ma30": "30-day average",
            },
            title="Average Listing Price",
            yaxis_title="Price",
            yaxis_tickformat="$,.0f",
            dashed=("ma7", "ma30"),
        )
        render_plotly(price_fig)

        volume_fig = line_chart(
            daily,
            x="date",
            y="count",
            title="Listings per Day",
            yaxis_title="Listings",
            hover_data=["min_price", "max_price"],
        )
        render_plotly(volume_fig)

    listed_sold = listed_vs_sold_series(filtered)
    if listed_sold.empty:
        return
    st.markdown("### Listed vs Sold")
    fig = multi_line_chart(
        listed_sold,
        x="date",
        series={
            "average_listed_price": "Avg. listed price",
            "average_sold_price": "Avg. sold price",
        },
        yaxis_title="Price",
        yaxis_tickformat="$,.0f",
    )
    render_plotly(fig)
