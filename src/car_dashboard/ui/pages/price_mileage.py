from __future__ import annotations

from typing import List

import streamlit as st

from car_dashboard.data.models import ListingRecord
from car_dashboard.data.transforms import scatter_points
from car_dashboard.ui.components.charts import render_plotly, scatter_plot
from car_dashboard.ui.components.formatting import format_number
from car_dashboard.ui.pages.context import PageContext

HOVER_COLUMNS = ["year", "make", "model", "trim", "exterior_color", "transmission"]


def render(filtered: List[ListingRecord], context: PageContext) -> None:
    st.subheader("Price vs Mileage")
    points = scatter_points(filtered)
    if points.empty:
        st.info("No priced listings with a listing date for the current filters.")
        return

    x_axis = st.radio(
        "Horizontal axis",
        options=["mileage", "listed_at"],
        format_func=lambda c: "Mileage" if c == "mileage" else "Listing date",
        horizontal=True,
        key="price_mileage_axis",
    )
    plotted = points.dropna(subset=[x_axis])
    skipped = len(points) - len(plotted)
    fig = scatter_plot(
        plotted,
        x=x_axis,
        y="price",
        color="make" if context.criteria.make is None else "trim",
        hover_data=HOVER_COLUMNS,
        yaxis_title="Price",
        yaxis_tickformat="$,.0f",
    )
    render_plotly(fig)
    if skipped:
        st.caption(f"{format_number(skipped)} listings without mileage are not plotted.")
