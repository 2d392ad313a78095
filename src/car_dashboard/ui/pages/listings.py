from __future__ import annotations

from typing import List

import streamlit as st

from car_dashboard.data.models import ListingRecord
from car_dashboard.data.transforms import records_to_frame
from car_dashboard.ui.components.tables import render_table
from car_dashboard.ui.pages.context import PageContext


def render(filtered: List[ListingRecord], context: PageContext) -> None:
    st.subheader("Listings")
    config = context.config
    frame = records_to_frame(filtered)
    render_table(
        frame,
        columns=config.table_columns,
        sortable_columns=config.sortable_columns,
        column_config={
            "price": {"type": "currency", "currency": config.currency_symbol},
            "mileage": {"type": "number"},
        },
        labels=dict(config.field_labels),
        export_file_name="car_listings.csv",
    )
