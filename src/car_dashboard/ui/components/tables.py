"""
Reusable helpers for rendering the listings table with sorting and export.
"""

from __future__ import annotations

from typing import Dict, Optional, Sequence

import pandas as pd
import streamlit as st

from car_dashboard.data.transforms import sort_listings
from car_dashboard.ui.components.formatting import format_currency, format_number


def _sort_controls(
    sortable_columns: Sequence[str],
    labels: Dict[str, str],
    key: str,
):
    col_by, col_dir = st.columns([3, 1])
    with col_by:
        column = st.selectbox(
            "Sort by",
            options=list(sortable_columns),
            index=list(sortable_columns).index("date_listed") if "date_listed" in sortable_columns else 0,
            format_func=lambda c: labels.get(c, c.replace("_", " ").title()),
            key=f"{key}_sort_by",
        )
    with col_dir:
        direction = st.radio(
            "Order",
            options=["Descending", "Ascending"],
            horizontal=True,
            key=f"{key}_sort_dir",
        )
    return column, direction == "Ascending"


def render_table(
    df: pd.DataFrame,
    columns: Sequence[str],
    sortable_columns: Sequence[str] = (),
    column_config: Optional[Dict[str, Dict[str, str]]] = None,
    labels: Optional[Dict[str, str]] = None,
    height: int = 500,
    export_file_name: str = "listings.csv",
    key: str = "listings_table",
) -> None:
    if df.empty:
        st.info("No listings match the current filters.")
        return

    labels = labels or {}
    working = df[[c for c in columns if c in df.columns]]
    if sortable_columns:
        sort_column, ascending = _sort_controls(sortable_columns, labels, key)
        working = sort_listings(working, sort_column, ascending=ascending)

    formatted_df = working.copy()
    if column_config:
        for column, config in column_config.items():
            if column not in formatted_df.columns:
                continue
            fmt_type = config.get("type")
            if fmt_type == "currency":
                currency = config.get("currency", "$")
                formatted_df[column] = formatted_df[column].apply(
                    lambda v: format_currency(v, currency=currency)
                )
            elif fmt_type == "number":
                decimals = int(config.get("decimals", 0))
                formatted_df[column] = formatted_df[column].apply(
                    lambda v: format_number(v, decimals=decimals)
                )

    display_config = {
        column: labels.get(column, column.replace("_", " ").title())
        for column in formatted_df.columns
    }
    if "image" in formatted_df.columns:
        display_config["image"] = st.column_config.ImageColumn("Photo", width="small")
    if "url" in formatted_df.columns:
        display_config["url"] = st.column_config.LinkColumn("Link", display_text="Open")

    st.dataframe(
        formatted_df,
        use_container_width=True,
        height=height,
        hide_index=True,
        column_config=display_config,
    )

    csv_bytes = working.to_csv(index=False).encode("utf-8")
    st.download_button(
        "Download CSV",
        data=csv_bytes,
        file_name=export_file_name,
        mime="text/csv",
        key=f"{key}_download",
    )
