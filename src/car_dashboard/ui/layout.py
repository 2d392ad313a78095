"""
Layout helpers for the Streamlit application (page setup and sidebar filters).
"""

from __future__ import annotations

import datetime as dt
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import streamlit as st

from car_dashboard.config import DashboardConfig
from car_dashboard.data.filters import unique_values, update_criteria
from car_dashboard.data.models import FilterCriteria, ListingRecord

STATE_PREFIX = "cf_"
RESET_FLAG = "cf_reset_pending"
CASCADE_LABELS = (("make", "Make"), ("model", "Model"), ("trim", "Trim"), ("year", "Year"))


def setup_page() -> None:
    """Set Streamlit page configuration."""
    st.set_page_config(
        page_title="Car Sales Analytics",
        layout="wide",
        page_icon=":red_car:",
    )


def _clear_state_prefixes(prefixes: Sequence[str]) -> None:
    for key in list(st.session_state.keys()):
        if any(str(key).startswith(p) for p in prefixes):
            del st.session_state[key]


def _optional_select(label: str, options: Iterable[Any], current: Any, key: str, help: Optional[str] = None):
    """Selectbox with a leading "All" entry mapped to None.

    The current value is kept among the options even if the data no longer
    carries it, so a selection never silently disappears.
    """
    values: List[Any] = [None] + [v for v in options if v is not None]
    if current is not None and current not in values:
        values.append(current)
    return st.selectbox(
        label,
        options=values,
        index=values.index(current) if current in values else 0,
        format_func=lambda v: "All" if v is None else str(v),
        key=key,
        help=help,
    )


def _present_options(configured: Sequence[str], records: Sequence[ListingRecord], field: str) -> List[str]:
    """Configured options that occur (case-insensitive substring) in the data."""
    seen = [str(v).lower() for v in unique_values(records, field)]
    return [opt for opt in configured if any(opt.lower() in v for v in seen)]


def _to_utc_bound(day: dt.date, end_of_day: bool) -> dt.datetime:
    moment = dt.time.max if end_of_day else dt.time.min
    return dt.datetime.combine(day, moment, tzinfo=dt.timezone.utc)


def _as_date(value: Optional[dt.datetime], fallback: dt.date) -> dt.date:
    if value is None:
        return fallback
    return value.astimezone(dt.timezone.utc).date()


def _time_window_inputs(criteria: FilterCriteria, config: DashboardConfig) -> Dict[str, Any]:
    period_names = dict(config.period_labels)
    periods = list(period_names)
    default = config.default_criteria
    period = st.selectbox(
        "Time Period",
        options=periods,
        index=periods.index(criteria.period) if criteria.period in periods else 0,
        format_func=lambda p: period_names.get(p, p),
        key=f"{STATE_PREFIX}period",
    )
    chosen: Dict[str, Any] = {"period": period}

    if period != "custom":
        chosen["period_count"] = int(
            st.number_input(
                f"Number of {period_names.get(period, period).lower()}",
                min_value=1,
                max_value=365,
                value=int(criteria.period_count or default.period_count or 7),
                step=1,
                key=f"{STATE_PREFIX}period_count",
            )
        )
        return chosen

    today = dt.datetime.now(dt.timezone.utc).date()
    col_start, col_end = st.columns(2)
    with col_start:
        start_day = st.date_input(
            "Start",
            value=_as_date(criteria.start_date, today - dt.timedelta(days=7)),
            key=f"{STATE_PREFIX}start_date",
        )
    with col_end:
        end_day = st.date_input(
            "End",
            value=_as_date(criteria.end_date, today),
            key=f"{STATE_PREFIX}end_date",
        )
    if start_day > end_day:
        st.warning("Start date must be before or equal to End date. Adjusting range.")
        start_day, end_day = end_day, start_day
    chosen["start_date"] = _to_utc_bound(start_day, end_of_day=False)
    chosen["end_date"] = _to_utc_bound(end_day, end_of_day=True)
    return chosen


def sidebar_filters_ui(
    records: Sequence[ListingRecord],
    criteria: FilterCriteria,
    distinct: Dict[str, List[str]],
    config: DashboardConfig,
) -> FilterCriteria:
    """
    Render the sidebar filter controls and return the updated criteria.

    Only fields whose widget value differs from `criteria` are written back,
    so an untouched sidebar returns the same criteria object.
    """
    st.sidebar.header("Filters")
    chosen: Dict[str, Any] = {}

    with st.sidebar.expander("Vehicle", expanded=True):
        for field, label in CASCADE_LABELS:
            chosen[field] = _optional_select(
                label,
                distinct.get(field, []),
                getattr(criteria, field),
                key=f"{STATE_PREFIX}{field}",
            )

    with st.sidebar.expander("Time Period", expanded=True):
        chosen.update(_time_window_inputs(criteria, config))

    with st.sidebar.expander("Attributes", expanded=False):
        colors = _present_options(config.color_options, records, "exterior_color")
        chosen["exterior_color"] = _optional_select(
            "Exterior Color", colors, criteria.exterior_color, key=f"{STATE_PREFIX}exterior_color"
        )
        interior = _present_options(config.color_options, records, "interior_color")
        chosen["interior_color"] = _optional_select(
            "Interior Color", interior, criteria.interior_color, key=f"{STATE_PREFIX}interior_color"
        )
        transmissions = _present_options(config.transmission_options, records, "transmission")
        chosen["transmission"] = _optional_select(
            "Transmission", transmissions, criteria.transmission, key=f"{STATE_PREFIX}transmission"
        )
        chosen["drivetrain"] = _optional_select(
            "Drivetrain",
            unique_values(records, "drivetrain"),
            criteria.drivetrain,
            key=f"{STATE_PREFIX}drivetrain",
        )
        chosen["listing_type"] = _optional_select(
            "Listing Type",
            unique_values(records, "listing_type"),
            criteria.listing_type,
            key=f"{STATE_PREFIX}listing_type",
        )

        mileage_labels = dict(config.mileage_options)
        caps = list(mileage_labels)
        chosen["mileage"] = st.selectbox(
            "Mileage",
            options=caps,
            index=caps.index(criteria.mileage) if criteria.mileage in caps else 0,
            format_func=lambda cap: mileage_labels.get(cap, f"Up to {cap:,}"),
            key=f"{STATE_PREFIX}mileage",
        )

    chosen["only_with_pricing"] = st.sidebar.checkbox(
        "Only listings with pricing",
        value=criteria.only_with_pricing,
        key=f"{STATE_PREFIX}only_with_pricing",
    )

    if st.sidebar.button("Reset Filters", key="reset_filters", type="primary"):
        _clear_state_prefixes([STATE_PREFIX])
        st.session_state[RESET_FLAG] = True
        st.rerun()

    updated = criteria
    for field, value in chosen.items():
        if getattr(updated, field) != value:
            updated = update_criteria(updated, field, value)
    return updated


def filter_chips(badges: Sequence[Tuple[str, str]]) -> Optional[str]:
    """One removable chip per active filter; returns the field whose chip was clicked."""
    if not badges:
        st.markdown("**Active Filters: All data**")
        return None
    st.markdown("**Active Filters:**")
    removed = None
    for col, (field, badge) in zip(st.columns(len(badges)), badges):
        with col:
            if st.button(f"✕ {badge}", key=f"remove_filter_{field}", help="Remove this filter"):
                removed = field
    return removed


def forget_widget(field: str) -> None:
    """Drop a filter widget's stored value so it re-renders from the criteria."""
    st.session_state.pop(f"{STATE_PREFIX}{field}", None)
