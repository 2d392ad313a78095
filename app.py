import car_dashboard.bootstrap_env  # must be first to set env/secrets
import streamlit as st

from car_dashboard.config import DashboardConfig, StoreSettings
from car_dashboard.data.filters import (
    FETCH_FIELDS,
    apply_filters,
    clear_criterion,
    criteria_badges,
    initial_criteria,
    serialize_criteria,
    unique_values,
    update_criteria,
)
from car_dashboard.data.kpis import compare_periods
from car_dashboard.data.loader import clear_cache, load_distinct_values, load_listings
from car_dashboard.data.session import ListingSession
from car_dashboard.errors import DashboardError
from car_dashboard.logger import get_logger
from car_dashboard.ui.components.formatting import format_number
from car_dashboard.ui.layout import (
    RESET_FLAG,
    filter_chips,
    forget_widget,
    setup_page,
    sidebar_filters_ui,
)
from car_dashboard.ui.pages import listings, overview, price_mileage
from car_dashboard.ui.pages.context import PageContext

logger = get_logger("app")

SESSION_KEY = "listing_session"

PAGE_RENDERERS = {
    "overview": overview.render,
    "price_mileage": price_mileage.render,
    "listings": listings.render,
}


def _get_session(config: DashboardConfig) -> ListingSession:
    session = st.session_state.get(SESSION_KEY)
    if session is None:
        session = ListingSession(criteria=initial_criteria(config.default_criteria))
        st.session_state[SESSION_KEY] = session
    elif st.session_state.pop(RESET_FLAG, False):
        session.reset(initial_criteria(config.default_criteria))
    return session


def _refresh(session: ListingSession, settings: StoreSettings) -> None:
    ticket = session.begin_fetch()
    try:
        records = load_listings(ticket.criteria, settings)
    except DashboardError as exc:
        session.fail_fetch(ticket, exc)
        return
    session.complete_fetch(ticket, records)


def _distinct_values(session: ListingSession, settings: StoreSettings):
    try:
        return load_distinct_values(session.criteria, settings)
    except DashboardError as exc:
        logger.warning("Falling back to loaded listings for dropdown values: %s", exc)
        return {field: unique_values(session.records, field) for field in FETCH_FIELDS}


def _active_filter_summary(session: ListingSession, config: DashboardConfig, total_rows: int) -> None:
    criteria = session.criteria
    removed = filter_chips(criteria_badges(criteria, config.field_labels))
    if removed == "only_with_pricing":
        # Its cleared default is "on", so removing the chip switches it off.
        session.set_criteria(update_criteria(criteria, removed, False))
    elif removed is not None:
        session.set_criteria(clear_criterion(criteria, removed))
    if removed is not None:
        forget_widget(removed)
        st.rerun()
    if criteria.start_date is not None and criteria.end_date is not None:
        st.caption(
            f"Window: {criteria.start_date:%Y-%m-%d} to {criteria.end_date:%Y-%m-%d} (UTC). "
            f"Showing {format_number(total_rows, 0)} of {format_number(len(session.records), 0)} "
            "loaded listings after filters."
        )
    else:
        st.caption(f"Showing {format_number(total_rows, 0)} listings after filters.")


def main() -> None:
    setup_page()
    st.title("Car Sales Analytics Dashboard")

    config = DashboardConfig()
    try:
        settings = StoreSettings.from_env()
    except DashboardError as exc:
        st.error(f"Configuration error: {exc}")
        st.stop()

    if st.sidebar.button("🔄 Refresh Data"):
        clear_cache()

    session = _get_session(config)
    if not session.loaded:
        _refresh(session, settings)

    distinct = _distinct_values(session, settings)
    criteria = sidebar_filters_ui(session.records, session.criteria, distinct, config)
    session.set_criteria(criteria)
    _refresh(session, settings)
    st.session_state["active_filters"] = serialize_criteria(criteria)

    if session.error is not None:
        st.error(f"Could not load listings: {session.error}. Showing the last loaded data.")

    # After a failed fetch, keep filtering the old records by the fields they were fetched with.
    view = session.display_criteria()
    filtered = apply_filters(session.records, view)
    if not session.records:
        st.warning("No listings loaded. Check the store connection settings.")
        return

    _active_filter_summary(session, config, len(filtered))

    context = PageContext(
        records=session.records,
        criteria=view,
        config=config,
        comparison=compare_periods(session.records, view),
    )

    streamlit_tabs = st.tabs([tab.label for tab in config.tabs])
    for streamlit_tab, tab_config in zip(streamlit_tabs, config.tabs):
        renderer = PAGE_RENDERERS.get(tab_config.key)
        if renderer is None:
            continue
        with streamlit_tab:
            renderer(filtered, context)


if __name__ == "__main__":
    main()
