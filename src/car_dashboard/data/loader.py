from __future__ import annotations

from typing import Dict, List, Optional, Tuple

import streamlit as st

from car_dashboard.config import StoreSettings
from car_dashboard.data.filters import fetch_key
from car_dashboard.data.gateway import ListingGateway
from car_dashboard.data.models import FilterCriteria, ListingRecord
from car_dashboard.logger import get_logger

logger = get_logger("data.loader")

QueryKey = Tuple[Optional[str], Optional[str], Optional[str], Optional[str]]


def _criteria_from_key(query: QueryKey) -> FilterCriteria:
    make, model, trim, year = query
    return FilterCriteria(make=make, model=model, trim=trim, year=year)


def load_listings(criteria: FilterCriteria, settings: Optional[StoreSettings] = None) -> List[ListingRecord]:
    """Wrapper that resolves settings and calls the cached implementation.

    Raises FetchError on store failures; st.cache_data does not cache
    exceptions, so a failed fetch is retried on the next rerun instead of
    being remembered as an empty result.
    """
    settings = settings or StoreSettings.from_env()
    return _load_listings_impl(
        settings.url,
        settings.key,
        settings.table,
        settings.page_size,
        settings.max_pages,
        fetch_key(criteria),
    )


@st.cache_data(show_spinner=False, ttl=600)
def _load_listings_impl(
    url: Optional[str],
    key: Optional[str],
    table: str,
    page_size: int,
    max_pages: int,
    query: QueryKey,
) -> List[ListingRecord]:
    """Load every page of listings matching the server-side query.
    Cached by connection settings and the make/model/trim/year query.
    """
    settings = StoreSettings(url=url, key=key, table=table, page_size=page_size, max_pages=max_pages)
    gateway = ListingGateway(settings)
    return gateway.fetch_all(_criteria_from_key(query))


def load_distinct_values(
    criteria: FilterCriteria,
    settings: Optional[StoreSettings] = None,
) -> Dict[str, List[str]]:
    settings = settings or StoreSettings.from_env()
    return _load_distinct_impl(
        settings.url,
        settings.key,
        settings.table,
        settings.page_size,
        settings.max_pages,
        fetch_key(criteria),
    )


@st.cache_data(show_spinner=False, ttl=600)
def _load_distinct_impl(
    url: Optional[str],
    key: Optional[str],
    table: str,
    page_size: int,
    max_pages: int,
    query: QueryKey,
) -> Dict[str, List[str]]:
    settings = StoreSettings(url=url, key=key, table=table, page_size=page_size, max_pages=max_pages)
    return ListingGateway(settings).fetch_distinct_values(_criteria_from_key(query))


def clear_cache() -> None:
    _load_listings_impl.clear()  # type: ignore[attr-defined]
    _load_distinct_impl.clear()  # type: ignore[attr-defined]
    logger.info("Listing caches cleared")
