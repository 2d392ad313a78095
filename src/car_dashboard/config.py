"""
Application-wide configuration: store connection settings and the dashboard
defaults that seed the initial UI state.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional, Tuple

import streamlit as st

from car_dashboard.data.models import FilterCriteria
from car_dashboard.errors import ConfigurationError


@dataclass(frozen=True)
class TabConfig:
    key: str
    label: str


# Ordered tab definitions for the dashboard
TABS: Tuple[TabConfig, ...] = (
    TabConfig("overview", "Market Overview"),
    TabConfig("price_mileage", "Price vs Mileage"),
    TabConfig("listings", "Listings"),
)


def _get_secret(name: str, default: Optional[str] = None) -> Optional[str]:
    """Try env first, then st.secrets (if available)."""
    val = os.getenv(name)
    if val:
        return val
    try:
        v = st.secrets.get(name)
    except Exception:
        # No secrets.toml outside Streamlit Cloud / local .streamlit
        return default
    return str(v) if v is not None else default


def _get_int(name: str, default: int) -> int:
    raw = _get_secret(name)
    if raw is None or not str(raw).strip():
        return default
    try:
        value = int(str(raw).strip())
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {value}")
    return value


@dataclass(frozen=True)
class StoreSettings:
    url: Optional[str] = None
    key: Optional[str] = None
    table: str = "listings"
    page_size: int = 1000
    max_pages: int = 20

    @classmethod
    def from_env(cls) -> "StoreSettings":
        """Resolve store settings from env vars or Streamlit secrets."""
        return cls(
            url=_get_secret("SUPABASE_URL"),
            key=_get_secret("SUPABASE_KEY") or _get_secret("SUPABASE_ANON_KEY"),
            table=_get_secret("LISTINGS_TABLE", "listings") or "listings",
            page_size=_get_int("LISTINGS_PAGE_SIZE", 1000),
            max_pages=_get_int("LISTINGS_MAX_PAGES", 20),
        )


BASIC_COLORS = (
    "Black", "White", "Gray", "Silver", "Red", "Blue", "Green",
    "Yellow", "Orange", "Brown", "Purple", "Pink", "Beige", "Gold",
)
STANDARD_TRANSMISSIONS = ("Manual", "Automatic")
MILEAGE_OPTIONS: Tuple[Tuple[Optional[int], str], ...] = (
    (None, "Any mileage"),
    (10_000, "Up to 10,000"),
    (25_000, "Up to 25,000"),
    (50_000, "Up to 50,000"),
    (75_000, "Up to 75,000"),
    (100_000, "Up to 100,000"),
    (150_000, "Up to 150,000"),
    (200_000, "Up to 200,000"),
)
PERIOD_LABELS: Tuple[Tuple[str, str], ...] = (
    ("day", "Days"),
    ("week", "Weeks"),
    ("month", "Months"),
    ("custom", "Custom range"),
)
TABLE_COLUMNS = (
    "image",
    "url",
    "listing_type",
    "price",
    "year",
    "make",
    "model",
    "trim",
    "exterior_color",
    "interior_color",
    "transmission",
    "date_listed",
)
SORTABLE_COLUMNS = ("price", "year", "make", "model", "date_listed")
FIELD_LABELS: Tuple[Tuple[str, str], ...] = (
    ("make", "Make"),
    ("model", "Model"),
    ("trim", "Trim"),
    ("year", "Year"),
    ("exterior_color", "Exterior"),
    ("interior_color", "Interior"),
    ("transmission", "Transmission"),
    ("drivetrain", "Drivetrain"),
    ("listing_type", "Listing Type"),
    ("mileage", "Mileage"),
)


@dataclass(frozen=True)
class DashboardConfig:
    """Defaults handed to the UI when a session starts."""

    default_criteria: FilterCriteria = field(
        default_factory=lambda: FilterCriteria(period="day", period_count=7, only_with_pricing=True)
    )
    color_options: Tuple[str, ...] = BASIC_COLORS
    transmission_options: Tuple[str, ...] = STANDARD_TRANSMISSIONS
    mileage_options: Tuple[Tuple[Optional[int], str], ...] = MILEAGE_OPTIONS
    period_labels: Tuple[Tuple[str, str], ...] = PERIOD_LABELS
    table_columns: Tuple[str, ...] = TABLE_COLUMNS
    sortable_columns: Tuple[str, ...] = SORTABLE_COLUMNS
    field_labels: Tuple[Tuple[str, str], ...] = FIELD_LABELS
    tabs: Tuple[TabConfig, ...] = TABS
    currency_symbol: str = "$"
