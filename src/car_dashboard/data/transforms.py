"""
Chart and table data preparation from listing records.
"""

from __future__ import annotations

from typing import Iterable

import pandas as pd

from car_dashboard.data.dates import day_key, parse_listing_date
from car_dashboard.data.models import LISTING_FIELDS, ListingRecord

DAILY_COLUMNS = ["date", "count", "average_price", "min_price", "max_price", "ma7", "ma30"]
LISTED_SOLD_COLUMNS = [
    "date",
    "listed_count",
    "average_listed_price",
    "sold_count",
    "average_sold_price",
]
SCATTER_COLUMNS = [
    "listed_at",
    "price",
    "mileage",
    "year",
    "make",
    "model",
    "trim",
    "exterior_color",
    "interior_color",
    "transmission",
    "drivetrain",
    "url",
]
DATE_TEXT_COLUMNS = ("date_listed", "date_sold")


def _parsed_dates(series: pd.Series) -> pd.Series:
    return pd.to_datetime(series.map(parse_listing_date), utc=True)


def records_to_frame(records: Iterable[ListingRecord]) -> pd.DataFrame:
    """One row per record with parsed `listed_at` / `sold_at` columns added."""
    frame = pd.DataFrame([r.to_row() for r in records], columns=list(LISTING_FIELDS))
    frame["price"] = pd.to_numeric(frame["price"], errors="coerce")
    frame["mileage"] = pd.to_numeric(frame["mileage"], errors="coerce")
    frame["listed_at"] = _parsed_dates(frame["date_listed"])
    frame["sold_at"] = _parsed_dates(frame["date_sold"])
    return frame


def _day_column(dates: pd.Series) -> pd.Series:
    return dates.map(day_key)


def daily_price_series(records: Iterable[ListingRecord]) -> pd.DataFrame:
    """Per-day listing count and price statistics with 7/30 row moving averages."""
    frame = records_to_frame(records)
    dated = frame.dropna(subset=["listed_at"]).copy()
    if dated.empty:
        return pd.DataFrame(columns=DAILY_COLUMNS)

    dated["date"] = _day_column(dated["listed_at"])
    daily = (
        dated.groupby("date")
        .agg(
            count=("source", "size"),
            average_price=("price", "mean"),
            min_price=("price", "min"),
            max_price=("price", "max"),
        )
        .reset_index()
        .sort_values("date")
        .reset_index(drop=True)
    )
    # Days without a priced listing count as 0 inside the averages.
    filled = daily["average_price"].fillna(0)
    daily["ma7"] = filled.rolling(window=7, min_periods=1).mean()
    daily["ma30"] = filled.rolling(window=30, min_periods=1).mean()
    return daily[DAILY_COLUMNS]


def listed_vs_sold_series(records: Iterable[ListingRecord]) -> pd.DataFrame:
    """Per-day average listed price against average sold price."""
    frame = records_to_frame(records)

    listed = frame.dropna(subset=["listed_at"]).copy()
    listed["date"] = _day_column(listed["listed_at"])
    listed = listed.groupby("date").agg(
        listed_count=("source", "size"),
        average_listed_price=("price", "mean"),
    )

    sold = frame.dropna(subset=["sold_at"]).copy()
    sold["date"] = _day_column(sold["sold_at"])
    sold = sold.groupby("date").agg(
        sold_count=("source", "size"),
        average_sold_price=("price", "mean"),
    )

    if listed.empty and sold.empty:
        return pd.DataFrame(columns=LISTED_SOLD_COLUMNS)

    merged = listed.join(sold, how="outer").reset_index().sort_values("date")
    for col in ("listed_count", "sold_count"):
        merged[col] = merged[col].fillna(0).astype(int)
    return merged.reset_index(drop=True)[LISTED_SOLD_COLUMNS]


def scatter_points(records: Iterable[ListingRecord]) -> pd.DataFrame:
    """Priced listings with a listing date, ordered by date, for price/mileage plots."""
    frame = records_to_frame(records)
    points = frame.dropna(subset=["listed_at", "price"])
    if points.empty:
        return pd.DataFrame(columns=SCATTER_COLUMNS)
    return points.sort_values("listed_at", kind="stable")[SCATTER_COLUMNS].reset_index(drop=True)


def sort_listings(frame: pd.DataFrame, column: str, ascending: bool = True) -> pd.DataFrame:
    """Stable sort for the listings table; blanks last, listing dates by calendar."""
    if column not in frame.columns:
        return frame
    key = _parsed_dates if column in DATE_TEXT_COLUMNS else None
    return frame.sort_values(
        column,
        ascending=ascending,
        na_position="last",
        kind="stable",
        key=key,
    )
