"""
KPI aggregation over filtered listings and period-over-period comparison.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import Iterable, List, Optional

import numpy as np

from car_dashboard.data.dates import as_utc, parse_listing_date
from car_dashboard.data.filters import apply_filters, previous_window
from car_dashboard.data.models import (
    FilterCriteria,
    KPIChanges,
    KPIComparison,
    KPISummary,
    ListingRecord,
)
from car_dashboard.logger import get_logger

logger = get_logger("data.kpis")

SECONDS_PER_DAY = 24 * 3600


def _valid_price_subset(records: Iterable[ListingRecord]) -> List[ListingRecord]:
    return [r for r in records if r.price is not None and r.price > 0]


def _listing_sort_key(record: ListingRecord):
    # Unparseable dates sort after parsed ones, by raw text among themselves.
    listed = parse_listing_date(record.date_listed)
    if listed is not None:
        return (0, listed.timestamp(), "")
    return (1, 0.0, record.date_listed or "")


def _trend_percentage(prices: np.ndarray) -> float:
    """Relative change of the OLS line fitted to prices over their index."""
    n = len(prices)
    if n <= 1:
        return 0.0
    x = np.arange(n, dtype=float)
    sum_x = x.sum()
    sum_y = prices.sum()
    sum_xy = (x * prices).sum()
    sum_xx = (x * x).sum()

    slope = (n * sum_xy - sum_x * sum_y) / (n * sum_xx - sum_x * sum_x)
    intercept = (sum_y - slope * sum_x) / n

    start_price = intercept
    end_price = slope * (n - 1) + intercept
    if start_price == 0:
        logger.warning("Trend line starts at zero; reporting no change")
        return 0.0
    return float((end_price - start_price) / start_price * 100)


def calculate_kpis(records: Iterable[ListingRecord], now: Optional[datetime] = None) -> KPISummary:
    """Summarise a record set: count, average price, days on market and trend."""
    valid = _valid_price_subset(records)
    total = len(valid)
    if total == 0:
        return KPISummary(
            total_listings=0,
            average_price=None,
            average_days_on_market=None,
            percentage_change=0.0,
        )

    now = as_utc(now) if now is not None else datetime.now(timezone.utc)
    prices = np.array([r.price for r in valid], dtype=float)

    # Listings with unparseable dates add 0 days but still count in the mean.
    days = []
    for record in valid:
        listed = parse_listing_date(record.date_listed)
        days.append((now - listed).total_seconds() / SECONDS_PER_DAY if listed else 0.0)

    ordered = sorted(valid, key=_listing_sort_key)
    trend = _trend_percentage(np.array([r.price for r in ordered], dtype=float))

    return KPISummary(
        total_listings=total,
        average_price=float(prices.mean()),
        average_days_on_market=float(np.sum(days) / total),
        percentage_change=trend,
    )


def _relative_change(current: Optional[float], previous: Optional[float]) -> Optional[float]:
    if current is None or previous is None:
        return None
    if previous == 0:
        return 0.0
    return (current - previous) / previous * 100


def calculate_kpi_comparison(current: KPISummary, previous: KPISummary) -> KPIComparison:
    """Pair two summaries with the change of each KPI between them.

    The trend KPI is already a percentage, so its change is the difference in
    points; the other three are relative changes.
    """
    changes = KPIChanges(
        percentage_change=current.percentage_change - previous.percentage_change,
        total_listings=_relative_change(current.total_listings, previous.total_listings),
        average_days_on_market=_relative_change(
            current.average_days_on_market, previous.average_days_on_market
        ),
        average_price=_relative_change(current.average_price, previous.average_price),
    )
    return KPIComparison(current=current, previous=previous, changes=changes)


def compare_periods(
    records: Iterable[ListingRecord],
    criteria: FilterCriteria,
    now: Optional[datetime] = None,
) -> Optional[KPIComparison]:
    """KPIs for the active window against the window of equal length before it.

    Returns None when the criteria have no complete time window.
    """
    if criteria.start_date is None or criteria.end_date is None:
        return None
    records = list(records)
    current = calculate_kpis(apply_filters(records, criteria), now=now)

    prev_start, prev_end = previous_window(criteria.start_date, criteria.end_date)
    prev_criteria = replace(criteria, start_date=prev_start, end_date=prev_end)
    previous = calculate_kpis(apply_filters(records, prev_criteria), now=now)

    comparison = calculate_kpi_comparison(current, previous)
    logger.debug(
        "KPI comparison: %d current vs %d previous listings",
        current.total_listings,
        previous.total_listings,
    )
    return comparison
