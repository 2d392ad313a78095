"""
Listing date helpers.

Stored listing dates are `day/month/yy` strings (not ISO-8601). Every
component that needs a listing date goes through `parse_listing_date` so the
filter engine, KPI math and charts agree on what a date means.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

from car_dashboard.logger import get_logger

logger = get_logger("data.dates")


def parse_listing_date(value: Optional[str]) -> Optional[datetime]:
    """Parse a `d/m/yy` (or `d/m/yyyy`) string into UTC midnight of that day.

    Returns None for blank input and for anything malformed; malformed input is
    logged, never raised.
    """
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None

    parts = text.split("/")
    if len(parts) != 3:
        logger.warning("Invalid date format: %r", text)
        return None
    try:
        day, month, year = (int(part.strip()) for part in parts)
    except ValueError:
        logger.warning("Invalid date format: %r", text)
        return None

    if year < 100:
        year += 2000
    try:
        return datetime(year, month, day, tzinfo=timezone.utc)
    except ValueError:
        logger.warning("Invalid calendar date: %r", text)
        return None


def day_key(moment: datetime) -> str:
    """Calendar-day key (YYYY-MM-DD) of a moment, taken in UTC."""
    return as_utc(moment).strftime("%Y-%m-%d")


def as_utc(moment):
    """Return an aware UTC datetime; naive values are taken to already be UTC."""
    if moment is None:
        return None
    if isinstance(moment, datetime):
        if moment.tzinfo is None:
            return moment.replace(tzinfo=timezone.utc)
        return moment.astimezone(timezone.utc)
    if isinstance(moment, date):
        return datetime(moment.year, moment.month, moment.day, tzinfo=timezone.utc)
    raise TypeError(f"Expected date or datetime, got {type(moment).__name__}")
