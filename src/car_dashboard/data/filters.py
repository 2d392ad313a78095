"""
Filter utilities that apply the dashboard filter criteria to listing records.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone
from numbers import Number
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from car_dashboard.data.dates import as_utc, parse_listing_date
from car_dashboard.data.models import (
    CRITERIA_FIELDS,
    LISTING_FIELDS,
    PERIODS,
    WINDOW_FIELDS,
    FilterCriteria,
    ListingRecord,
)
from car_dashboard.logger import get_logger

logger = get_logger("data.filters")

# Fields the store filters on; everything else is applied in memory.
FETCH_FIELDS = ("make", "model", "trim", "year")


def _contains(value: Optional[str], needle: str) -> bool:
    return value is not None and needle.lower() in value.lower()


def _same_text(value: Optional[str], expected: str) -> bool:
    return value is not None and value.lower() == expected.lower()


def _in_window(record: ListingRecord, criteria: FilterCriteria) -> bool:
    if criteria.start_date is None or criteria.end_date is None:
        return True
    listed = parse_listing_date(record.date_listed)
    if listed is None:
        # Bad dates never exclude a listing on their own.
        return True
    return as_utc(criteria.start_date) <= listed <= as_utc(criteria.end_date)


def record_matches(record: ListingRecord, criteria: FilterCriteria) -> bool:
    """Return True when the record satisfies every set criterion."""
    if criteria.only_with_pricing and record.price is None:
        return False
    if criteria.make and not _same_text(record.make, criteria.make):
        return False
    if criteria.model and not _same_text(record.model, criteria.model):
        return False
    if criteria.trim and record.trim != criteria.trim:
        return False
    if criteria.mileage is not None:
        if record.mileage is None or record.mileage > criteria.mileage:
            return False
    if criteria.exterior_color and not _contains(record.exterior_color, criteria.exterior_color):
        return False
    if criteria.interior_color and not _contains(record.interior_color, criteria.interior_color):
        return False
    if criteria.transmission and not _contains(record.transmission, criteria.transmission):
        return False
    if criteria.drivetrain and record.drivetrain != criteria.drivetrain:
        return False
    if criteria.listing_type and record.listing_type != criteria.listing_type:
        return False
    if criteria.year and record.year != criteria.year:
        return False
    return _in_window(record, criteria)


def apply_filters(records: Iterable[ListingRecord], criteria: FilterCriteria) -> List[ListingRecord]:
    """
    Apply the selected filter criteria to a record set.

    Records are returned in their input order and are never modified, so the
    same set can be filtered repeatedly (current and previous period) safely.
    """
    records = list(records)
    filtered = [record for record in records if record_matches(record, criteria)]
    logger.debug("Filtered %d of %d listings", len(filtered), len(records))
    return filtered


def unique_values(records: Iterable[ListingRecord], field: str) -> List[Any]:
    """Distinct non-null values of a record field for dropdown options.

    Numeric fields sort descending, text fields ascending (case-sensitive).
    """
    if field not in LISTING_FIELDS:
        raise ValueError(f"Unknown listing field: {field}")
    values = {getattr(record, field) for record in records}
    values.discard(None)
    values.discard("")
    numeric = bool(values) and all(
        isinstance(v, Number) and not isinstance(v, bool) for v in values
    )
    return sorted(values, reverse=numeric)


def resolve_time_window(criteria: FilterCriteria, now: Optional[datetime] = None) -> FilterCriteria:
    """Turn a relative period into a concrete [start, end] window ending now.

    Custom (or unset) periods keep their explicit dates untouched.
    """
    if criteria.period not in ("day", "week", "month"):
        return criteria
    end = as_utc(now) if now is not None else datetime.now(timezone.utc)
    count = criteria.period_count or 0
    if criteria.period == "day":
        start = end - timedelta(days=count)
    elif criteria.period == "week":
        start = end - timedelta(days=count * 7)
    else:
        start = (pd.Timestamp(end) - pd.DateOffset(months=count)).to_pydatetime()
    return replace(criteria, start_date=start, end_date=end)


def update_criteria(
    criteria: FilterCriteria,
    field: str,
    value: Any,
    now: Optional[datetime] = None,
) -> FilterCriteria:
    """Return a copy of the criteria with one field changed.

    Changing the period or its count re-resolves the time window.
    """
    if field not in CRITERIA_FIELDS:
        raise ValueError(f"Unknown filter field: {field}")
    if field == "period" and value is not None and value not in PERIODS:
        raise ValueError(f"Unknown period: {value}")
    updated = replace(criteria, **{field: value})
    if field in ("period", "period_count"):
        return resolve_time_window(updated, now=now)
    return updated


def clear_criterion(criteria: FilterCriteria, field: str) -> FilterCriteria:
    if field not in CRITERIA_FIELDS:
        raise ValueError(f"Unknown filter field: {field}")
    default = True if field == "only_with_pricing" else None
    return replace(criteria, **{field: default})


def active_criteria(criteria: FilterCriteria) -> List[Tuple[str, Any]]:
    """Set, non-window criteria as (field, value) pairs in declaration order."""
    return [
        (field, getattr(criteria, field))
        for field in CRITERIA_FIELDS
        if field not in WINDOW_FIELDS and getattr(criteria, field) is not None
    ]


def previous_window(start: datetime, end: datetime) -> Tuple[datetime, datetime]:
    """The window of identical length immediately preceding [start, end]."""
    return start - (end - start), start


def initial_criteria(defaults: FilterCriteria, now: Optional[datetime] = None) -> FilterCriteria:
    """Session-start criteria: the configured defaults with the window resolved."""
    return resolve_time_window(defaults, now=now)


def fetch_key(criteria: FilterCriteria) -> Tuple[Optional[str], ...]:
    """The part of the criteria the store applies server-side."""
    return tuple(getattr(criteria, field) for field in FETCH_FIELDS)


def serialize_criteria(criteria: FilterCriteria) -> Dict[str, Any]:
    """
    Convert the criteria to a JSON-serialisable dictionary to be stored in
    session_state or used for logging/debugging.
    """
    out: Dict[str, Any] = {}
    for field in CRITERIA_FIELDS:
        value = getattr(criteria, field)
        out[field] = value.isoformat() if hasattr(value, "isoformat") else value
    return out


def criteria_badges(
    criteria: FilterCriteria,
    labels: Sequence[Tuple[str, str]] = (),
) -> List[Tuple[str, str]]:
    """(field, badge text) for each active (non-window) criterion."""
    names = dict(labels)
    badges = []
    for field, value in active_criteria(criteria):
        label = names.get(field, field.replace("_", " ").title())
        if field == "only_with_pricing":
            if value:
                badges.append((field, "Priced listings only"))
            continue
        if field == "mileage":
            badges.append((field, f"{label}: ≤ {value:,}"))
            continue
        badges.append((field, f"{label}: {value}"))
    return badges


def describe_criteria(criteria: FilterCriteria, labels: Sequence[Tuple[str, str]] = ()) -> List[str]:
    """Human-readable badges for the active (non-window) criteria."""
    return [badge for _, badge in criteria_badges(criteria, labels)]
