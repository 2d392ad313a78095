"""
Shared vocabulary for the dashboard: the listing record, the filter criteria
and the KPI result types.
"""

from __future__ import annotations

import json
import math
from dataclasses import asdict, dataclass, fields
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from car_dashboard.logger import get_logger

logger = get_logger("data.models")

PERIODS = ("day", "week", "month", "custom")


def parse_photos(payload: Any) -> List[str]:
    """Parse the serialized photo list stored with each listing.

    The store keeps photos as a JSON array encoded in a text column. Malformed
    payloads are logged and treated as "no photos".
    """
    if payload is None:
        return []
    if isinstance(payload, (list, tuple)):
        items = payload
    else:
        text = str(payload).strip()
        if not text:
            return []
        try:
            items = json.loads(text)
        except (json.JSONDecodeError, ValueError) as exc:
            logger.warning("Malformed photos payload %r: %s", text[:80], exc)
            return []
        if not isinstance(items, list):
            logger.warning("Photos payload is not a list: %r", text[:80])
            return []
    return [item.strip() for item in items if isinstance(item, str) and item.strip()]


def _clean_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    text = str(value).strip()
    return text or None


def _to_float(value: Any, field_name: str) -> Optional[float]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring non-numeric %s value %r", field_name, value)
        return None
    if math.isnan(number):
        return None
    return number


def _to_int(value: Any, field_name: str) -> Optional[int]:
    number = _to_float(value, field_name)
    return int(number) if number is not None else None


def _year_token(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return _clean_str(value) or ""


@dataclass(frozen=True)
class ListingRecord:
    """One observed car listing as stored in the listings table."""

    source: str
    year: str
    make: str
    model: str
    trim: Optional[str] = None
    price: Optional[float] = None
    mileage: Optional[int] = None
    exterior_color: Optional[str] = None
    interior_color: Optional[str] = None
    transmission: Optional[str] = None
    drivetrain: Optional[str] = None
    listing_type: Optional[str] = None
    date_listed: Optional[str] = None
    date_sold: Optional[str] = None
    photos: str = "[]"
    image: Optional[str] = None
    url: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "ListingRecord":
        """Build a record from a store row, deriving `image` from `photos`."""
        raw_photos = row.get("photos")
        if isinstance(raw_photos, (list, tuple)):
            photos_text = json.dumps(list(raw_photos))
        else:
            photos_text = "" if raw_photos is None else str(raw_photos)
        parsed = parse_photos(raw_photos)
        return cls(
            source=_clean_str(row.get("source")) or "",
            year=_year_token(row.get("year")),
            make=_clean_str(row.get("make")) or "",
            model=_clean_str(row.get("model")) or "",
            trim=_clean_str(row.get("trim")),
            price=_to_float(row.get("price"), "price"),
            mileage=_to_int(row.get("mileage"), "mileage"),
            exterior_color=_clean_str(row.get("exterior_color")),
            interior_color=_clean_str(row.get("interior_color")),
            transmission=_clean_str(row.get("transmission")),
            drivetrain=_clean_str(row.get("drivetrain")),
            listing_type=_clean_str(row.get("listing_type")),
            date_listed=_clean_str(row.get("date_listed")),
            date_sold=_clean_str(row.get("date_sold")),
            photos=photos_text,
            image=parsed[0] if parsed else None,
            url=_clean_str(row.get("url")),
        )

    def to_row(self) -> Dict[str, Any]:
        return asdict(self)


LISTING_FIELDS = tuple(f.name for f in fields(ListingRecord))


@dataclass(frozen=True)
class FilterCriteria:
    make: Optional[str] = None
    model: Optional[str] = None
    trim: Optional[str] = None
    year: Optional[str] = None
    exterior_color: Optional[str] = None
    interior_color: Optional[str] = None
    transmission: Optional[str] = None
    drivetrain: Optional[str] = None
    listing_type: Optional[str] = None
    mileage: Optional[int] = None
    only_with_pricing: bool = True
    period: Optional[str] = None  # day | week | month | custom
    period_count: Optional[int] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


CRITERIA_FIELDS = tuple(f.name for f in fields(FilterCriteria))
WINDOW_FIELDS = ("period", "period_count", "start_date", "end_date")


@dataclass(frozen=True)
class KPISummary:
    """Aggregate over the valid-price subset of a record set.

    Averages are None when the subset is empty; 0/0 is undefined and the
    cards render "N/A" for it.
    """

    total_listings: int
    average_price: Optional[float]
    average_days_on_market: Optional[float]
    percentage_change: float


@dataclass(frozen=True)
class KPIChanges:
    percentage_change: float  # absolute points, not relative
    total_listings: Optional[float]
    average_days_on_market: Optional[float]
    average_price: Optional[float]


@dataclass(frozen=True)
class KPIComparison:
    current: KPISummary
    previous: KPISummary
    changes: KPIChanges
