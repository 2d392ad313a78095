"""Shared test fixtures for the car sales dashboard."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from car_dashboard.data.models import FilterCriteria, ListingRecord

NOW = datetime(2024, 6, 30, 12, 0, tzinfo=timezone.utc)


def make_record(**overrides) -> ListingRecord:
    """Build a listing with sensible defaults; keyword args override fields."""
    fields = {
        "source": "dealer-site",
        "year": "2020",
        "make": "Toyota",
        "model": "Camry",
        "trim": "SE",
        "price": 20000.0,
        "mileage": 30000,
        "exterior_color": "Black",
        "interior_color": "Gray",
        "transmission": "Automatic",
        "drivetrain": "FWD",
        "listing_type": "used",
        "date_listed": "20/6/24",
        "date_sold": None,
        "photos": '["https://img.example/1.jpg"]',
        "image": "https://img.example/1.jpg",
        "url": "https://cars.example/listing/1",
    }
    fields.update(overrides)
    return ListingRecord(**fields)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def sample_records() -> list:
    """A small mixed inventory covering the filterable attributes."""
    return [
        make_record(price=10000.0, mileage=40000, date_listed="1/6/24"),
        make_record(price=None, mileage=20000, date_listed="2/6/24"),
        make_record(
            make="Honda",
            model="Civic",
            trim="EX",
            year="2019",
            price=18000.0,
            mileage=60000,
            exterior_color="Pearl White",
            transmission="Manual",
            drivetrain="FWD",
            date_listed="10/6/24",
            date_sold="25/6/24",
        ),
        make_record(
            make="Ford",
            model="F-150",
            trim="XLT",
            year="2021",
            price=35000.0,
            mileage=None,
            exterior_color="Blue",
            drivetrain="4WD",
            listing_type="new",
            date_listed="15/6/24",
        ),
        make_record(price=25000.0, mileage=15000, date_listed="not a date"),
    ]


@pytest.fixture
def empty_criteria() -> FilterCriteria:
    """Criteria with nothing set, not even the pricing toggle."""
    return FilterCriteria(only_with_pricing=False)
