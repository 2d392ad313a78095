"""Tests for display formatting and KPI card construction."""

from __future__ import annotations

import math

import pytest

from car_dashboard.data.models import KPIChanges, KPIComparison, KPISummary
from car_dashboard.ui.components.formatting import (
    format_currency,
    format_number,
    format_percent,
    format_points,
)
from car_dashboard.ui.components.kpi import _format_delta, _format_value, comparison_cards


class TestFormatting:
    @pytest.mark.parametrize("value", [None, math.nan, "abc"])
    def test_missing_values(self, value):
        assert format_number(value) == "N/A"
        assert format_currency(value) == "N/A"
        assert format_percent(value) == "N/A"
        assert format_points(value) == "N/A"

    def test_currency(self):
        assert format_currency(21500) == "$21,500"
        assert format_currency(-250.5, decimals=2) == "-$250.50"

    def test_number(self):
        assert format_number(12345.678, decimals=1) == "12,345.7"

    def test_percent(self):
        assert format_percent(12.345) == "12.3%"
        assert format_percent(5, signed=True) == "+5.0%"
        assert format_percent(-5, signed=True) == "-5.0%"

    def test_points(self):
        assert format_points(2.5) == "+2.5 pts"
        assert format_points(0) == "0.0 pts"


class TestComparisonCards:
    def test_empty_summary_renders_na(self):
        summary = KPISummary(0, None, None, 0.0)
        cards = comparison_cards(summary)
        assert [c.label for c in cards] == [
            "Price Trend",
            "Total Listings",
            "Avg. Days on Market",
            "Average Price",
        ]
        assert _format_value(cards[2]) == "N/A"
        assert _format_value(cards[3]) == "N/A"
        assert all(_format_delta(c) is None for c in cards)

    def test_deltas_from_comparison(self):
        current = KPISummary(12, 22000.0, 15.0, 5.0)
        previous = KPISummary(10, 20000.0, 20.0, 2.0)
        changes = KPIChanges(
            percentage_change=3.0,
            total_listings=20.0,
            average_days_on_market=-25.0,
            average_price=None,
        )
        cards = comparison_cards(current, KPIComparison(current, previous, changes))
        assert _format_value(cards[0]) == "+5.0%"
        assert _format_delta(cards[0]) == "+3.0 pts"
        assert _format_value(cards[1]) == "12"
        assert _format_delta(cards[1]) == "+20.0%"
        assert cards[2].delta_color == "inverse"
        assert _format_value(cards[3]) == "$22,000"
        assert _format_delta(cards[3]) is None
