"""
Utility helpers for formatting prices, counts, and percentage changes.
"""

from __future__ import annotations

import math
from typing import Optional

MISSING = "N/A"


def _as_number(value) -> Optional[float]:
    if value is None:
        return None
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(numeric) or math.isinf(numeric):
        return None
    return numeric


def format_number(value: Optional[float], decimals: int = 0) -> str:
    numeric = _as_number(value)
    if numeric is None:
        return MISSING
    return f"{numeric:,.{decimals}f}"


def format_currency(
    value: Optional[float],
    currency: str = "$",
    decimals: int = 0,
) -> str:
    numeric = _as_number(value)
    if numeric is None:
        return MISSING

    sign = "-" if numeric < 0 else ""
    return f"{sign}{currency}{abs(numeric):,.{decimals}f}"


def format_percent(value: Optional[float], decimals: int = 1, signed: bool = False) -> str:
    numeric = _as_number(value)
    if numeric is None:
        return MISSING
    sign = "+" if signed and numeric > 0 else ""
    return f"{sign}{numeric:.{decimals}f}%"


def format_points(value: Optional[float], decimals: int = 1) -> str:
    """Difference between two percentages, e.g. "+2.5 pts"."""
    numeric = _as_number(value)
    if numeric is None:
        return MISSING
    sign = "+" if numeric > 0 else ""
    return f"{sign}{numeric:.{decimals}f} pts"
