"""Number, currency and range formatting for report output."""

from __future__ import annotations

import math
from typing import Callable

from src.modeling.ranges import Range


def _is_finite(value: float) -> bool:
    return not (math.isnan(value) or math.isinf(value))


def format_currency(amount: float) -> str:
    """Whole dollars with thousands separators, e.g. ``$1,234,568``."""
    if not _is_finite(amount):
        return "N/A"
    rounded = round(amount)
    sign = "-" if rounded < 0 else ""
    return f"{sign}${abs(rounded):,.0f}"


def format_number(value: float, decimals: int = 0) -> str:
    if not _is_finite(value):
        return "N/A"
    return f"{value:,.{decimals}f}"


def format_compact_currency(amount: float) -> str:
    """Short form used in measure lines: $1.2M, $350K, $900, -$2.0M."""
    if not _is_finite(amount):
        return "N/A"
    sign = "-" if amount < 0 else ""
    magnitude = abs(amount)
    if magnitude >= 1_000_000:
        return f"{sign}${magnitude / 1_000_000:.1f}M"
    if magnitude >= 1_000:
        return f"{sign}${magnitude / 1_000:.0f}K"
    return f"{sign}${magnitude:.0f}"


def format_range(value: Range, formatter: Callable[[float], str] = format_number) -> str:
    return f"{formatter(value.low)} - {formatter(value.high)}"


def format_years(value: Range) -> str:
    return f"{format_range(value, lambda years: format_number(years, 1))} years"
