"""Interval helpers shared by the retrofit, financial and compliance modules.

Every derived money or physical quantity is carried as a ``Range`` (low, high)
instead of a point estimate. Two conventions recur across the pipeline and
live here so they stay consistent:

- ``divide_conservative`` pairs the low numerator with the high denominator
  (and vice versa), so a payback range runs from best plausible to worst
  plausible case.
- ``midpoint`` collapses a range to a single value where a comparison needs a
  point (penalty recalculation).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterable


def _divide(numerator: float, denominator: float) -> float:
    """IEEE-style division: x/0 is a signed infinity and 0/0 is NaN."""
    if denominator == 0:
        if numerator == 0:
            return math.nan
        return math.copysign(math.inf, numerator)
    return numerator / denominator


@dataclass(frozen=True)
class Range:
    """A [low, high] pair. Callers keep low <= high when composing ranges."""

    low: float
    high: float

    @classmethod
    def zero(cls) -> "Range":
        return cls(0.0, 0.0)

    @classmethod
    def sum(cls, ranges: Iterable["Range"]) -> "Range":
        """Element-wise sum; an empty iterable sums to zero."""
        total = cls.zero()
        for item in ranges:
            total = total + item
        return total

    def __add__(self, other: "Range") -> "Range":
        return Range(self.low + other.low, self.high + other.high)

    def scale(self, factor: float) -> "Range":
        return Range(self.low * factor, self.high * factor)

    def midpoint(self) -> float:
        return (self.low + self.high) / 2

    def to_dict(self) -> Dict[str, float]:
        return {'low': self.low, 'high': self.high}


def midpoint(value: Range) -> float:
    """Collapse an uncertainty interval to its midpoint."""
    return value.midpoint()


def divide_conservative(numerator: Range, denominator: Range) -> Range:
    """Cross-bounded division: low = num.low / den.high, high = num.high / den.low."""
    return Range(
        _divide(numerator.low, denominator.high),
        _divide(numerator.high, denominator.low),
    )


def net_savings(annual_savings: Range, cost: Range, years: int) -> Range:
    """Savings over ``years`` minus cost, pairing low savings with high cost."""
    return Range(
        annual_savings.low * years - cost.high,
        annual_savings.high * years - cost.low,
    )
