"""
Data Transforms - null-safe arithmetic, YoY and MoM calculation.

Every consumer goes through these helpers so that missing data is handled
the same way everywhere:
- A missing input always yields None, never 0
- Percent changes never divide by zero
- Results are rounded once, when they are produced
"""

import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Sequence, Any

from errors import MalformedValue


# FRED marks missing observations with a single dot
MISSING_SENTINEL = '.'

# Index 0 = latest, index 12 = twelve periods prior
YOY_PERIODS = 12


def parse_value(raw: Any) -> Optional[float]:
    """
    Parse a raw provider value.

    The missing-value sentinel (and empty input) maps to None. Anything else
    must be a finite decimal.

    Raises:
        MalformedValue: if the value cannot be parsed
    """
    if raw is None:
        return None
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        value = float(raw)
    else:
        text = str(raw).strip()
        if text == '' or text == MISSING_SENTINEL:
            return None
        try:
            value = float(text)
        except ValueError:
            raise MalformedValue(f"Cannot parse observation value {raw!r}")

    if not math.isfinite(value):
        raise MalformedValue(f"Non-finite observation value {raw!r}")
    return value


def round_half_up(value: Optional[float], places: int = 2) -> Optional[float]:
    """Round half away from zero on the shortest decimal repr of value."""
    if value is None:
        return None
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def subtract(a: Optional[float], b: Optional[float], places: int = 2) -> Optional[float]:
    """Null-safe a - b, rounded."""
    if a is None or b is None:
        return None
    return round_half_up(a - b, places)


def change(current: Optional[float], previous: Optional[float]) -> Optional[float]:
    """Simple period-over-period difference, rounded to 2 places."""
    return subtract(current, previous, 2)


def percent_change(current: Optional[float], previous: Optional[float]) -> Optional[float]:
    """Percent change from previous to current, rounded to 2 places."""
    if current is None or previous is None or previous == 0:
        return None
    return round_half_up((current - previous) / previous * 100, 2)


def _value_at(observations: Sequence[Any], index: int) -> Optional[float]:
    if observations is None or len(observations) <= index:
        return None
    return observations[index].value


def year_over_year_change(observations: Sequence[Any]) -> Optional[float]:
    """
    Year-over-year percent change for a newest-first observation list.

    Requires at least 13 observations: index 0 is the latest value and
    index 12 the value twelve periods earlier.
    """
    if observations is None or len(observations) < YOY_PERIODS + 1:
        return None
    return percent_change(_value_at(observations, 0), _value_at(observations, YOY_PERIODS))


def month_over_month_change(observations: Sequence[Any]) -> Optional[float]:
    """Month-over-month percent change for a newest-first observation list."""
    if observations is None or len(observations) < 2:
        return None
    return percent_change(_value_at(observations, 0), _value_at(observations, 1))


def latest_value(observations: Sequence[Any]) -> Optional[float]:
    """Most recent value, or None."""
    return _value_at(observations, 0)


def previous_value(observations: Sequence[Any]) -> Optional[float]:
    """Value one period before the latest, or None."""
    return _value_at(observations, 1)
