"""Processing module - Null-safe transforms and response assembly."""

from .transforms import (
    parse_value,
    round_half_up,
    subtract,
    change,
    percent_change,
    year_over_year_change,
    month_over_month_change,
)
from .assembler import assemble_payload, MetricEntry, DerivedEntry

__all__ = [
    'parse_value',
    'round_half_up',
    'subtract',
    'change',
    'percent_change',
    'year_over_year_change',
    'month_over_month_change',
    'assemble_payload',
    'MetricEntry',
    'DerivedEntry',
]
