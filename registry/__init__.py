"""Registry module - Tracked series and static reference data."""

from .series_registry import (
    SeriesRegistry,
    SeriesInfo,
    SERIES_DB,
    STATIC_METRICS,
    SECTORS,
    FOMC,
    YOY_WINDOW,
    HISTORY_POINTS,
    registry,
)

__all__ = [
    'SeriesRegistry',
    'SeriesInfo',
    'SERIES_DB',
    'STATIC_METRICS',
    'SECTORS',
    'FOMC',
    'YOY_WINDOW',
    'HISTORY_POINTS',
    'registry',
]
