"""Data sources module - FRED fetcher and concurrent fetch manager."""

from .base import DataSource, Observation, SeriesData
from .fred import FREDSource
from .manager import DataSourceManager, source_manager

__all__ = [
    'DataSource',
    'Observation',
    'SeriesData',
    'FREDSource',
    'DataSourceManager',
    'source_manager',
]
