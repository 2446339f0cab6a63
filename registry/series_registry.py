"""
Series Registry - Single Source of Truth

Holds the FRED series tracked by the dashboard and the static reference data
served next to the live metrics (sector sensitivities, FOMC metadata, metrics
that are not fetched yet).
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, List, Any


# Observations needed for one YoY value (current + 12 months back)
YOY_WINDOW = 13

# Points per history chart
HISTORY_POINTS = 6


@dataclass
class SeriesInfo:
    """Metadata for a single tracked series."""

    id: str
    metric_key: str
    name: str
    unit: str
    data_type: str = 'rate'  # 'index' (shown as YoY) or 'rate' (shown as level)
    critical: bool = False
    frequency: Optional[str] = None  # FRED aggregation, e.g. 'm' for monthly averages
    limit: int = YOY_WINDOW

    @property
    def is_index(self) -> bool:
        return self.data_type == 'index'


# Index series need a full YoY window for every history point
_INDEX_LIMIT = YOY_WINDOW + HISTORY_POINTS - 1


# =============================================================================
# SERIES DATABASE - Metadata for all tracked series
# =============================================================================

SERIES_DB: Dict[str, SeriesInfo] = {
    'CPIAUCSL': SeriesInfo(
        id='CPIAUCSL',
        metric_key='cpi',
        name='Consumer Price Index',
        unit='Index 1982-84=100',
        data_type='index',
        critical=True,
        limit=_INDEX_LIMIT,
    ),
    'CPILFESL': SeriesInfo(
        id='CPILFESL',
        metric_key='coreCPI',
        name='Core CPI',
        unit='Index 1982-84=100',
        data_type='index',
        limit=_INDEX_LIMIT,
    ),
    'FEDFUNDS': SeriesInfo(
        id='FEDFUNDS',
        metric_key='fedRate',
        name='Federal Funds Effective Rate',
        unit='Percent',
        critical=True,
    ),
    'DGS10': SeriesInfo(
        id='DGS10',
        metric_key='treasury10y',
        name='10-Year Treasury Yield',
        unit='Percent',
        frequency='m',
    ),
    'UNRATE': SeriesInfo(
        id='UNRATE',
        metric_key='unemployment',
        name='Unemployment Rate',
        unit='Percent',
    ),
}


# =============================================================================
# STATIC REFERENCE DATA - not derived from fetched series
# =============================================================================

# TODO: fetch wage growth from FRED CES0500000003 (YoY) and the S&P 500 P/E
# from a market data source instead of publishing fixed figures.
STATIC_METRICS: Dict[str, Dict[str, float]] = {
    'wageGrowth': {'value': 4.3, 'change': -0.2},
    'sp500PE': {'value': 19.2, 'change': 0.4},
}

REAL_EARNINGS_CHANGE = 0.3

SECTORS: List[Dict[str, Any]] = [
    {'sector': 'Energy', 'sensitivity': 0.72, 'status': 'Strong Position'},
    {'sector': 'Financials', 'sensitivity': 0.45, 'status': 'Favorable'},
    {'sector': 'Utilities', 'sensitivity': -0.35, 'status': 'Slight Pressure'},
    {'sector': 'Consumer Disc.', 'sensitivity': -0.65, 'status': 'Moderate Pressure'},
    {'sector': 'Technology', 'sensitivity': -0.85, 'status': 'Moderate Pressure'},
]

FOMC: Dict[str, Any] = {
    'nextMeeting': 'Dec 17-18, 2024',
    'holdProbability': 88,
    'source': 'CME FedWatch',
}


class SeriesRegistry:
    """Lookup over the tracked series."""

    def __init__(self, series: Optional[Dict[str, SeriesInfo]] = None):
        self._series = dict(series if series is not None else SERIES_DB)
        self._by_metric = {info.metric_key: info for info in self._series.values()}

    def get_series(self, series_id: str) -> Optional[SeriesInfo]:
        """Get metadata for a series ID."""
        return self._series.get(series_id)

    def get_metric(self, metric_key: str) -> Optional[SeriesInfo]:
        """Get metadata by the response metric key (e.g. 'fedRate')."""
        return self._by_metric.get(metric_key)

    def tracked(self) -> List[SeriesInfo]:
        """All tracked series, in fetch order."""
        return list(self._series.values())

    def critical_keys(self) -> List[str]:
        """Metric keys whose loss fails the whole response."""
        return [info.metric_key for info in self._series.values() if info.critical]

    def stats(self) -> dict:
        return {
            'tracked': [info.id for info in self._series.values()],
            'critical': self.critical_keys(),
        }


# Global registry instance
registry = SeriesRegistry()
