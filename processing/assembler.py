"""
Metrics Assembler - Build the /api/macro-data response body.

Turns the fetched series into:
- a flat metrics map (one entry per indicator)
- derived metrics (real rate, inflation momentum, inflation surprise)
- two 6-point histories for the charts
- static reference data (sectors, FOMC)

Index series (CPI) are reported as YoY change, rate series as levels.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from errors import CriticalDataMissing
from registry import (
    FOMC,
    HISTORY_POINTS,
    SECTORS,
    STATIC_METRICS,
    SeriesRegistry,
    registry as default_registry,
)
from registry.series_registry import REAL_EARNINGS_CHANGE
from sources.base import Observation, SeriesData
from .transforms import (
    change,
    latest_value,
    month_over_month_change,
    previous_value,
    subtract,
    year_over_year_change,
)

logger = logging.getLogger(__name__)


@dataclass
class MetricEntry:
    """One published indicator plus its period-over-period change."""
    value: Optional[float]
    change: Optional[float]
    raw: Optional[float] = None
    with_raw: bool = field(default=False, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {'value': self.value, 'change': self.change}
        if self.with_raw:
            out['raw'] = self.raw
        return out


@dataclass
class DerivedEntry:
    """Metric computed from other metrics, never fetched directly."""
    value: Optional[float]
    change: Optional[float]
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {'value': self.value, 'change': self.change}
        out.update(self.extra)
        return out


def _observations(series: Dict[str, SeriesData], key: str) -> List[Observation]:
    data = series.get(key)
    if data is None or not data.is_valid:
        return []
    return data.observations


def format_timestamp(now: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a Z suffix."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


# =============================================================================
# FLAT METRICS
# =============================================================================

def index_metric(observations: Sequence[Observation]) -> MetricEntry:
    """YoY as value, MoM as change, latest index level as raw."""
    return MetricEntry(
        value=year_over_year_change(observations),
        change=month_over_month_change(observations),
        raw=latest_value(observations),
        with_raw=True,
    )


def rate_metric(observations: Sequence[Observation]) -> MetricEntry:
    """Latest level as value, simple difference as change."""
    current = latest_value(observations)
    return MetricEntry(value=current, change=change(current, previous_value(observations)))


def build_metrics(series: Dict[str, SeriesData], registry: SeriesRegistry) -> Dict[str, MetricEntry]:
    """One MetricEntry per tracked series, then the static indicators."""
    metrics: Dict[str, MetricEntry] = {}
    for info in registry.tracked():
        observations = _observations(series, info.metric_key)
        metrics[info.metric_key] = index_metric(observations) if info.is_index else rate_metric(observations)

    wage = STATIC_METRICS['wageGrowth']
    metrics['wageGrowth'] = MetricEntry(value=wage['value'], change=wage['change'])

    cpi = metrics.get('cpi')
    real_earnings = subtract(wage['value'], cpi.value if cpi else None, 1)
    metrics['realEarningsGrowth'] = MetricEntry(
        value=real_earnings,
        change=REAL_EARNINGS_CHANGE if real_earnings is not None else None,
    )

    pe = STATIC_METRICS['sp500PE']
    metrics['sp500PE'] = MetricEntry(value=pe['value'], change=pe['change'])
    return metrics


# =============================================================================
# DERIVED METRICS
# =============================================================================

def build_derived(
    series: Dict[str, SeriesData],
    metrics: Dict[str, MetricEntry],
    expected_inflation: float,
) -> Dict[str, DerivedEntry]:
    """Real rate, inflation momentum and inflation surprise."""
    cpi_obs = _observations(series, 'cpi')
    fed_obs = _observations(series, 'fedRate')

    cpi_yoy = metrics['cpi'].value
    cpi_yoy_prev = year_over_year_change(cpi_obs[1:])

    real_rate = subtract(metrics['fedRate'].value, cpi_yoy)
    real_rate_prev = subtract(previous_value(fed_obs), cpi_yoy_prev)

    momentum = metrics['cpi'].change
    momentum_prev = month_over_month_change(cpi_obs[1:])

    surprise = subtract(cpi_yoy, expected_inflation, 1)
    surprise_prev = subtract(cpi_yoy_prev, expected_inflation, 1)

    return {
        'realRate': DerivedEntry(value=real_rate, change=change(real_rate, real_rate_prev)),
        'inflationMomentum': DerivedEntry(value=momentum, change=change(momentum, momentum_prev)),
        'inflationSurprise': DerivedEntry(
            value=surprise,
            change=subtract(surprise, surprise_prev, 1),
            extra={'expected': expected_inflation},
        ),
    }


# =============================================================================
# HISTORY
# =============================================================================

def _window_for_month(observations: Sequence[Observation], year: int, month: int) -> Sequence[Observation]:
    """Observations ending at the given calendar month (newest first), or empty."""
    for i, obs in enumerate(observations):
        if obs.date.year == year and obs.date.month == month:
            return observations[i:]
    return []


def build_history(
    primary: Sequence[Observation],
    secondary: Sequence[Observation],
    transform: Callable[[Sequence[Observation]], Optional[float]],
    keys: Tuple[str, str],
    points: int = HISTORY_POINTS,
) -> List[Dict[str, Any]]:
    """
    Build a chart history, oldest first.

    Anchored on the latest `points` months of the primary series (the
    secondary series when the primary is unavailable). Each point applies
    `transform` to the window ending at that month, so a YoY point uses the
    observation twelve periods before that month.
    """
    anchor = primary or secondary
    history = []
    for obs in reversed(anchor[:points]):
        year, month = obs.date.year, obs.date.month
        history.append({
            'month': obs.date.strftime('%b'),
            keys[0]: transform(_window_for_month(primary, year, month)),
            keys[1]: transform(_window_for_month(secondary, year, month)),
        })
    return history


def build_inflation_history(series: Dict[str, SeriesData]) -> List[Dict[str, Any]]:
    return build_history(
        _observations(series, 'cpi'),
        _observations(series, 'coreCPI'),
        year_over_year_change,
        ('cpi', 'core'),
    )


def build_rate_history(series: Dict[str, SeriesData]) -> List[Dict[str, Any]]:
    return build_history(
        _observations(series, 'fedRate'),
        _observations(series, 'treasury10y'),
        latest_value,
        ('rate', 'yield'),
    )


# =============================================================================
# PAYLOAD
# =============================================================================

def check_critical(series: Dict[str, SeriesData], registry: SeriesRegistry) -> None:
    """Raise CriticalDataMissing when every critical series is unusable.

    A series with no observations, or whose latest value is missing, is unusable.
    """
    critical = registry.critical_keys()
    if not critical:
        return
    failed = [key for key in critical if latest_value(_observations(series, key)) is None]
    if len(failed) < len(critical):
        return

    reasons = []
    for key in failed:
        data = series.get(key)
        info = registry.get_metric(key)
        series_id = info.id if info else key
        if data is not None and data.error:
            reason = data.error
        elif data is not None and data.observations:
            reason = "latest value missing"
        else:
            reason = "no data"
        reasons.append(f"{series_id}: {reason}")
    raise CriticalDataMissing(
        "Failed to fetch critical data from FRED (" + "; ".join(reasons) + ")"
    )


def assemble_payload(
    series: Dict[str, SeriesData],
    now: datetime,
    expected_inflation: float = 3.0,
    registry: Optional[SeriesRegistry] = None,
) -> Dict[str, Any]:
    """
    Build the full response body from fetched series.

    Args:
        series: metric key (e.g. 'cpi') -> SeriesData
        now: assembly time, used for the timestamp field
        expected_inflation: baseline for the inflation surprise
        registry: tracked series (defaults to the global registry)

    Raises:
        CriticalDataMissing: if both critical series are unusable
    """
    registry = registry or default_registry
    check_critical(series, registry)

    missing = [key for key in (info.metric_key for info in registry.tracked()) if not _observations(series, key)]
    if missing:
        logger.warning("[Assembler] Degraded metrics, no data for: %s", ", ".join(missing))

    metrics = build_metrics(series, registry)
    derived = build_derived(series, metrics, expected_inflation)

    anchor = series.get('cpi')
    if anchor is None or not anchor.is_valid:
        anchor = series.get('fedRate')
    last_updated = anchor.latest_date.isoformat() if anchor is not None and anchor.latest_date else None

    return {
        'timestamp': format_timestamp(now),
        'lastUpdated': last_updated,
        'metrics': {key: entry.to_dict() for key, entry in metrics.items()},
        'derived': {key: entry.to_dict() for key, entry in derived.items()},
        'history': {
            'inflation': build_inflation_history(series),
            'rates': build_rate_history(series),
        },
        'sectors': [dict(row) for row in SECTORS],
        'fomc': dict(FOMC),
    }
