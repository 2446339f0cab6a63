"""Unit tests for the metrics assembler."""

import math
from datetime import datetime, timezone

import pytest

from errors import CriticalDataMissing
from processing.assembler import MetricEntry, assemble_payload, build_history
from processing.transforms import year_over_year_change
from sources.base import SeriesData
from conftest import CPI_VALUES, TREASURY_VALUES, default_series, monthly

NOW = datetime(2024, 11, 5, 14, 30, 0, 123000, tzinfo=timezone.utc)

KEYS = {
    'CPIAUCSL': 'cpi',
    'CPILFESL': 'coreCPI',
    'FEDFUNDS': 'fedRate',
    'DGS10': 'treasury10y',
    'UNRATE': 'unemployment',
}


def series_map(failed=()):
    out = {}
    for series_id, observations in default_series().items():
        if series_id in failed:
            out[KEYS[series_id]] = SeriesData(id=series_id, error=f"FRED API error (503) for {series_id}")
        else:
            out[KEYS[series_id]] = SeriesData(id=series_id, observations=observations)
    return out


def walk_numbers(node):
    if isinstance(node, dict):
        for value in node.values():
            yield from walk_numbers(value)
    elif isinstance(node, list):
        for value in node:
            yield from walk_numbers(value)
    elif isinstance(node, float):
        yield node


@pytest.mark.unit
class TestMetrics:
    def test_index_metrics_use_yoy_mom_and_raw(self) -> None:
        payload = assemble_payload(series_map(), NOW)
        assert payload['metrics']['cpi'] == {'value': 3.48, 'change': 0.16, 'raw': 312.3}
        assert payload['metrics']['coreCPI']['value'] == 2.99
        assert payload['metrics']['coreCPI']['raw'] == 320.1

    def test_rate_metrics_use_level_and_difference(self) -> None:
        metrics = assemble_payload(series_map(), NOW)['metrics']
        assert metrics['fedRate'] == {'value': 5.33, 'change': 0.0}
        assert metrics['treasury10y'] == {'value': 4.10, 'change': 0.19}
        assert metrics['unemployment'] == {'value': 4.1, 'change': -0.1}

    def test_static_metrics(self) -> None:
        metrics = assemble_payload(series_map(), NOW)['metrics']
        assert metrics['wageGrowth'] == {'value': 4.3, 'change': -0.2}
        assert metrics['sp500PE'] == {'value': 19.2, 'change': 0.4}
        assert metrics['realEarningsGrowth'] == {'value': 0.8, 'change': 0.3}

    def test_metric_keys(self) -> None:
        metrics = assemble_payload(series_map(), NOW)['metrics']
        assert list(metrics) == [
            'cpi', 'coreCPI', 'fedRate', 'treasury10y', 'unemployment',
            'wageGrowth', 'realEarningsGrowth', 'sp500PE',
        ]


@pytest.mark.unit
class TestDerived:
    def test_real_rate(self) -> None:
        derived = assemble_payload(series_map(), NOW)['derived']
        # 5.33 - 3.48, previous month 5.33 - 3.62
        assert derived['realRate'] == {'value': 1.85, 'change': 0.14}

    def test_inflation_momentum_passes_through_cpi_change(self) -> None:
        payload = assemble_payload(series_map(), NOW)
        assert payload['derived']['inflationMomentum']['value'] == payload['metrics']['cpi']['change']
        assert payload['derived']['inflationMomentum']['change'] == -0.07

    def test_inflation_surprise(self) -> None:
        derived = assemble_payload(series_map(), NOW, expected_inflation=3.0)['derived']
        assert derived['inflationSurprise'] == {'value': 0.5, 'change': -0.1, 'expected': 3.0}

    def test_real_rate_null_without_cpi(self) -> None:
        payload = assemble_payload(series_map(failed={'CPIAUCSL'}), NOW)
        assert payload['metrics']['cpi'] == {'value': None, 'change': None, 'raw': None}
        assert payload['derived']['realRate'] == {'value': None, 'change': None}
        assert payload['derived']['inflationSurprise']['value'] is None
        assert payload['metrics']['realEarningsGrowth'] == {'value': None, 'change': None}


@pytest.mark.unit
class TestHistory:
    def test_inflation_history_oldest_first(self) -> None:
        history = assemble_payload(series_map(), NOW)['history']['inflation']
        assert [p['month'] for p in history] == ['May', 'Jun', 'Jul', 'Aug', 'Sep', 'Oct']
        assert history[-1]['cpi'] == 3.48
        assert history[0]['cpi'] == 3.89
        assert history[-1]['core'] == 2.99

    def test_each_point_uses_its_own_window(self) -> None:
        history = assemble_payload(series_map(), NOW)['history']['inflation']
        observations = monthly(CPI_VALUES)
        expected = [year_over_year_change(observations[i:]) for i in range(5, -1, -1)]
        assert [p['cpi'] for p in history] == expected
        assert len(set(expected)) > 1

    def test_rate_history(self) -> None:
        history = assemble_payload(series_map(), NOW)['history']['rates']
        assert len(history) == 6
        assert [p['rate'] for p in history] == [5.33] * 6
        assert [p['yield'] for p in history] == list(reversed(TREASURY_VALUES[:6]))

    def test_secondary_aligned_by_month(self) -> None:
        primary = monthly([5.33, 5.33, 5.5])
        # Secondary is one month behind: no October point
        secondary = monthly([4.0, 4.2], latest=primary[1].date)
        history = build_history(primary, secondary, lambda obs: obs[0].value if obs else None, ('rate', 'yield'))
        assert [p['yield'] for p in history] == [4.2, 4.0, None]

    def test_short_series_yields_fewer_points(self) -> None:
        primary = monthly([5.33, 5.25])
        history = build_history(primary, [], lambda obs: obs[0].value if obs else None, ('rate', 'yield'))
        assert [p['rate'] for p in history] == [5.25, 5.33]
        assert all(p['yield'] is None for p in history)

    def test_history_without_primary_uses_secondary_months(self) -> None:
        payload = assemble_payload(series_map(failed={'CPIAUCSL'}), NOW)
        inflation = payload['history']['inflation']
        assert len(inflation) == 6
        assert all(p['cpi'] is None for p in inflation)
        assert inflation[-1]['core'] == 2.99


@pytest.mark.unit
class TestPayload:
    def test_envelope(self) -> None:
        payload = assemble_payload(series_map(), NOW)
        assert payload['timestamp'] == '2024-11-05T14:30:00.123Z'
        assert payload['lastUpdated'] == '2024-10-01'
        assert len(payload['sectors']) == 5
        assert payload['sectors'][0] == {'sector': 'Energy', 'sensitivity': 0.72, 'status': 'Strong Position'}
        assert all(-1 <= row['sensitivity'] <= 1 for row in payload['sectors'])
        assert payload['fomc'] == {'nextMeeting': 'Dec 17-18, 2024', 'holdProbability': 88, 'source': 'CME FedWatch'}

    def test_all_numbers_finite(self) -> None:
        payload = assemble_payload(series_map(failed={'DGS10', 'UNRATE'}), NOW)
        assert all(math.isfinite(n) for n in walk_numbers(payload))

    def test_non_critical_failures_degrade_to_null(self) -> None:
        payload = assemble_payload(series_map(failed={'DGS10', 'UNRATE', 'CPILFESL'}), NOW)
        assert payload['metrics']['treasury10y'] == {'value': None, 'change': None}
        assert payload['metrics']['unemployment'] == {'value': None, 'change': None}
        assert payload['metrics']['coreCPI']['value'] is None
        assert payload['metrics']['cpi']['value'] == 3.48

    def test_one_critical_series_missing_still_assembles(self) -> None:
        payload = assemble_payload(series_map(failed={'FEDFUNDS'}), NOW)
        assert payload['metrics']['fedRate'] == {'value': None, 'change': None}
        assert payload['history']['rates'][-1]['rate'] is None
        assert payload['history']['rates'][-1]['yield'] == 4.10

    def test_last_updated_falls_back_to_fed_rate(self) -> None:
        payload = assemble_payload(series_map(failed={'CPIAUCSL'}), NOW)
        assert payload['lastUpdated'] == '2024-10-01'

    def test_both_critical_missing_raises(self) -> None:
        with pytest.raises(CriticalDataMissing, match="CPIAUCSL"):
            assemble_payload(series_map(failed={'CPIAUCSL', 'FEDFUNDS'}), NOW)

    def test_critical_series_with_missing_latest_values_raises(self) -> None:
        series = series_map()
        series['cpi'] = SeriesData(id='CPIAUCSL', observations=monthly([None] * 18))
        series['fedRate'] = SeriesData(id='FEDFUNDS', observations=monthly([None] * 13))
        with pytest.raises(CriticalDataMissing, match="latest value missing"):
            assemble_payload(series, NOW)

    def test_one_critical_series_with_missing_values_still_assembles(self) -> None:
        series = series_map()
        series['cpi'] = SeriesData(id='CPIAUCSL', observations=monthly([None] * 18))
        payload = assemble_payload(series, NOW)
        assert payload['metrics']['cpi']['value'] is None
        assert payload['metrics']['fedRate']['value'] == 5.33

    def test_metric_entry_repr_hides_serialization_flag(self) -> None:
        entry = MetricEntry(value=3.48, change=0.16, raw=312.3, with_raw=True)
        assert 'with_raw' not in repr(entry)
        assert entry.to_dict() == {'value': 3.48, 'change': 0.16, 'raw': 312.3}
        assert MetricEntry(value=5.33, change=0.0).to_dict() == {'value': 5.33, 'change': 0.0}
