"""Shared fixtures: monthly observation builders, a fake FRED source, a fake clock."""

from datetime import date
from typing import Dict, List, Optional, Union

import pytest
from dateutil.relativedelta import relativedelta

from sources.base import DataSource, Observation
from errors import UpstreamUnavailable

LATEST_MONTH = date(2024, 10, 1)


def monthly(values: List[Optional[float]], latest: date = LATEST_MONTH) -> List[Observation]:
    """Observations newest first, one per month ending at `latest`."""
    return [
        Observation(date=latest - relativedelta(months=i), value=value)
        for i, value in enumerate(values)
    ]


# 18 monthly CPI index values, newest first
CPI_VALUES = [
    312.3, 311.8, 311.1, 310.6, 310.3, 309.7, 309.0, 308.4, 307.6,
    306.7, 305.9, 303.4, 301.8, 300.9, 300.2, 299.5, 298.8, 298.1,
]
CORE_VALUES = [
    320.1, 319.4, 318.9, 318.2, 317.5, 317.0, 316.3, 315.7, 314.9,
    314.1, 313.4, 312.5, 310.8, 310.0, 309.2, 308.5, 307.6, 306.9,
]
FED_VALUES = [5.33, 5.33, 5.33, 5.33, 5.33, 5.33, 5.33, 5.33, 5.33, 5.33, 5.33, 5.33, 5.12]
TREASURY_VALUES = [4.10, 3.91, 3.87, 4.25, 4.31, 4.48, 4.54, 4.21, 4.19, 4.06, 4.02, 4.47, 4.80]
UNRATE_VALUES = [4.1, 4.2, 4.2, 4.3, 4.1, 4.0, 3.9, 3.9, 3.8, 3.7, 3.7, 3.8, 3.9]


def default_series() -> Dict[str, List[Observation]]:
    return {
        'CPIAUCSL': monthly(CPI_VALUES),
        'CPILFESL': monthly(CORE_VALUES),
        'FEDFUNDS': monthly(FED_VALUES),
        'DGS10': monthly(TREASURY_VALUES),
        'UNRATE': monthly(UNRATE_VALUES),
    }


class FakeSource(DataSource):
    """In-memory DataSource. A series mapped to an exception raises it."""

    def __init__(self, series: Optional[Dict[str, Union[List[Observation], Exception]]] = None,
                 configured: bool = True):
        self.series = series if series is not None else default_series()
        self._configured = configured
        self.calls: List[tuple] = []

    @property
    def name(self) -> str:
        return "Fake"

    @property
    def configured(self) -> bool:
        return self._configured

    async def fetch_series(self, series_id, limit, frequency=None):
        self.calls.append((series_id, limit, frequency))
        outcome = self.series.get(series_id)
        if outcome is None:
            raise UpstreamUnavailable(f"FRED API error (500) for {series_id}", series_id=series_id)
        if isinstance(outcome, Exception):
            raise outcome
        return list(outcome)

    def fail(self, *series_ids: str) -> None:
        for series_id in series_ids:
            self.series[series_id] = UpstreamUnavailable(
                f"FRED API error (503) for {series_id}", series_id=series_id
            )


class FakeClock:
    """Epoch-seconds clock that only moves when told to."""

    def __init__(self, start: float = 1_730_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_source() -> FakeSource:
    return FakeSource()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
