"""
Abstract interface for data sources.

A source fetches the most recent observations for one series, newest first.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import Optional, List


@dataclass(frozen=True)
class Observation:
    """Single observation. value is None when the provider marks it missing."""

    date: date
    value: Optional[float]


@dataclass
class SeriesData:
    """Result from fetching a data series."""

    id: str
    observations: List[Observation] = field(default_factory=list)
    error: Optional[str] = None
    error_type: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        """Check if data was fetched successfully."""
        return self.error is None and len(self.observations) > 0

    @property
    def latest_date(self) -> Optional[date]:
        """Get most recent date."""
        return self.observations[0].date if self.observations else None


class DataSource(ABC):
    """Abstract base class for data sources."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name of this data source."""
        pass

    @property
    def configured(self) -> bool:
        """Whether the source has what it needs (credentials) to fetch."""
        return True

    @abstractmethod
    async def fetch_series(
        self,
        series_id: str,
        limit: int,
        frequency: Optional[str] = None,
    ) -> List[Observation]:
        """
        Fetch the most recent observations for a series.

        Args:
            series_id: The identifier for the series
            limit: Number of observations to request
            frequency: Optional aggregation frequency

        Returns:
            Observations ordered newest first
        """
        pass
