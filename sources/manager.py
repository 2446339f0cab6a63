"""
Data Source Manager - Concurrent fetching of all tracked series.

Fans out one fetch per series, waits for all of them to settle and turns
per-series failures into SeriesData errors instead of aborting.
"""

import asyncio
import logging
from typing import List, Optional

from .base import DataSource, SeriesData
from .fred import FREDSource
from errors import ConfigurationMissing, MacroDataError
from registry import SeriesInfo

logger = logging.getLogger(__name__)


class DataSourceManager:
    """Scatter-gather over a data source."""

    def __init__(self, source: Optional[DataSource] = None):
        self._source = source if source is not None else FREDSource()

    @property
    def source(self) -> DataSource:
        return self._source

    async def fetch(self, info: SeriesInfo) -> SeriesData:
        """
        Fetch a single series.

        Data-quality and upstream errors are recorded on the result.
        ConfigurationMissing propagates.
        """
        try:
            observations = await self._source.fetch_series(info.id, info.limit, info.frequency)
        except ConfigurationMissing:
            raise
        except MacroDataError as e:
            logger.warning("[Sources] %s failed (%s): %s", info.id, e.code, e.message)
            return SeriesData(id=info.id, error=e.message, error_type=e.code)

        return SeriesData(id=info.id, observations=observations)

    async def fetch_many(self, series: List[SeriesInfo]) -> List[SeriesData]:
        """
        Fetch multiple series in parallel.

        All fetches settle before this returns; one failure never cancels
        the others.

        Returns:
            List of SeriesData in same order as input
        """
        tasks = [self.fetch(info) for info in series]
        settled = await asyncio.gather(*tasks, return_exceptions=True)

        results: List[SeriesData] = []
        for info, outcome in zip(series, settled):
            if isinstance(outcome, ConfigurationMissing):
                raise outcome
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                logger.exception("[Sources] Unexpected error fetching %s", info.id, exc_info=outcome)
                results.append(SeriesData(
                    id=info.id,
                    error=f"Error fetching {info.id}: {outcome}",
                    error_type=type(outcome).__name__,
                ))
            else:
                results.append(outcome)

        ok = sum(1 for r in results if r.is_valid)
        logger.info("[Sources] Fetched %d/%d series from %s", ok, len(results), self._source.name)
        return results


# Global instance
source_manager = DataSourceManager()
