"""
FRED Data Source - Federal Reserve Economic Data

Primary source for every tracked series.
"""

import logging
from typing import Optional, List

import httpx
from dateutil.parser import isoparse

from .base import DataSource, Observation
from config import config
from errors import ConfigurationMissing, EmptySeries, MalformedValue, UpstreamUnavailable
from processing.transforms import parse_value
from registry import YOY_WINDOW

logger = logging.getLogger(__name__)


# Module-level connection pool for HTTP connection reuse
_async_client: Optional[httpx.AsyncClient] = None


def get_async_client() -> httpx.AsyncClient:
    """Get or create the shared async HTTP client with connection pooling."""
    global _async_client
    if _async_client is None or _async_client.is_closed:
        _async_client = httpx.AsyncClient(
            timeout=config.fred_timeout,
            limits=httpx.Limits(
                max_keepalive_connections=10,
                max_connections=20,
                keepalive_expiry=30.0
            )
        )
    return _async_client


async def close_async_client() -> None:
    """Close the shared client (app shutdown)."""
    global _async_client
    if _async_client is not None and not _async_client.is_closed:
        await _async_client.aclose()
    _async_client = None


class FREDSource(DataSource):
    """Data source for FRED (Federal Reserve Economic Data)."""

    BASE_URL = "https://api.stlouisfed.org/fred"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._api_key = api_key if api_key is not None else config.fred_api_key
        self._base_url = (base_url or config.fred_base_url or self.BASE_URL).rstrip('/')
        self._client = client

    @property
    def name(self) -> str:
        return "FRED"

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def _get_client(self) -> httpx.AsyncClient:
        return self._client if self._client is not None else get_async_client()

    async def fetch_series(
        self,
        series_id: str,
        limit: int = YOY_WINDOW,
        frequency: Optional[str] = None,
    ) -> List[Observation]:
        """
        Fetch the latest `limit` observations from FRED, newest first.

        One request per call, no retry.

        Raises:
            ConfigurationMissing: no API key
            UpstreamUnavailable: network error, timeout, non-2xx or FRED error body
            EmptySeries: zero observations returned
            MalformedValue: an observation could not be parsed
        """
        if not self._api_key:
            raise ConfigurationMissing("FRED API key not configured", series_id=series_id)
        if limit < YOY_WINDOW:
            raise ValueError(f"limit must be at least {YOY_WINDOW}, got {limit}")

        params = {
            'series_id': series_id,
            'api_key': self._api_key,
            'file_type': 'json',
            'sort_order': 'desc',
            'limit': limit,
        }
        if frequency:
            params['frequency'] = frequency

        try:
            resp = await self._get_client().get(f"{self._base_url}/series/observations", params=params)
        except httpx.TimeoutException:
            raise UpstreamUnavailable(f"Timeout fetching {series_id} from FRED", series_id=series_id)
        except httpx.HTTPError as e:
            raise UpstreamUnavailable(f"Error fetching {series_id}: {e}", series_id=series_id)

        # FRED returns 429 on rate limit, 400 on bad series, 500 on server error
        if resp.status_code == 429:
            raise UpstreamUnavailable(
                f"FRED API rate limit exceeded for {series_id}", series_id=series_id
            )
        if resp.status_code == 400:
            raise UpstreamUnavailable(
                f"Bad request for series '{series_id}'. The series ID may not exist.",
                series_id=series_id,
            )
        if resp.status_code < 200 or resp.status_code >= 300:
            raise UpstreamUnavailable(
                f"FRED API error ({resp.status_code}) for {series_id}", series_id=series_id
            )

        try:
            payload = resp.json()
        except ValueError:
            raise UpstreamUnavailable(f"Invalid JSON from FRED for {series_id}", series_id=series_id)

        if 'error_message' in payload:
            raise UpstreamUnavailable(payload.get('error_message', 'Unknown error'), series_id=series_id)

        raw_observations = payload.get('observations') or []
        if not raw_observations:
            raise EmptySeries(f"No data for series {series_id}", series_id=series_id)

        observations = []
        for obs in raw_observations:
            try:
                obs_date = isoparse(obs['date']).date()
            except (KeyError, TypeError, ValueError):
                raise MalformedValue(f"Bad observation date in {series_id}: {obs!r}", series_id=series_id)
            try:
                value = parse_value(obs.get('value'))
            except MalformedValue as e:
                raise MalformedValue(f"{series_id} {obs_date}: {e.message}", series_id=series_id)
            observations.append(Observation(date=obs_date, value=value))

        logger.debug("[FRED] %s: %d observations (latest %s)", series_id, len(observations), observations[0].date)
        return observations
