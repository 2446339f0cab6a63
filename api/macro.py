"""
Macro Data API Endpoint

GET /api/macro-data - the dashboard's single data feed.

Flow:
1. Fresh cache hit -> respond immediately (cached: true)
2. Otherwise fetch every tracked series concurrently
3. Assemble metrics, derived metrics and histories
4. Success -> replace the cache and respond (cached: false)
5. Critical data lost -> serve the stale entry if there is one (degraded),
   else 500 with a structured error body
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from cache import ResponseCache, response_cache
from config import Config, config
from errors import ConfigurationMissing, CriticalDataMissing, MacroDataError
from processing import assemble_payload
from registry import SeriesRegistry, registry
from sources import DataSourceManager, SeriesData, source_manager

logger = logging.getLogger(__name__)

macro_router = APIRouter()


# =============================================================================
# PYDANTIC MODELS
# =============================================================================

class ErrorResponse(BaseModel):
    """Error body. message is shown verbatim by the dashboard."""
    error: str
    message: Optional[str] = None
    details: Optional[List[str]] = None


def error_body(error: str, message: Optional[str] = None, details: Optional[List[str]] = None) -> Dict[str, Any]:
    return ErrorResponse(error=error, message=message, details=details).model_dump(exclude_none=True)


# =============================================================================
# SERVICE
# =============================================================================

class MacroDataService:
    """Fetch -> assemble -> cache -> respond, with stale fallback."""

    def __init__(
        self,
        sources: DataSourceManager,
        cache: ResponseCache,
        settings: Config = config,
        series_registry: SeriesRegistry = registry,
        clock: Callable[[], float] = time.time,
    ):
        self._sources = sources
        self._cache = cache
        self._settings = settings
        self._registry = series_registry
        self._clock = clock

    @property
    def cache(self) -> ResponseCache:
        return self._cache

    async def get_macro_data(self) -> Tuple[int, Dict[str, Any]]:
        """
        Handle one GET request.

        Returns:
            (status_code, body)
        """
        if not self._sources.source.configured:
            logger.error("[MacroData] FRED_API_KEY not configured")
            return 500, self._configuration_error()

        fresh = self._cache.get()
        if fresh is not None:
            age = self._cache.age_minutes(fresh)
            logger.info("[MacroData] Serving from cache (age %d min)", age)
            return 200, {**fresh.payload, 'cached': True, 'cacheAge': age}

        logger.info("[MacroData] Fetching fresh data from %s...", self._sources.source.name)
        tracked = self._registry.tracked()
        try:
            results = await self._sources.fetch_many(tracked)
        except ConfigurationMissing:
            logger.error("[MacroData] FRED_API_KEY rejected as missing by source")
            return 500, self._configuration_error()

        series = {info.metric_key: data for info, data in zip(tracked, results)}
        now = datetime.fromtimestamp(self._clock(), tz=timezone.utc)

        try:
            payload = assemble_payload(
                series,
                now=now,
                expected_inflation=self._settings.expected_inflation,
                registry=self._registry,
            )
        except CriticalDataMissing as e:
            return self._fallback(e, results)

        self._cache.put(payload)
        logger.info("[MacroData] Successfully fetched and cached data")
        return 200, {**payload, 'cached': False}

    def _fallback(self, exc: MacroDataError, results: List[SeriesData]) -> Tuple[int, Dict[str, Any]]:
        stale = self._cache.peek()
        if stale is not None:
            age = self._cache.age_minutes(stale)
            logger.warning("[MacroData] %s - serving stale cache (age %d min)", exc.message, age)
            return 200, {
                **stale.payload,
                'cached': True,
                'cacheAge': age,
                'degraded': True,
                'message': f"Live data unavailable, showing data from {age} minutes ago. {exc.message}",
            }

        logger.error("[MacroData] %s - no cached data to fall back to", exc.message)
        details = None
        if self._settings.is_development:
            details = [f"{r.id}: {r.error}" for r in results if r.error]
        return 500, error_body('Failed to fetch macro data', exc.message, details)

    @staticmethod
    def _configuration_error() -> Dict[str, Any]:
        return error_body(
            'FRED_API_KEY not configured',
            'Add FRED_API_KEY to the server environment variables',
        )


# Global service instance
macro_service = MacroDataService(sources=source_manager, cache=response_cache)


def get_macro_service() -> MacroDataService:
    """Dependency hook (overridden in tests)."""
    return macro_service


# =============================================================================
# ROUTES
# =============================================================================

@macro_router.get("/api/macro-data")
async def macro_data(service: MacroDataService = Depends(get_macro_service)):
    """Aggregated macro indicators for the dashboard."""
    status_code, body = await service.get_macro_data()
    return JSONResponse(status_code=status_code, content=body)


@macro_router.api_route(
    "/api/macro-data",
    methods=["POST", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE"],
    include_in_schema=False,
)
async def macro_data_method_not_allowed():
    """Only GET is accepted; reject before any upstream work."""
    return JSONResponse(
        status_code=405,
        content=error_body('Method not allowed'),
        headers={'Allow': 'GET'},
    )
