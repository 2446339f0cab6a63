"""
Health Check and Utility Endpoints
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from config import config
from registry import registry
from .macro import MacroDataService, get_macro_service

health_router = APIRouter()

VERSION = "1.0.0"


@health_router.get("/health")
async def health_check():
    """Simple health check endpoint."""
    return JSONResponse({
        "status": "healthy",
        "version": VERSION
    })


@health_router.get("/api/status")
async def api_status(service: MacroDataService = Depends(get_macro_service)):
    """Detailed API status: configuration, tracked series and cache state."""
    return JSONResponse({
        "status": "healthy",
        "version": VERSION,
        "config": {
            "fred_api_configured": bool(config.fred_api_key),
            "environment": config.environment,
            "cache_ttl_seconds": config.macro_cache_ttl,
            "expected_inflation": config.expected_inflation,
        },
        "series": registry.stats(),
        "cache": service.cache.stats(),
    })


@health_router.get("/api/cache/clear")
async def clear_cache(service: MacroDataService = Depends(get_macro_service)):
    """Clear the response cache (admin endpoint)."""
    service.cache.clear()
    return JSONResponse({
        "status": "success",
        "message": "Response cache cleared"
    })
