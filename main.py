"""
MacroPulse - Macro indicator feed for the client dashboard

Serves GET /api/macro-data: CPI, core CPI, fed funds, 10y Treasury and
unemployment from FRED, with derived metrics (real rate, inflation surprise),
6-month chart histories and a 15 minute response cache.

The dashboard itself (cards, charts, styling) lives in the frontend and only
consumes this JSON.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

# Import modules
from config import config
from registry import registry
from api import macro_router, health_router
from sources.fred import close_async_client

logging.basicConfig(
    level=getattr(logging, config.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# =============================================================================
# APP INITIALIZATION
# =============================================================================

app = FastAPI(
    title="MacroPulse",
    description="Macroeconomic indicators aggregated from FRED",
    version="1.0.0"
)

# The dashboard may be hosted anywhere
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)

# Include routers
app.include_router(macro_router)
app.include_router(health_router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("[App] Unhandled exception on %s %s", request.method, request.url.path)
    body = {"error": "Internal server error", "message": str(exc)}
    if config.is_development:
        body["details"] = [type(exc).__name__]
    return JSONResponse(status_code=500, content=body)


# =============================================================================
# STARTUP / SHUTDOWN
# =============================================================================

@app.on_event("startup")
async def startup():
    """Log configuration."""
    logger.info("=" * 60)
    logger.info("MacroPulse Starting Up")
    logger.info("  FRED: %s", 'SET' if config.fred_api_key else 'NOT SET')
    logger.info("  Series: %s", ", ".join(info.id for info in registry.tracked()))
    logger.info("  Cache TTL: %ds", config.macro_cache_ttl)
    logger.info("  Environment: %s", config.environment)
    logger.info("=" * 60)


@app.on_event("shutdown")
async def shutdown():
    """Release the pooled FRED client."""
    await close_async_client()


# =============================================================================
# RUN
# =============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
