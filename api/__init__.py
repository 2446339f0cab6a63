"""API module - FastAPI routers and endpoints."""

from .macro import macro_router, MacroDataService, macro_service, get_macro_service
from .health import health_router

__all__ = ['macro_router', 'health_router', 'MacroDataService', 'macro_service', 'get_macro_service']
