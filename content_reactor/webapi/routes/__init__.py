"""Routers exposed by the reaction web API."""

from .article_routes import router as article_router
from .lifecycle_routes import router as lifecycle_router
from .report_routes import router as report_router
from .translate_routes import router as translate_router

__all__ = ["article_router", "lifecycle_router", "report_router", "translate_router"]
