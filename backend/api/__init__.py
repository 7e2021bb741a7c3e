"""API endpoints."""

from .activities import router as activities_router
from .slots import router as slots_router
from .stats import router as stats_router
from .sync import router as sync_router
from .export import router as export_router

__all__ = ["activities_router", "slots_router", "stats_router", "sync_router", "export_router"]
