"""API routes."""

from .records import router as records_router
from .proposals import router as proposals_router
from .sessions import router as sessions_router
from .analytics import router as analytics_router
from .audit import router as audit_router

__all__ = [
    "records_router",
    "proposals_router",
    "sessions_router",
    "analytics_router",
    "audit_router",
]
