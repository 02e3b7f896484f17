"""
Backend API package initialization.

This package contains FastAPI router modules for the Live Dashboard:
- dashboard: Scoping, aggregation, ranking and personnel report endpoints
"""

from fastapi import APIRouter

from live_dashboard.api.dashboard import router as dashboard_router

# Create main API router
api_router = APIRouter()

api_router.include_router(dashboard_router, prefix="/dashboard", tags=["dashboard"])

__all__ = [
    "api_router",
    "dashboard_router",
]
