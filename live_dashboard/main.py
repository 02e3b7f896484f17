"""
FastAPI application entry point for the Live Dashboard API.

This module configures logging and CORS, registers the API routers, and
starts the ASGI server when run directly.

The service keeps no connections or state between requests: each request
carries the collections of one page load, so there is nothing to open on
startup or close on shutdown.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from live_dashboard import __version__
from live_dashboard.api import api_router
from live_dashboard.core.config import get_settings

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=__version__,
    description=(
        "FastAPI backend for the live-commerce dashboards. "
        "Provides access scoping, metric aggregation, leaderboards, "
        "and personnel salary/KPI reports."
    ),
)

# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register API routers
app.include_router(api_router)

logger.info(f"{settings.app_name} {__version__} initialized")


@app.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring and load balancer probes.

    Returns:
        Dict with status 'healthy'
    """
    return {"status": "healthy"}


@app.get("/")
async def root():
    """
    Root endpoint providing API information.

    Returns:
        Dict with API name and version
    """
    return {
        "name": settings.app_name,
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


# Run with uvicorn when executed directly
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "live_dashboard.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
