"""
Live Dashboard Backend Package.

FastAPI service layer for the live-commerce reporting dashboards. Scopes
per-session stream reports to the authenticated actor, reconciles free-text
host names against the personnel registry, and aggregates and ranks the
result for the dashboard views.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration and dependencies
    - models: Pydantic schemas and enums
    - services: Business logic services
"""

__version__ = "1.0.0"
