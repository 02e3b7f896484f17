"""
FastAPI dependency injection module for the Live Dashboard backend.

This module provides reusable FastAPI dependencies for configuration access.
The dashboard core holds no connections of its own: report, personnel and
store collections arrive in the request body, and the actor profile is
supplied by the caller's session layer. Settings are therefore the only
shared infrastructure endpoints need injected.

Key Dependencies Provided:
- get_settings_dependency: Returns the cached Settings singleton
- SettingsDep: Type alias for injecting Settings into endpoints

Usage Examples:
    @router.post("/ranking")
    async def ranking(
        request: DashboardRequest,
        settings: SettingsDep,
    ) -> List[MetricsBucket]:
        ...

In tests, the dependency can be swapped without touching the cache:

    app.dependency_overrides[get_settings_dependency] = lambda: Settings(
        partner_without_id_sees_all=True
    )
"""

from typing import Annotated

from fastapi import Depends

from live_dashboard.core.config import Settings, get_settings


# =============================================================================
# Settings Dependency
# =============================================================================

def get_settings_dependency() -> Settings:
    """
    Return the Settings singleton instance.

    This is a thin wrapper around get_settings() to enable FastAPI's
    dependency override mechanism for testing.

    Returns:
        Settings: The cached Settings instance with all configuration values.
    """
    return get_settings()


# =============================================================================
# Type Aliases for Dependency Injection
# =============================================================================

# Usage: async def endpoint(settings: SettingsDep)
SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]
