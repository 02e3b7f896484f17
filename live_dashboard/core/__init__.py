"""
Core infrastructure package for the Live Dashboard backend.

Provides:
- Configuration management via pydantic-settings
- FastAPI dependency injection utilities

This module re-exports key components from submodules for convenient importing:

    from live_dashboard.core import get_settings, SettingsDep

Components Re-exported:
    Settings: Pydantic settings class with all configuration parameters
    get_settings: Function returning the cached Settings singleton
    get_settings_dependency: FastAPI dependency returning Settings
    SettingsDep: Type alias for Settings dependency injection
"""

# =============================================================================
# Re-exports from live_dashboard.core.config
# =============================================================================
from live_dashboard.core.config import Settings, get_settings

# =============================================================================
# Re-exports from live_dashboard.core.dependencies
# =============================================================================
from live_dashboard.core.dependencies import (
    get_settings_dependency,
    SettingsDep,
)

__all__ = [
    'Settings',
    'get_settings',
    'get_settings_dependency',
    'SettingsDep',
]
