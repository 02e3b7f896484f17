"""
Settings and environment management module for the Live Dashboard backend.

This module provides centralized configuration management using pydantic-settings,
which automatically loads settings from environment variables and .env files.

Key Features:
- Environment variable validation and type coercion
- Sensible defaults for development
- Singleton pattern via @lru_cache for efficient access
- Tunable matching, scoping and scoring parameters used by the services layer

Environment Variables:
- APP_NAME: Display name of the API (default: Live Dashboard API)
- LOG_LEVEL: Root log level (default: INFO)
- CORS_ORIGINS: JSON list of allowed browser origins

Platform Configuration Defaults:
- name_match_min_length: 3 (Minimum name length for substring matching)
- partner_without_id_sees_all: False (Partner accounts without partnerId see nothing)
- composite_weight_roi / _conversion / _gmv: 0.4 / 0.3 / 0.3 (Leaderboard score weights)
- kpi_green_threshold / kpi_yellow_threshold: 100 / 80 (KPI achievement %)
- gmv_per_salary_green / gmv_per_salary_yellow: 22 / 21 (GMV millions per 1M salary)

Usage:
    from live_dashboard.core.config import get_settings

    settings = get_settings()
    min_length = settings.name_match_min_length
"""

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All fields have defaults, so the core can be imported and used in tests
    or scripts without any environment configured.

    Attributes:
        app_name: Title reported by the FastAPI application.
        log_level: Logging level name passed to logging.basicConfig.
        cors_origins: Origins allowed by the CORS middleware.
        name_match_min_length: Minimum diacritic-stripped length (spaces
            excluded) both names need before substring containment counts
            as a match.
        partner_without_id_sees_all: Visibility for partner accounts that
            carry no partnerId. False yields an empty scope.
        unknown_store_label: Label for reports whose channelId resolves to
            no store.
        unattributed_label: Label for rows that cannot be attributed to a
            shift or a person.
        composite_weight_roi: ROI weight in the composite leaderboard score.
        composite_weight_conversion: Conversion rate weight in the composite score.
        composite_weight_gmv: GMV (in gmv_scale units) weight in the composite score.
        gmv_scale: Divisor applied to GMV before weighting (millions).
        default_top_n: Leaderboard length when the caller gives none.
        kpi_green_threshold: KPI achievement % at or above which status is green.
        kpi_yellow_threshold: KPI achievement % at or above which status is yellow.
        gmv_per_salary_green: GMV (millions) per 1M salary above which salary status is green.
        gmv_per_salary_yellow: GMV (millions) per 1M salary required to break even.
    """

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
        case_sensitive=False,
    )

    # =========================================================================
    # Application
    # =========================================================================

    app_name: str = 'Live Dashboard API'
    log_level: str = 'INFO'
    cors_origins: List[str] = [
        'http://localhost:3000',
        'http://127.0.0.1:3000',
    ]

    # =========================================================================
    # Identity reconciliation
    # =========================================================================

    # Below this length, "An" would be contained in "Anh", "Lan", "Tuan"...
    name_match_min_length: int = 3

    # =========================================================================
    # Access scoping
    # =========================================================================

    # Legacy dashboards let a partner without partnerId see every store.
    # Set to True only to reproduce that behavior.
    partner_without_id_sees_all: bool = False

    # =========================================================================
    # Aggregation labels
    # =========================================================================

    unknown_store_label: str = 'Unknown'
    unattributed_label: str = 'Chưa xác định'

    # =========================================================================
    # Leaderboard scoring
    # score = 0.4 * roi + 0.3 * conversionRate + 0.3 * (gmv / 1_000_000)
    # =========================================================================

    composite_weight_roi: float = 0.4
    composite_weight_conversion: float = 0.3
    composite_weight_gmv: float = 0.3
    gmv_scale: float = 1_000_000
    default_top_n: int = 10

    # =========================================================================
    # Salary / KPI report thresholds
    # =========================================================================

    kpi_green_threshold: float = 100.0
    kpi_yellow_threshold: float = 80.0
    gmv_per_salary_green: float = 22.0
    gmv_per_salary_yellow: float = 21.0


@lru_cache()
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Returns:
        Settings: The cached settings instance.

    Note:
        To refresh settings in tests, clear the cache:
        >>> get_settings.cache_clear()
    """
    return Settings()
