"""
Package initialization file for live_dashboard models.

This module exports all Pydantic schemas and enumerations from schemas.py and enums.py,
making them importable from live_dashboard.models directly.

Usage:
    from live_dashboard.models import (
        ActorProfile,
        ReportRecord,
        MetricsBucket,
        Shift,
    )
"""

# =============================================================================
# Enums
# =============================================================================

from live_dashboard.models.enums import (
    Role,
    ActorClass,
    Shift,
    SHIFT_ORDER,
    GroupDimension,
    BucketOrder,
    RankMode,
    PerformanceStatus,
)


# =============================================================================
# Schemas
# =============================================================================

from live_dashboard.models.schemas import (
    # Registry records
    PersonRecord,
    StoreRecord,
    ReportRecord,
    # Actor
    ActorProfile,
    # Aggregation output
    MetricsBucket,
    WeeklyHostMatrix,
    # Personnel reports
    PersonnelSummaryItem,
    PersonnelSummary,
    SalaryReportItem,
    # Ingestion
    ValidationError,
    IngestionResult,
    # API
    ReportFilter,
    DashboardRequest,
    ScopeResponse,
    ResolvePersonRequest,
    ResolvePersonResponse,
)


__all__ = [
    # Enums
    'Role',
    'ActorClass',
    'Shift',
    'SHIFT_ORDER',
    'GroupDimension',
    'BucketOrder',
    'RankMode',
    'PerformanceStatus',
    # Schemas
    'PersonRecord',
    'StoreRecord',
    'ReportRecord',
    'ActorProfile',
    'MetricsBucket',
    'WeeklyHostMatrix',
    'PersonnelSummaryItem',
    'PersonnelSummary',
    'SalaryReportItem',
    'ValidationError',
    'IngestionResult',
    'ReportFilter',
    'DashboardRequest',
    'ScopeResponse',
    'ResolvePersonRequest',
    'ResolvePersonResponse',
]
