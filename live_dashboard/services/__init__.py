"""
Backend Services Module

This module contains the business logic of the Live Dashboard. Every service
is a set of pure functions (or, for the personnel directory, a read-only
index) over in-memory collections, so each can be tested without a server.

Services:
- name_matching: Vietnamese-aware name normalization and fuzzy matching
- personnel_directory: Host name to personnel record reconciliation
- ingestion: Coercion of raw report, personnel and store rows
- access_scope: Actor classification and visibility scoping
- metrics: Group-by aggregation, derived metrics and filters
- ranking: Composite and GMV leaderboards
- personnel_reports: Per-person summaries and salary/KPI coverage

All services are designed to be consumed by the API layer (live_dashboard/api/).
"""

# =============================================================================
# Name Matching Service Exports
# Diacritic-insensitive normalization and the matching rules used wherever a
# free-text name is compared with a canonical one
# =============================================================================

from live_dashboard.services.name_matching import (
    NormalizedName,
    email_local_part,
    match_normalized,
    names_match,
    normalize_name,
    normalize_pair,
    strip_diacritics_name,
)

# =============================================================================
# Personnel Directory Exports
# Read-only index resolving report host names to personnel records with a
# deterministic first-in-input-order tie-break
# =============================================================================

from live_dashboard.services.personnel_directory import (
    PersonnelDirectory,
    resolve_person,
)

# =============================================================================
# Ingestion Service Exports
# Boundary coercion of loosely typed rows into typed records, with
# data-quality issues collected rather than raised
# =============================================================================

from live_dashboard.services.ingestion import (
    coerce_personnel,
    coerce_reports,
    coerce_stores,
    parse_report_date,
    parse_shift,
    safe_number,
    REPORT_NUMERIC_COLUMNS,
    SHIFT_ALIASES,
)

# =============================================================================
# Access Scope Service Exports
# Actor classification and the store, report and personnel visibility rules
# =============================================================================

from live_dashboard.services.access_scope import (
    ScopedData,
    build_actor_profile,
    classify_actor,
    compute_visible_personnel,
    compute_visible_reports,
    compute_visible_store_ids,
    compute_visible_stores,
    scope_for_actor,
    scope_reports_for_actor,
)

# =============================================================================
# Metrics Service Exports
# Group-by aggregation with ROI, conversion and profit, dimension presets,
# dashboard filters and the weekly host matrix
# =============================================================================

from live_dashboard.services.metrics import (
    aggregate,
    aggregate_by_date,
    aggregate_by_dimension,
    aggregate_by_host,
    aggregate_by_host_store,
    aggregate_by_shift,
    aggregate_by_store,
    build_weekly_host_matrix,
    calculate_derived_metrics,
    compute_totals,
    filter_by_date_range,
    filter_by_month,
    filter_reports,
    row_clicks,
    sort_buckets,
)

# =============================================================================
# Ranking Service Exports
# Stable descending leaderboards by composite score or raw GMV
# =============================================================================

from live_dashboard.services.ranking import (
    composite_score,
    gmv_score,
    rank,
    top_n,
)

# =============================================================================
# Personnel Reports Exports
# Per-person GMV summaries and salary/KPI coverage rows
# =============================================================================

from live_dashboard.services.personnel_reports import (
    build_personnel_summary,
    build_salary_report,
    build_salary_row,
    classify_kpi,
    classify_salary_coverage,
)


__all__ = [
    # name_matching
    'NormalizedName',
    'email_local_part',
    'match_normalized',
    'names_match',
    'normalize_name',
    'normalize_pair',
    'strip_diacritics_name',
    # personnel_directory
    'PersonnelDirectory',
    'resolve_person',
    # ingestion
    'coerce_personnel',
    'coerce_reports',
    'coerce_stores',
    'parse_report_date',
    'parse_shift',
    'safe_number',
    'REPORT_NUMERIC_COLUMNS',
    'SHIFT_ALIASES',
    # access_scope
    'ScopedData',
    'build_actor_profile',
    'classify_actor',
    'compute_visible_personnel',
    'compute_visible_reports',
    'compute_visible_store_ids',
    'compute_visible_stores',
    'scope_for_actor',
    'scope_reports_for_actor',
    # metrics
    'aggregate',
    'aggregate_by_date',
    'aggregate_by_dimension',
    'aggregate_by_host',
    'aggregate_by_host_store',
    'aggregate_by_shift',
    'aggregate_by_store',
    'build_weekly_host_matrix',
    'calculate_derived_metrics',
    'compute_totals',
    'filter_by_date_range',
    'filter_by_month',
    'filter_reports',
    'row_clicks',
    'sort_buckets',
    # ranking
    'composite_score',
    'gmv_score',
    'rank',
    'top_n',
    # personnel_reports
    'build_personnel_summary',
    'build_salary_report',
    'build_salary_row',
    'classify_kpi',
    'classify_salary_coverage',
]
