"""
FastAPI router module for the live-commerce dashboard.

Every endpoint receives the data of one page load in the request body (the
actor, raw report rows, the store and personnel registries, and optional
filters), runs it through the same pipeline, and returns one view:

    coerce reports -> scope for actor -> apply filters -> aggregate / rank / report

Key Endpoints:
- POST /dashboard/scope: What the actor may see
- POST /dashboard/aggregate/{dimension}: Buckets by date, shift, host, store or host_store
- POST /dashboard/totals: One bucket over every visible report
- POST /dashboard/ranking: Composite or GMV leaderboard
- POST /dashboard/personnel-summary: Per-person totals with unattributed rows
- POST /dashboard/salary-report: Salary/KPI coverage per person
- POST /dashboard/weekly-hosts: Date x host GMV matrix
- POST /dashboard/resolve-person: Host name reconciliation for one name

Error Handling:
- Invalid dimension, mode, month or date range: HTTP 400
- Unexpected failures: logged with traceback, HTTP 500
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Tuple

from fastapi import APIRouter, Body, HTTPException, Query

from live_dashboard.core.config import Settings
from live_dashboard.core.dependencies import SettingsDep
from live_dashboard.models import (
    DashboardRequest,
    GroupDimension,
    IngestionResult,
    MetricsBucket,
    PersonnelSummary,
    RankMode,
    ReportRecord,
    ResolvePersonRequest,
    ResolvePersonResponse,
    SalaryReportItem,
    ScopeResponse,
    StoreRecord,
    WeeklyHostMatrix,
)
from live_dashboard.services.access_scope import ScopedData, scope_for_actor
from live_dashboard.services.ingestion import coerce_reports
from live_dashboard.services.metrics import (
    aggregate_by_dimension,
    build_weekly_host_matrix,
    compute_totals,
    filter_by_month,
    filter_reports,
)
from live_dashboard.services.personnel_directory import PersonnelDirectory
from live_dashboard.services.personnel_reports import (
    build_personnel_summary,
    build_salary_report,
)
from live_dashboard.services.ranking import top_n


# =============================================================================
# Module Configuration
# =============================================================================

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Helper Functions
# =============================================================================


@dataclass
class _PageData:
    scoped: ScopedData
    reports: List[ReportRecord]
    stores: List[StoreRecord]
    ingestion: IngestionResult


def _prepare(request: DashboardRequest, settings: Settings) -> _PageData:
    """Coerce, scope and filter the reports of one page load."""
    reports, ingestion = coerce_reports(request.reports)
    scoped = scope_for_actor(
        request.actor,
        reports,
        request.stores,
        request.personnel,
        settings=settings,
    )
    filtered = filter_reports(scoped.reports, request.filters, scoped.stores)
    stores = scoped.stores
    if request.filters and request.filters.stores:
        selected = set(request.filters.stores)
        stores = [store for store in stores if store.id in selected]
    return _PageData(scoped=scoped, reports=filtered, stores=stores, ingestion=ingestion)


def _parse_month(month: str) -> Tuple[int, int]:
    """Parse 'YYYY-MM' into (year, month)."""
    try:
        year_text, month_text = month.split('-')
        return int(year_text), int(month_text)
    except ValueError:
        raise ValueError(f"Invalid month {month!r}; expected YYYY-MM") from None


def _bad_request(error: ValueError) -> HTTPException:
    logger.warning(f"Rejected dashboard request: {error}")
    return HTTPException(status_code=400, detail=str(error))


def _server_error(action: str, error: Exception) -> HTTPException:
    logger.exception(f"Error computing {action}")
    return HTTPException(status_code=500, detail=f"Failed to compute {action}: {str(error)}")


# =============================================================================
# API Endpoints
# =============================================================================


@router.post('/scope', response_model=ScopeResponse)
async def get_scope(
    settings: SettingsDep,
    request: DashboardRequest = Body(...),
) -> ScopeResponse:
    """
    Return the stores, reports and personnel visible to the actor.

    Filters are applied to the returned reports; storeIds and personnel are
    the unfiltered scope.
    """
    try:
        page = _prepare(request, settings)
        return ScopeResponse(
            actorClass=page.scoped.actor_class,
            storeIds=sorted(page.scoped.store_ids),
            reports=page.reports,
            personnel=page.scoped.personnel,
            ingestion=page.ingestion,
        )
    except HTTPException:
        raise
    except ValueError as e:
        raise _bad_request(e)
    except Exception as e:
        raise _server_error('scope', e)


@router.post('/aggregate/{dimension}', response_model=List[MetricsBucket])
async def get_aggregate(
    dimension: str,
    settings: SettingsDep,
    request: DashboardRequest = Body(...),
) -> List[MetricsBucket]:
    """
    Aggregate visible reports by a dimension.

    Args:
        dimension: date, shift, host, store or host_store.

    Raises:
        HTTPException 400: If the dimension is unknown.
    """
    try:
        group_dimension = GroupDimension(dimension)
        page = _prepare(request, settings)
        buckets = aggregate_by_dimension(
            page.reports,
            group_dimension,
            stores=page.stores,
            settings=settings,
        )
        logger.info(
            f"Aggregated {len(page.reports)} reports into {len(buckets)} {dimension} buckets"
        )
        return buckets
    except HTTPException:
        raise
    except ValueError as e:
        raise _bad_request(e)
    except Exception as e:
        raise _server_error(f"{dimension} aggregation", e)


@router.post('/totals', response_model=MetricsBucket)
async def get_totals(
    settings: SettingsDep,
    request: DashboardRequest = Body(...),
) -> MetricsBucket:
    """Totals over every visible report."""
    try:
        page = _prepare(request, settings)
        return compute_totals(page.reports)
    except HTTPException:
        raise
    except ValueError as e:
        raise _bad_request(e)
    except Exception as e:
        raise _server_error('totals', e)


@router.post('/ranking', response_model=List[MetricsBucket])
async def get_ranking(
    settings: SettingsDep,
    request: DashboardRequest = Body(...),
    mode: str = Query(default=RankMode.COMPOSITE.value, description="composite or gmv"),
    dimension: str = Query(
        default=GroupDimension.HOST_STORE.value,
        description="Dimension the leaderboard ranks"
    ),
    limit: Optional[int] = Query(default=None, description="Entries to return; defaults to settings"),
) -> List[MetricsBucket]:
    """
    Leaderboard of buckets ranked by composite score or GMV.

    Raises:
        HTTPException 400: If mode or dimension is unknown.
    """
    try:
        rank_mode = RankMode(mode)
        group_dimension = GroupDimension(dimension)
        page = _prepare(request, settings)
        buckets = aggregate_by_dimension(
            page.reports,
            group_dimension,
            stores=page.stores,
            settings=settings,
        )
        return top_n(buckets, rank_mode, limit, settings=settings)
    except HTTPException:
        raise
    except ValueError as e:
        raise _bad_request(e)
    except Exception as e:
        raise _server_error('ranking', e)


@router.post('/personnel-summary', response_model=PersonnelSummary)
async def get_personnel_summary(
    settings: SettingsDep,
    request: DashboardRequest = Body(...),
) -> PersonnelSummary:
    """Per-person totals, attributed by host name, plus unattributed rows."""
    try:
        page = _prepare(request, settings)
        directory = PersonnelDirectory(
            page.scoped.personnel,
            min_length=settings.name_match_min_length,
        )
        return build_personnel_summary(page.reports, directory, settings=settings)
    except HTTPException:
        raise
    except ValueError as e:
        raise _bad_request(e)
    except Exception as e:
        raise _server_error('personnel summary', e)


@router.post('/salary-report', response_model=List[SalaryReportItem])
async def get_salary_report(
    settings: SettingsDep,
    request: DashboardRequest = Body(...),
    month: Optional[str] = Query(default=None, description="Restrict to a month, YYYY-MM"),
    limit: Optional[int] = Query(default=None, description="Keep the top N by GMV"),
) -> List[SalaryReportItem]:
    """
    Salary/KPI coverage rows for every visible person, highest GMV first.

    Raises:
        HTTPException 400: If month is not YYYY-MM.
    """
    try:
        page = _prepare(request, settings)
        reports = page.reports
        if month:
            year, month_number = _parse_month(month)
            reports = filter_by_month(reports, year, month_number)

        directory = PersonnelDirectory(
            page.scoped.personnel,
            min_length=settings.name_match_min_length,
        )
        rows = build_salary_report(reports, directory, settings=settings)
        if limit is not None:
            rows = top_n(rows, RankMode.GMV, limit, settings=settings)
        return rows
    except HTTPException:
        raise
    except ValueError as e:
        raise _bad_request(e)
    except Exception as e:
        raise _server_error('salary report', e)


@router.post('/weekly-hosts', response_model=WeeklyHostMatrix)
async def get_weekly_hosts(
    settings: SettingsDep,
    start: date = Query(..., description="First day, inclusive"),
    end: date = Query(..., description="Last day, inclusive"),
    request: DashboardRequest = Body(...),
) -> WeeklyHostMatrix:
    """
    Date x host GMV matrix for a date range.

    Raises:
        HTTPException 400: If start is after end.
    """
    try:
        page = _prepare(request, settings)
        return build_weekly_host_matrix(page.reports, start, end)
    except HTTPException:
        raise
    except ValueError as e:
        raise _bad_request(e)
    except Exception as e:
        raise _server_error('weekly host matrix', e)


@router.post('/resolve-person', response_model=ResolvePersonResponse)
async def resolve_person_endpoint(
    settings: SettingsDep,
    request: ResolvePersonRequest = Body(...),
) -> ResolvePersonResponse:
    """
    Resolve one host name against a personnel list.

    candidates lists every record that matched; person is the one the
    dashboards attribute reports to.
    """
    try:
        directory = PersonnelDirectory(
            request.personnel,
            min_length=settings.name_match_min_length,
        )
        return ResolvePersonResponse(
            hostName=request.hostName,
            person=directory.find_by_host_name(request.hostName),
            candidates=directory.find_all_by_host_name(request.hostName),
        )
    except HTTPException:
        raise
    except Exception as e:
        raise _server_error('person resolution', e)
