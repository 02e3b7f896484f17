"""
Pydantic request/response models for the Live Dashboard backend.

This module provides type-safe data validation and serialization for the
dashboard core: the registry records it reads (personnel, stores), the
per-session report rows it scopes and aggregates, the actor profile that
drives access scoping, and the buckets and report rows it returns.

Field names follow the camelCase keys of the report store so that rows can
be passed through unchanged by the presentation layer.

All models use Pydantic v2 syntax.
"""

from datetime import date as DateType
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from live_dashboard.models.enums import (
    ActorClass,
    PerformanceStatus,
    Role,
    Shift,
)


# =============================================================================
# Registry Records
# =============================================================================


class PersonRecord(BaseModel):
    """
    Canonical personnel record.

    Owned by HR administration; read-only to the dashboard core. Legacy rows
    may lack an id, in which case fullName is the identity key.
    """
    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "id": "p-001",
                "fullName": "Nguyễn Văn A",
                "email": "nguyenvana@example.com",
                "role": "user",
                "department": "Live",
                "position": "Host",
                "team": "Team 1",
                "baseSalary": 8000000,
                "monthlyKPITarget": 200000000,
            }
        }
    )

    id: Optional[str] = Field(
        default=None,
        description="Stable identifier; absent on legacy rows"
    )
    fullName: str = Field(
        default="",
        description="Display name, possibly with irregular accents or spacing"
    )
    email: Optional[str] = Field(
        default=None,
        description="Login email"
    )
    role: str = Field(
        default=Role.USER.value,
        description="admin, user, or a partner/employee category tag"
    )
    department: Optional[str] = Field(default=None)
    position: Optional[str] = Field(default=None)
    team: Optional[str] = Field(default=None)
    baseSalary: float = Field(
        default=0.0,
        description="Monthly base salary"
    )
    monthlyKPITarget: float = Field(
        default=0.0,
        description="Monthly GMV target"
    )

    @property
    def identity_key(self) -> str:
        """Key identifying this person for the session: id, else fullName."""
        return self.id or self.fullName


class StoreRecord(BaseModel):
    """Store (live channel) record. Immutable within a session."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(..., description="Store identifier referenced by ReportRecord.channelId")
    name: str = Field(default="", description="Display name")
    partnerId: Optional[str] = Field(
        default=None,
        description="Partner the store belongs to, if any"
    )


class ReportRecord(BaseModel):
    """
    Performance snapshot of a single live-stream session.

    Instances are produced by the ingestion service, which has already
    coerced every numeric field to a finite float (0 when missing).
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": "r-001",
                "date": "2025-12-01",
                "channelId": "store1",
                "hostName": "Nguyễn Văn A",
                "reporter": "Trần Thị B",
                "shift": "morning",
                "gmv": 15000000,
                "adCost": 3000000,
                "orders": 50,
                "totalViews": 1200,
                "viewers": 900,
                "productClicks": 400,
            }
        }
    )

    id: Optional[str] = Field(default=None)
    date: DateType = Field(..., description="Calendar day of the session")
    channelId: str = Field(default="", description="Store id")
    hostName: str = Field(default="", description="Free-text name of the streamer")
    reporter: str = Field(default="", description="Free-text name of who submitted the report")
    shift: Optional[Shift] = Field(default=None)
    gmv: float = Field(default=0.0)
    adCost: float = Field(default=0.0)
    orders: float = Field(default=0.0)
    totalViews: float = Field(default=0.0)
    viewers: float = Field(default=0.0)
    productClicks: float = Field(
        default=0.0,
        description="Product clicks; viewers are used for conversion when 0"
    )


# =============================================================================
# Actor Profile
# =============================================================================


class ActorProfile(BaseModel):
    """
    The authenticated actor a dashboard request is evaluated for.

    Supplied by the caller per request; the core never reads session state.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    role: str = Field(default=Role.USER.value)
    name: Optional[str] = Field(default=None, description="Display name of the actor")
    partnerId: Optional[str] = Field(default=None)
    isPartner: bool = Field(
        default=False,
        description="Partner-category account (department 'Đối tác')"
    )
    isRegularEmployee: bool = Field(
        default=False,
        description="Internal employee without administrative rights"
    )
    isUnrestrictedViewer: bool = Field(
        default=False,
        description="Control-room role ('TRỢ LIVE') that sees all permitted data"
    )


# =============================================================================
# Aggregation Output
# =============================================================================


class MetricsBucket(BaseModel):
    """Aggregated metrics for one value of a grouping dimension."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "key": "2025-12-01",
                "label": "2025-12-01",
                "sumGmv": 60000000,
                "sumAdCost": 11000000,
                "sumOrders": 200,
                "sumViews": 6200,
                "sumViewers": 4000,
                "totalClicks": 1600,
                "reportCount": 2,
                "roi": 5.4545,
                "conversionRate": 12.5,
                "profit": 49000000,
                "score": None,
            }
        }
    )

    key: str = Field(..., description="Grouping key")
    label: str = Field(..., description="Display label for the key")
    dimensions: Dict[str, str] = Field(
        default_factory=dict,
        description="Component values of composite keys, e.g. hostName and storeName"
    )
    sumGmv: float = 0.0
    sumAdCost: float = 0.0
    sumOrders: float = 0.0
    sumViews: float = 0.0
    sumViewers: float = 0.0
    totalClicks: float = Field(
        default=0.0,
        description="Sum of productClicks, falling back to viewers per row"
    )
    reportCount: int = 0
    roi: float = Field(default=0.0, description="sumGmv / sumAdCost; 0 without ad spend")
    conversionRate: float = Field(
        default=0.0,
        description="sumOrders / totalClicks * 100; 0 without clicks"
    )
    profit: float = Field(default=0.0, description="sumGmv - sumAdCost")
    score: Optional[float] = Field(
        default=None,
        description="Ranking score, set by the ranking engine"
    )


class WeeklyHostMatrix(BaseModel):
    """Date x host GMV pivot for a date range."""
    dates: List[DateType] = Field(default_factory=list)
    hosts: List[str] = Field(default_factory=list)
    values: Dict[str, Dict[str, float]] = Field(
        default_factory=dict,
        description="ISO date -> host -> GMV"
    )
    totals: Dict[str, float] = Field(default_factory=dict, description="host -> GMV")
    grandTotal: float = 0.0


# =============================================================================
# Personnel Reports
# =============================================================================


class PersonnelSummaryItem(BaseModel):
    """Totals for one person, attributed through host name reconciliation."""
    identityKey: str
    fullName: str
    person: Optional[PersonRecord] = None
    totalGMV: float = 0.0
    totalAdCost: float = 0.0
    reportCount: int = 0
    roi: float = 0.0


class PersonnelSummary(BaseModel):
    """Per-person totals plus the rows that matched nobody."""
    items: List[PersonnelSummaryItem] = Field(default_factory=list)
    unattributed: PersonnelSummaryItem
    unmatchedHostNames: List[str] = Field(default_factory=list)


class SalaryReportItem(BaseModel):
    """Salary/KPI coverage row for one person."""
    identityKey: str
    fullName: str
    totalGMV: float = 0.0
    totalAdCost: float = 0.0
    profit: float = 0.0
    roi: float = 0.0
    reportCount: int = 0
    baseSalary: float = 0.0
    kpiTarget: float = 0.0
    kpiAchievement: float = Field(default=0.0, description="GMV / KPI target * 100")
    kpiStatus: PerformanceStatus = PerformanceStatus.RED
    requiredGMV: float = Field(default=0.0, description="GMV needed to cover salary")
    gmvToSalaryRatio: float = Field(default=0.0, description="GMV per unit of salary")
    salaryStatus: PerformanceStatus = PerformanceStatus.RED


# =============================================================================
# Ingestion
# =============================================================================


class ValidationError(BaseModel):
    """
    Data-quality issue found while coercing raw rows.

    Used for reporting, never raised.
    """
    field: str = Field(..., description="Field with the issue")
    message: str = Field(..., description="What was wrong and how it was handled")
    row_number: Optional[int] = Field(
        default=None,
        ge=1,
        description="1-based row number where the issue occurred"
    )


class IngestionResult(BaseModel):
    """Result of coercing one raw collection."""
    rows_processed: int = Field(default=0, ge=0)
    rows_accepted: int = Field(default=0, ge=0)
    errors: List[ValidationError] = Field(default_factory=list)


# =============================================================================
# API Request / Response Models
# =============================================================================


class ReportFilter(BaseModel):
    """Optional narrowing applied after access scoping."""
    dateFrom: Optional[DateType] = None
    dateTo: Optional[DateType] = None
    stores: List[str] = Field(default_factory=list)
    hosts: List[str] = Field(default_factory=list)
    shifts: List[Shift] = Field(default_factory=list)
    reporters: List[str] = Field(default_factory=list)
    search: Optional[str] = Field(
        default=None,
        description="Case-insensitive text matched against date, store, host, reporter and shift"
    )


class DashboardRequest(BaseModel):
    """
    Payload shared by the dashboard endpoints.

    Reports are raw rows so that loosely typed data from the report store can
    be coerced in one place.
    """
    actor: ActorProfile
    reports: List[Dict[str, Any]] = Field(default_factory=list)
    stores: List[StoreRecord] = Field(default_factory=list)
    personnel: List[PersonRecord] = Field(default_factory=list)
    filters: Optional[ReportFilter] = None


class ScopeResponse(BaseModel):
    """What an actor may see."""
    actorClass: ActorClass
    storeIds: List[str] = Field(default_factory=list)
    reports: List[ReportRecord] = Field(default_factory=list)
    personnel: List[PersonRecord] = Field(default_factory=list)
    ingestion: IngestionResult


class ResolvePersonRequest(BaseModel):
    hostName: str
    personnel: List[PersonRecord] = Field(default_factory=list)


class ResolvePersonResponse(BaseModel):
    hostName: str
    person: Optional[PersonRecord] = None
    candidates: List[PersonRecord] = Field(
        default_factory=list,
        description="Every record that matched; more than one means the tie-break was used"
    )
