"""
Personnel Performance Reports

Per-person views built on host name reconciliation:

- build_personnel_summary: GMV, ad cost, report count and ROI for every
  person who hosted at least one report, plus an unattributed bucket for
  rows that matched nobody.
- build_salary_report: one row per person (including people with no
  reports) with KPI achievement and salary coverage status.

Salary coverage:
    salary_millions = baseSalary / 1,000,000
    requiredGMV     = salary_millions * gmv_per_salary_yellow * 1,000,000
    green  when totalGMV >  salary_millions * gmv_per_salary_green * 1,000,000
    yellow when totalGMV >= requiredGMV
    red    otherwise

KPI status:
    kpiAchievement = totalGMV / monthlyKPITarget * 100 (0 without a target)
    green  when kpiAchievement >= kpi_green_threshold
    yellow when kpiAchievement >= kpi_yellow_threshold
    red    otherwise
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from live_dashboard.core.config import Settings, get_settings
from live_dashboard.models import (
    PerformanceStatus,
    PersonnelSummary,
    PersonnelSummaryItem,
    PersonRecord,
    ReportRecord,
    SalaryReportItem,
)
from live_dashboard.services.ingestion import safe_number
from live_dashboard.services.personnel_directory import PersonnelDirectory


logger = logging.getLogger(__name__)

SALARY_UNIT = 1_000_000
UNATTRIBUTED_KEY = '__unattributed__'


@dataclass
class _PersonTotals:
    person: Optional[PersonRecord]
    gmv: float = 0.0
    ad_cost: float = 0.0
    count: int = 0

    def add(self, report: ReportRecord) -> None:
        self.gmv += safe_number(report.gmv)
        self.ad_cost += safe_number(report.adCost)
        self.count += 1

    @property
    def roi(self) -> float:
        return self.gmv / self.ad_cost if self.ad_cost > 0 else 0.0


def _attribute_reports(
    reports: Sequence[ReportRecord],
    directory: PersonnelDirectory,
    totals: Dict[str, _PersonTotals],
) -> Tuple[_PersonTotals, List[str]]:
    """
    Add each report to the totals of the person its host resolves to.

    Returns:
        (unattributed totals, unmatched host names in first-seen order)
    """
    if not isinstance(reports, (list, tuple)):
        raise TypeError(f"reports must be a list, got {type(reports).__name__}")

    unattributed = _PersonTotals(person=None)
    unmatched: List[str] = []
    # Host names repeat across a month of reports
    resolved: Dict[str, Optional[PersonRecord]] = {}

    for report in reports:
        host = report.hostName.strip()
        if host not in resolved:
            resolved[host] = directory.find_by_host_name(host) if host else None
        person = resolved[host]

        if person is None:
            unattributed.add(report)
            if host and host not in unmatched:
                unmatched.append(host)
            continue

        key = person.identity_key
        if key not in totals:
            totals[key] = _PersonTotals(person=person)
        totals[key].add(report)

    if unmatched:
        logger.info(f"{len(unmatched)} host names matched no personnel record")
    return unattributed, unmatched


def build_personnel_summary(
    reports: Sequence[ReportRecord],
    directory: PersonnelDirectory,
    settings: Optional[Settings] = None,
) -> PersonnelSummary:
    """
    Per-person totals for attributed reports, highest GMV first.

    Args:
        reports: Scoped reports.
        directory: Personnel directory for the current data load.
        settings: Optional settings override.

    Returns:
        PersonnelSummary. GMV over items plus unattributed equals the GMV of
        the input reports.
    """
    settings = settings or get_settings()
    totals: Dict[str, _PersonTotals] = {}
    unattributed, unmatched = _attribute_reports(reports, directory, totals)

    items = [
        PersonnelSummaryItem(
            identityKey=key,
            fullName=entry.person.fullName,
            person=entry.person,
            totalGMV=entry.gmv,
            totalAdCost=entry.ad_cost,
            reportCount=entry.count,
            roi=entry.roi,
        )
        for key, entry in totals.items()
    ]
    items.sort(key=lambda item: item.totalGMV, reverse=True)

    return PersonnelSummary(
        items=items,
        unattributed=PersonnelSummaryItem(
            identityKey=UNATTRIBUTED_KEY,
            fullName=settings.unattributed_label,
            totalGMV=unattributed.gmv,
            totalAdCost=unattributed.ad_cost,
            reportCount=unattributed.count,
            roi=unattributed.roi,
        ),
        unmatchedHostNames=unmatched,
    )


def classify_kpi(achievement: float, settings: Settings) -> PerformanceStatus:
    if achievement >= settings.kpi_green_threshold:
        return PerformanceStatus.GREEN
    if achievement >= settings.kpi_yellow_threshold:
        return PerformanceStatus.YELLOW
    return PerformanceStatus.RED


def classify_salary_coverage(
    total_gmv: float,
    base_salary: float,
    settings: Settings,
) -> PerformanceStatus:
    """Status of GMV against the GMV a salary requires."""
    salary_millions = base_salary / SALARY_UNIT
    if total_gmv > salary_millions * settings.gmv_per_salary_green * SALARY_UNIT:
        return PerformanceStatus.GREEN
    if total_gmv >= salary_millions * settings.gmv_per_salary_yellow * SALARY_UNIT:
        return PerformanceStatus.YELLOW
    return PerformanceStatus.RED


def build_salary_row(
    person: PersonRecord,
    total_gmv: float = 0.0,
    total_ad_cost: float = 0.0,
    report_count: int = 0,
    settings: Optional[Settings] = None,
) -> SalaryReportItem:
    """
    Compute the salary/KPI row for one person from their totals.

    Example:
        >>> row = build_salary_row(person, total_gmv=250_000_000)
        >>> row.kpiStatus
        <PerformanceStatus.GREEN: 'green'>
    """
    settings = settings or get_settings()
    base_salary = safe_number(person.baseSalary)
    kpi_target = safe_number(person.monthlyKPITarget)
    salary_millions = base_salary / SALARY_UNIT

    kpi_achievement = (total_gmv / kpi_target) * 100 if kpi_target > 0 else 0.0

    return SalaryReportItem(
        identityKey=person.identity_key,
        fullName=person.fullName,
        totalGMV=total_gmv,
        totalAdCost=total_ad_cost,
        profit=total_gmv - total_ad_cost,
        roi=total_gmv / total_ad_cost if total_ad_cost > 0 else 0.0,
        reportCount=report_count,
        baseSalary=base_salary,
        kpiTarget=kpi_target,
        kpiAchievement=kpi_achievement,
        kpiStatus=classify_kpi(kpi_achievement, settings),
        requiredGMV=salary_millions * settings.gmv_per_salary_yellow * SALARY_UNIT,
        gmvToSalaryRatio=total_gmv / base_salary if base_salary > 0 else 0.0,
        salaryStatus=classify_salary_coverage(total_gmv, base_salary, settings),
    )


def build_salary_report(
    reports: Sequence[ReportRecord],
    directory: PersonnelDirectory,
    settings: Optional[Settings] = None,
) -> List[SalaryReportItem]:
    """
    Salary/KPI coverage rows for every person in the directory.

    Reports are attributed through host name reconciliation; callers narrow
    them to the month of interest first (see metrics.filter_by_month).
    People without reports get a zero row. Rows are sorted by totalGMV,
    highest first.

    Args:
        reports: Scoped reports for the period.
        directory: Personnel directory for the current data load.
        settings: Optional settings override for the thresholds.

    Returns:
        One SalaryReportItem per identity key.
    """
    settings = settings or get_settings()

    totals: Dict[str, _PersonTotals] = {}
    for person in directory:
        totals.setdefault(person.identity_key, _PersonTotals(person=person))
    _attribute_reports(reports, directory, totals)

    rows = [
        build_salary_row(
            entry.person,
            total_gmv=entry.gmv,
            total_ad_cost=entry.ad_cost,
            report_count=entry.count,
            settings=settings,
        )
        for entry in totals.values()
    ]
    rows.sort(key=lambda row: row.totalGMV, reverse=True)
    return rows
