"""
Metrics Aggregation Service

Groups scoped report rows by a dimension and computes the metrics every
dashboard view shows. This replaces the per-page copies of the same
group-by loop with one aggregator parameterized by a key function.

Per-bucket sums:
- sumGmv, sumAdCost, sumOrders, sumViews (totalViews), sumViewers
- totalClicks: per row, productClicks when positive, otherwise viewers
- reportCount

Derived metrics:
- roi = sumGmv / sumAdCost, 0 when sumAdCost == 0
- conversionRate = sumOrders / totalClicks * 100, 0 when totalClicks == 0
- profit = sumGmv - sumAdCost

Ordering (BucketOrder):
- CHRONOLOGICAL for date buckets
- SHIFT (morning, afternoon, evening, unspecified) for shift buckets
- GMV_DESC for host and store buckets
- INSERTION keeps first-seen order

Every numeric read goes through safe_number, so a malformed value adds 0
rather than turning a sum into NaN. Rows that cannot be attributed (no
host, unknown store) land in their own bucket; nothing is dropped.

All functions are pure: the same input list always yields the same output.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from live_dashboard.core.config import Settings, get_settings
from live_dashboard.models import (
    SHIFT_ORDER,
    BucketOrder,
    GroupDimension,
    MetricsBucket,
    ReportFilter,
    ReportRecord,
    Shift,
    StoreRecord,
    WeeklyHostMatrix,
)
from live_dashboard.services.ingestion import safe_number
from live_dashboard.services.name_matching import strip_diacritics_name


logger = logging.getLogger(__name__)

KeyFn = Callable[[ReportRecord], Any]
LabelFn = Callable[[ReportRecord], str]

TOTAL_KEY = 'total'


# =============================================================================
# Row Readers
# =============================================================================


def _read(report: Any, field: str) -> float:
    if isinstance(report, dict):
        return safe_number(report.get(field))
    return safe_number(getattr(report, field, None))


def row_clicks(report: Any) -> float:
    """Clicks used for conversion: productClicks when positive, else viewers."""
    clicks = _read(report, 'productClicks')
    return clicks if clicks > 0 else _read(report, 'viewers')


# =============================================================================
# Derived Metrics
# =============================================================================


def calculate_derived_metrics(
    sum_gmv: float,
    sum_ad_cost: float,
    sum_orders: float,
    total_clicks: float,
) -> Dict[str, float]:
    """
    Calculate ROI, conversion rate and profit from bucket sums.

    Args:
        sum_gmv: Summed GMV.
        sum_ad_cost: Summed ad spend.
        sum_orders: Summed orders.
        total_clicks: Summed clicks (productClicks, falling back to viewers).

    Returns:
        Dictionary with roi, conversionRate and profit. Ratios are 0 when the
        denominator is not positive; never inf or NaN.

    Example:
        >>> calculate_derived_metrics(5000000, 0, 10, 0)
        {'roi': 0.0, 'conversionRate': 0.0, 'profit': 5000000}
    """
    return {
        'roi': sum_gmv / sum_ad_cost if sum_ad_cost > 0 else 0.0,
        'conversionRate': (sum_orders / total_clicks) * 100 if total_clicks > 0 else 0.0,
        'profit': sum_gmv - sum_ad_cost,
    }


# =============================================================================
# Aggregator
# =============================================================================


@dataclass
class _Accumulator:
    key: str
    label: str
    dimensions: Dict[str, str]
    gmv: float = 0.0
    ad_cost: float = 0.0
    orders: float = 0.0
    views: float = 0.0
    viewers: float = 0.0
    clicks: float = 0.0
    count: int = 0

    def add(self, report: Any) -> None:
        self.gmv += _read(report, 'gmv')
        self.ad_cost += _read(report, 'adCost')
        self.orders += _read(report, 'orders')
        self.views += _read(report, 'totalViews')
        self.viewers += _read(report, 'viewers')
        self.clicks += row_clicks(report)
        self.count += 1

    def to_bucket(self) -> MetricsBucket:
        derived = calculate_derived_metrics(self.gmv, self.ad_cost, self.orders, self.clicks)
        return MetricsBucket(
            key=self.key,
            label=self.label,
            dimensions=dict(self.dimensions),
            sumGmv=self.gmv,
            sumAdCost=self.ad_cost,
            sumOrders=self.orders,
            sumViews=self.views,
            sumViewers=self.viewers,
            totalClicks=self.clicks,
            reportCount=self.count,
            **derived,
        )


def _shift_rank(key: str) -> int:
    for position, shift in enumerate(SHIFT_ORDER):
        if key == shift.value:
            return position
    return len(SHIFT_ORDER)


def sort_buckets(buckets: List[MetricsBucket], order: BucketOrder) -> List[MetricsBucket]:
    """Return buckets in the requested order. All sorts are stable."""
    if order == BucketOrder.CHRONOLOGICAL:
        return sorted(buckets, key=lambda b: b.key)
    if order == BucketOrder.SHIFT:
        return sorted(buckets, key=lambda b: _shift_rank(b.key))
    if order == BucketOrder.GMV_DESC:
        return sorted(buckets, key=lambda b: b.sumGmv, reverse=True)
    return list(buckets)


def aggregate(
    reports: Sequence[ReportRecord],
    key_fn: KeyFn,
    label_fn: Optional[LabelFn] = None,
    order: BucketOrder = BucketOrder.INSERTION,
    dimensions_fn: Optional[Callable[[ReportRecord], Dict[str, str]]] = None,
    seeds: Iterable[Tuple[str, str, Dict[str, str]]] = (),
) -> List[MetricsBucket]:
    """
    Group reports by key_fn and compute metrics per group.

    Args:
        reports: Reports to aggregate, typically already access-scoped.
        key_fn: Maps a report to its grouping key; None becomes "".
        label_fn: Display label for a group, evaluated on its first report.
            Defaults to the key.
        order: Output ordering.
        dimensions_fn: Optional component values for composite keys,
            evaluated on the first report of each group.
        seeds: (key, label, dimensions) triples emitted even when no report
            falls in them. Their label and dimensions win over the ones
            derived from reports.

    Returns:
        One MetricsBucket per distinct key and seed. reportCount over all buckets
        equals len(reports).

    Raises:
        TypeError: If reports is not a list.

    Example:
        >>> buckets = aggregate(reports, key_fn=lambda r: r.channelId,
        ...                     order=BucketOrder.GMV_DESC)
    """
    if not isinstance(reports, (list, tuple)):
        raise TypeError(f"reports must be a list, got {type(reports).__name__}")

    groups: Dict[str, _Accumulator] = {
        key: _Accumulator(key=key, label=label, dimensions=dict(dimensions))
        for key, label, dimensions in seeds
    }
    for report in reports:
        raw_key = key_fn(report)
        key = '' if raw_key is None else str(raw_key)
        accumulator = groups.get(key)
        if accumulator is None:
            accumulator = _Accumulator(
                key=key,
                label=label_fn(report) if label_fn else key,
                dimensions=dimensions_fn(report) if dimensions_fn else {},
            )
            groups[key] = accumulator
        accumulator.add(report)

    buckets = [accumulator.to_bucket() for accumulator in groups.values()]
    return sort_buckets(buckets, order)


def compute_totals(reports: Sequence[ReportRecord], label: str = 'Tổng') -> MetricsBucket:
    """
    Aggregate every report into one bucket.

    Returns a zeroed bucket for an empty list.
    """
    buckets = aggregate(reports, key_fn=lambda _report: TOTAL_KEY, label_fn=lambda _report: label)
    if buckets:
        return buckets[0]
    return MetricsBucket(key=TOTAL_KEY, label=label)


# =============================================================================
# Dimension Presets
# =============================================================================


def _store_names(stores: Iterable[StoreRecord]) -> Dict[str, str]:
    return {store.id: store.name for store in stores}


def _host_key(report: ReportRecord) -> str:
    return strip_diacritics_name(report.hostName)


def aggregate_by_date(reports: Sequence[ReportRecord]) -> List[MetricsBucket]:
    """Daily buckets, oldest first. Keys are ISO dates."""
    return aggregate(
        reports,
        key_fn=lambda r: r.date.isoformat(),
        order=BucketOrder.CHRONOLOGICAL,
    )


def aggregate_by_shift(reports: Sequence[ReportRecord]) -> List[MetricsBucket]:
    """Shift buckets in morning, afternoon, evening, unspecified order."""
    def shift_of(report: ReportRecord) -> Shift:
        return report.shift or Shift.UNSPECIFIED

    return aggregate(
        reports,
        key_fn=lambda r: shift_of(r).value,
        label_fn=lambda r: shift_of(r).label,
        order=BucketOrder.SHIFT,
    )


def aggregate_by_host(
    reports: Sequence[ReportRecord],
    order: BucketOrder = BucketOrder.GMV_DESC,
    settings: Optional[Settings] = None,
) -> List[MetricsBucket]:
    """
    Host buckets, highest GMV first.

    Host names are grouped by diacritic-stripped form, so spacing, case and
    accent variants of one name share a bucket labelled with the first
    spelling seen. Rows without a host go to the unattributed bucket.
    """
    settings = settings or get_settings()

    def label_of(report: ReportRecord) -> str:
        return report.hostName.strip() or settings.unattributed_label

    return aggregate(
        reports,
        key_fn=_host_key,
        label_fn=label_of,
        order=order,
        dimensions_fn=lambda r: {'hostName': label_of(r)},
    )


def aggregate_by_store(
    reports: Sequence[ReportRecord],
    stores: Sequence[StoreRecord] = (),
    order: BucketOrder = BucketOrder.GMV_DESC,
    settings: Optional[Settings] = None,
) -> List[MetricsBucket]:
    """
    Store buckets keyed by channelId, highest GMV first.

    Every store passed in gets a bucket, zeroed when it has no reports, so
    pass only the stores the actor may see. Reports whose channelId matches
    no store keep their own bucket under the unknown store label.
    """
    settings = settings or get_settings()
    names = _store_names(stores)
    seeds = []
    for store in stores:
        label = store.name or settings.unknown_store_label
        seeds.append((store.id, label, {'storeId': store.id, 'storeName': label}))

    def label_of(report: ReportRecord) -> str:
        return names.get(report.channelId) or settings.unknown_store_label

    return aggregate(
        reports,
        key_fn=lambda r: r.channelId,
        label_fn=label_of,
        order=order,
        dimensions_fn=lambda r: {'storeId': r.channelId, 'storeName': label_of(r)},
        seeds=seeds,
    )


def aggregate_by_host_store(
    reports: Sequence[ReportRecord],
    stores: Sequence[StoreRecord] = (),
    order: BucketOrder = BucketOrder.GMV_DESC,
    settings: Optional[Settings] = None,
) -> List[MetricsBucket]:
    """
    Buckets per host within a store; the grain of the hotlive leaderboard.
    """
    settings = settings or get_settings()
    names = _store_names(stores)

    def dimensions_of(report: ReportRecord) -> Dict[str, str]:
        return {
            'hostName': report.hostName.strip() or settings.unattributed_label,
            'storeId': report.channelId,
            'storeName': names.get(report.channelId) or settings.unknown_store_label,
        }

    def label_of(report: ReportRecord) -> str:
        dims = dimensions_of(report)
        return f"{dims['hostName']} - {dims['storeName']}"

    return aggregate(
        reports,
        key_fn=lambda r: f"{_host_key(r)}|{r.channelId}",
        label_fn=label_of,
        order=order,
        dimensions_fn=dimensions_of,
    )


def aggregate_by_dimension(
    reports: Sequence[ReportRecord],
    dimension: GroupDimension,
    stores: Sequence[StoreRecord] = (),
    settings: Optional[Settings] = None,
) -> List[MetricsBucket]:
    """
    Dispatch to the preset for a GroupDimension.

    Raises:
        ValueError: If dimension is not a GroupDimension value.
    """
    dimension = GroupDimension(dimension)
    if dimension == GroupDimension.DATE:
        return aggregate_by_date(reports)
    if dimension == GroupDimension.SHIFT:
        return aggregate_by_shift(reports)
    if dimension == GroupDimension.HOST:
        return aggregate_by_host(reports, settings=settings)
    if dimension == GroupDimension.STORE:
        return aggregate_by_store(reports, stores, settings=settings)
    return aggregate_by_host_store(reports, stores, settings=settings)


# =============================================================================
# Filters
# =============================================================================


def filter_by_date_range(
    reports: Sequence[ReportRecord],
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[ReportRecord]:
    """
    Reports dated within [start, end]; open bounds when None.

    Raises:
        ValueError: If start is after end.
    """
    if start and end and start > end:
        raise ValueError(f"Date range start {start} is after end {end}")
    return [
        report for report in reports
        if (start is None or report.date >= start) and (end is None or report.date <= end)
    ]


def filter_by_month(
    reports: Sequence[ReportRecord],
    year: int,
    month: int,
) -> List[ReportRecord]:
    """
    Reports dated within a calendar month.

    Raises:
        ValueError: If month is outside 1-12.
    """
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
    return [
        report for report in reports
        if report.date.year == year and report.date.month == month
    ]


def _search_text(report: ReportRecord, store_name: str) -> str:
    return ' '.join([
        report.date.isoformat(),
        store_name,
        report.hostName,
        report.reporter,
        report.shift.label if report.shift else '',
    ]).lower()


def filter_reports(
    reports: Sequence[ReportRecord],
    filters: Optional[ReportFilter],
    stores: Sequence[StoreRecord] = (),
) -> List[ReportRecord]:
    """
    Apply the dashboard filter panel to already-scoped reports.

    Multi-select filters (stores, hosts, shifts, reporters) keep a report when
    its value is selected; empty selections do not filter. Host and reporter
    selections compare diacritic-stripped names. Reports without a shift
    never match a shift selection. The search text is matched
    case-insensitively against date, store name, host, reporter and shift
    label.
    """
    if filters is None:
        return list(reports)

    selected = filter_by_date_range(reports, filters.dateFrom, filters.dateTo)

    if filters.stores:
        store_ids = set(filters.stores)
        selected = [r for r in selected if r.channelId in store_ids]

    if filters.hosts:
        hosts = {strip_diacritics_name(host) for host in filters.hosts}
        selected = [r for r in selected if strip_diacritics_name(r.hostName) in hosts]

    if filters.shifts:
        shifts = set(filters.shifts)
        selected = [r for r in selected if r.shift is not None and r.shift in shifts]

    if filters.reporters:
        reporters = {strip_diacritics_name(reporter) for reporter in filters.reporters}
        selected = [r for r in selected if strip_diacritics_name(r.reporter) in reporters]

    search = (filters.search or '').strip().lower()
    if search:
        names = _store_names(stores)
        selected = [
            r for r in selected
            if search in _search_text(r, names.get(r.channelId, ''))
        ]

    return selected


# =============================================================================
# Weekly Host Matrix
# =============================================================================


def build_weekly_host_matrix(
    reports: Sequence[ReportRecord],
    start: date,
    end: date,
) -> WeeklyHostMatrix:
    """
    Pivot GMV by date and host over an inclusive date range.

    Every date in the range is present, and every host that appears in
    reports (inside or outside the range) gets a column labelled with its
    first spelling, so the matrix keeps a stable shape week to week.

    Raises:
        ValueError: If start is after end.
    """
    if start > end:
        raise ValueError(f"Date range start {start} is after end {end}")

    dates = [start + timedelta(days=offset) for offset in range((end - start).days + 1)]
    # First spelling seen labels every variant of a host
    labels: Dict[str, str] = {}
    for report in reports:
        key = _host_key(report)
        if key:
            labels.setdefault(key, report.hostName.strip())
    hosts = sorted(set(labels.values()))

    in_range = [r for r in filter_by_date_range(reports, start, end) if _host_key(r)]
    frame = pd.DataFrame(
        {
            'date': [r.date for r in in_range],
            'host': [labels[_host_key(r)] for r in in_range],
            'gmv': [safe_number(r.gmv) for r in in_range],
        },
        columns=['date', 'host', 'gmv'],
    )

    pivot = frame.pivot_table(
        index='date',
        columns='host',
        values='gmv',
        aggfunc='sum',
        fill_value=0.0,
    ) if not frame.empty else pd.DataFrame()
    pivot = pivot.reindex(index=dates, columns=hosts, fill_value=0.0)

    values = {
        day.isoformat(): {host: float(pivot.at[day, host]) for host in hosts}
        for day in dates
    }
    totals = {host: float(pivot[host].sum()) for host in hosts}

    return WeeklyHostMatrix(
        dates=dates,
        hosts=hosts,
        values=values,
        totals=totals,
        grandTotal=float(sum(totals.values())),
    )
