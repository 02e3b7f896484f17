"""
Test Module for Metrics Aggregation.

This module validates:
- Bucket sums and derived metrics (ROI, conversion rate, profit)
- Zero-denominator handling: ROI and conversion are 0, never inf or NaN
- Click fallback from productClicks to viewers
- Date buckets partition the input and are chronological
- Shift order morning, afternoon, evening, unspecified
- Unknown stores and blank hosts land in their own buckets
- Dashboard filters and month/date-range selection
- Weekly host matrix shape and totals
- Idempotence on the same input

Dependency References:
- live_dashboard/services/metrics.py: Functions under test
- live_dashboard/tests/conftest.py: Report and store fixtures
"""

import math
from datetime import date

import pytest

from live_dashboard.models import BucketOrder, GroupDimension, ReportFilter, Shift
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
)
from live_dashboard.tests.conftest import make_report


# =============================================================================
# Derived metrics
# =============================================================================


class TestDerivedMetrics:

    def test_ratios(self):
        metrics = calculate_derived_metrics(10_000_000, 2_000_000, 40, 400)
        assert metrics['roi'] == pytest.approx(5.0)
        assert metrics['conversionRate'] == pytest.approx(10.0)
        assert metrics['profit'] == pytest.approx(8_000_000)

    def test_zero_ad_cost_gives_zero_roi(self):
        metrics = calculate_derived_metrics(5_000_000, 0, 10, 100)
        assert metrics['roi'] == 0
        assert metrics['profit'] == 5_000_000

    def test_zero_clicks_gives_zero_conversion(self):
        assert calculate_derived_metrics(1, 1, 10, 0)['conversionRate'] == 0


class TestRowClicks:

    def test_product_clicks_preferred(self):
        assert row_clicks(make_report(productClicks=40, viewers=900)) == 40

    def test_falls_back_to_viewers(self):
        assert row_clicks(make_report(productClicks=0, viewers=900)) == 900

    def test_reads_malformed_dict_rows(self):
        assert row_clicks({'productClicks': 'abc', 'viewers': '12'}) == 12


# =============================================================================
# Aggregate
# =============================================================================


class TestAggregate:

    def test_sums_per_bucket(self, reports):
        buckets = aggregate(reports, key_fn=lambda r: r.channelId)
        s1 = next(b for b in buckets if b.key == 'S1')
        assert s1.reportCount == 2
        assert s1.sumGmv == pytest.approx(15_000_000)
        assert s1.sumAdCost == pytest.approx(2_000_000)
        assert s1.sumOrders == pytest.approx(50)
        assert s1.sumViews == pytest.approx(1500)
        assert s1.sumViewers == pytest.approx(1100)
        assert s1.totalClicks == pytest.approx(500)
        assert s1.roi == pytest.approx(7.5)
        assert s1.conversionRate == pytest.approx(10.0)
        assert s1.profit == pytest.approx(13_000_000)

    def test_insertion_order_by_default(self, reports):
        keys = [b.key for b in aggregate(reports, key_fn=lambda r: r.channelId)]
        assert keys == ['S1', 'S2', 'S3', 'S9']

    def test_gmv_desc_order(self, reports):
        buckets = aggregate(reports, key_fn=lambda r: r.channelId, order=BucketOrder.GMV_DESC)
        gmvs = [b.sumGmv for b in buckets]
        assert gmvs == sorted(gmvs, reverse=True)

    def test_none_key_becomes_empty(self):
        buckets = aggregate([make_report(gmv=1)], key_fn=lambda r: None)
        assert buckets[0].key == ''

    def test_empty_input(self):
        assert aggregate([], key_fn=lambda r: r.channelId) == []

    def test_rejects_non_list(self):
        with pytest.raises(TypeError):
            aggregate(None, key_fn=lambda r: r.channelId)

    def test_single_report_without_ad_cost(self):
        report = make_report(gmv=5_000_000, adCost=0)
        bucket = aggregate([report], key_fn=lambda r: 'x')[0]
        assert bucket.roi == 0
        assert bucket.profit == 5_000_000

    @pytest.mark.property
    def test_roi_is_finite_for_every_bucket(self, reports):
        for dimension in GroupDimension:
            for bucket in aggregate_by_dimension(reports, dimension):
                assert math.isfinite(bucket.roi)
                assert math.isfinite(bucket.conversionRate)
                if bucket.sumAdCost == 0:
                    assert bucket.roi == 0


class TestTotals:

    def test_totals_cover_every_report(self, reports):
        totals = compute_totals(reports)
        assert totals.reportCount == len(reports)
        assert totals.sumGmv == pytest.approx(sum(r.gmv for r in reports))

    def test_empty_totals_are_zero(self):
        totals = compute_totals([])
        assert totals.reportCount == 0
        assert totals.roi == 0


# =============================================================================
# Dimension presets
# =============================================================================


class TestAggregateByDate:

    @pytest.mark.property
    def test_buckets_partition_reports(self, reports):
        buckets = aggregate_by_date(reports)
        assert sum(b.reportCount for b in buckets) == len(reports)
        assert len({b.key for b in buckets}) == len(buckets)

    def test_chronological(self, reports):
        keys = [b.key for b in aggregate_by_date(list(reversed(reports)))]
        assert keys == ['2025-12-01', '2025-12-02', '2025-12-03']

    def test_idempotent(self, reports):
        assert aggregate_by_date(reports) == aggregate_by_date(reports)


class TestAggregateByShift:

    def test_fixed_shift_order(self, reports):
        buckets = aggregate_by_shift(reports)
        assert [b.key for b in buckets] == [
            Shift.MORNING.value,
            Shift.AFTERNOON.value,
            Shift.EVENING.value,
            Shift.UNSPECIFIED.value,
        ]

    def test_labels(self, reports):
        labels = [b.label for b in aggregate_by_shift(reports)]
        assert labels == ['Sáng', 'Chiều', 'Tối', 'Chưa xác định']

    def test_missing_shift_is_unspecified(self):
        buckets = aggregate_by_shift([make_report(shift=None, gmv=7)])
        assert buckets[0].key == Shift.UNSPECIFIED.value
        assert buckets[0].sumGmv == 7


class TestAggregateByHost:

    def test_name_variants_share_a_bucket(self, reports, settings):
        buckets = aggregate_by_host(reports, settings=settings)
        host_a = next(b for b in buckets if b.label == 'Nguyễn Văn A')
        assert host_a.reportCount == 2
        host_b = next(b for b in buckets if b.label == 'Trần Thị B')
        assert host_b.reportCount == 2

    def test_blank_host_is_unattributed(self, reports, settings):
        buckets = aggregate_by_host(reports, settings=settings)
        unattributed = next(b for b in buckets if b.key == '')
        assert unattributed.label == settings.unattributed_label
        assert unattributed.reportCount == 1

    def test_sorted_by_gmv(self, reports, settings):
        buckets = aggregate_by_host(reports, settings=settings)
        assert buckets[0].label == 'Trần Thị B'
        assert sum(b.reportCount for b in buckets) == len(reports)


class TestAggregateByStore:

    def test_unknown_store_keeps_its_own_bucket(self, reports, stores, settings):
        buckets = aggregate_by_store(reports, stores, settings=settings)
        unknown = next(b for b in buckets if b.key == 'S9')
        assert unknown.label == 'Unknown'
        assert unknown.reportCount == 1

    def test_store_names_used_as_labels(self, reports, stores, settings):
        labels = {b.key: b.label for b in aggregate_by_store(reports, stores, settings=settings)}
        assert labels['S1'] == 'Cửa hàng Một'
        assert labels['S2'] == 'Cửa hàng Hai'

    def test_store_without_reports_gets_zero_bucket(self, reports, stores, settings):
        buckets = aggregate_by_store(reports, stores, settings=settings)
        assert [b.key for b in buckets] == ['S2', 'S1', 'S3', 'S9', 'S4']
        empty = buckets[-1]
        assert empty.label == 'Cửa hàng Bốn'
        assert empty.dimensions == {'storeId': 'S4', 'storeName': 'Cửa hàng Bốn'}
        assert empty.reportCount == 0
        assert empty.sumGmv == 0
        assert empty.roi == 0

    @pytest.mark.property
    def test_report_count_conserved_with_empty_stores(self, reports, stores, settings):
        buckets = aggregate_by_store(reports, stores, settings=settings)
        assert sum(b.reportCount for b in buckets) == len(reports)

    def test_only_given_stores_are_listed(self, reports, stores, settings):
        buckets = aggregate_by_store(reports[:1], stores[:1], settings=settings)
        assert [b.key for b in buckets] == ['S1']


class TestAggregateByHostStore:

    def test_dimensions_carry_host_and_store(self, reports, stores, settings):
        buckets = aggregate_by_host_store(reports, stores, settings=settings)
        top = buckets[0]
        assert top.dimensions == {
            'hostName': 'Trần Thị B',
            'storeId': 'S2',
            'storeName': 'Cửa hàng Hai',
        }
        assert top.reportCount == 2
        assert top.sumGmv == pytest.approx(28_000_000)

    def test_conversion_uses_bucket_clicks(self, reports, stores, settings):
        buckets = aggregate_by_host_store(reports, stores, settings=settings)
        top = buckets[0]
        # r2 falls back to 1500 viewers, r6 has 300 product clicks
        assert top.conversionRate == pytest.approx(80 / 1800 * 100)

    def test_unknown_dimension_rejected(self, reports):
        with pytest.raises(ValueError):
            aggregate_by_dimension(reports, 'weekday')


# =============================================================================
# Filters
# =============================================================================


class TestDateFilters:

    def test_range_is_inclusive(self, reports):
        selected = filter_by_date_range(reports, date(2025, 12, 2), date(2025, 12, 3))
        assert [r.id for r in selected] == ['r3', 'r4', 'r5', 'r6']

    def test_open_bounds(self, reports):
        assert filter_by_date_range(reports) == reports

    def test_inverted_range_rejected(self, reports):
        with pytest.raises(ValueError):
            filter_by_date_range(reports, date(2025, 12, 3), date(2025, 12, 1))

    def test_month(self, reports):
        other = make_report(date=date(2025, 11, 30))
        assert filter_by_month(reports + [other], 2025, 12) == reports

    def test_invalid_month_rejected(self, reports):
        with pytest.raises(ValueError):
            filter_by_month(reports, 2025, 13)


class TestFilterReports:

    def test_none_filter_keeps_everything(self, reports):
        assert filter_reports(reports, None) == reports

    def test_store_filter(self, reports):
        selected = filter_reports(reports, ReportFilter(stores=['S2']))
        assert [r.id for r in selected] == ['r2', 'r6']

    def test_host_filter_ignores_accents_and_spacing(self, reports):
        selected = filter_reports(reports, ReportFilter(hosts=['Nguyen  Van A']))
        assert [r.id for r in selected] == ['r1', 'r3']

    def test_shift_filter_excludes_missing_shift(self, reports):
        selected = filter_reports(reports, ReportFilter(shifts=[Shift.MORNING]))
        assert [r.id for r in selected] == ['r1', 'r5']

    def test_reporter_filter(self, reports):
        selected = filter_reports(reports, ReportFilter(reporters=['Lê Văn Trình']))
        assert [r.id for r in selected] == ['r3', 'r4']

    def test_search_matches_store_name(self, reports, stores):
        selected = filter_reports(reports, ReportFilter(search='hàng hai'), stores)
        assert [r.id for r in selected] == ['r2', 'r6']

    def test_search_matches_shift_label(self, reports, stores):
        selected = filter_reports(reports, ReportFilter(search='chiều'), stores)
        assert [r.id for r in selected] == ['r3']

    def test_filters_combine(self, reports, stores):
        filters = ReportFilter(dateFrom=date(2025, 12, 2), stores=['S1', 'S2'])
        assert [r.id for r in filter_reports(reports, filters, stores)] == ['r3', 'r6']


# =============================================================================
# Weekly host matrix
# =============================================================================


class TestWeeklyHostMatrix:

    def test_every_date_and_host_present(self, reports):
        matrix = build_weekly_host_matrix(reports, date(2025, 12, 1), date(2025, 12, 7))
        assert len(matrix.dates) == 7
        assert matrix.hosts == ['Khách Mời', 'Nguyễn Văn A', 'Trần Thị B']
        for day in matrix.dates:
            assert set(matrix.values[day.isoformat()]) == set(matrix.hosts)

    def test_values_and_totals(self, reports):
        matrix = build_weekly_host_matrix(reports, date(2025, 12, 1), date(2025, 12, 7))
        assert matrix.values['2025-12-01']['Nguyễn Văn A'] == pytest.approx(10_000_000)
        assert matrix.values['2025-12-02']['Nguyễn Văn A'] == pytest.approx(5_000_000)
        assert matrix.values['2025-12-05']['Nguyễn Văn A'] == 0
        assert matrix.totals['Trần Thị B'] == pytest.approx(28_000_000)
        assert matrix.totals['Khách Mời'] == pytest.approx(3_000_000)
        # The blank-host report is not part of the matrix
        assert matrix.grandTotal == pytest.approx(46_000_000)

    def test_hosts_outside_range_get_zero_columns(self, reports):
        matrix = build_weekly_host_matrix(reports, date(2025, 12, 8), date(2025, 12, 14))
        assert matrix.hosts
        assert matrix.grandTotal == 0

    def test_empty_reports(self):
        matrix = build_weekly_host_matrix([], date(2025, 12, 1), date(2025, 12, 1))
        assert matrix.hosts == []
        assert matrix.values == {'2025-12-01': {}}

    def test_inverted_range_rejected(self, reports):
        with pytest.raises(ValueError):
            build_weekly_host_matrix(reports, date(2025, 12, 7), date(2025, 12, 1))
