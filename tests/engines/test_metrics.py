"""
Tests for the Metrics Engine.

Covers:
- Current week resolution and explicit override
- Week-over-week deltas (exact seven-day predecessor only)
- Percentage guard for null and zero denominators
- Trailing averages: window sizes, null exclusion, gaps
- Empty store result
"""

from datetime import date, timedelta

import pytest

from ar_engines.guards import (
    finite_or_none,
    mean_of_non_null,
    safe_percentage_change,
    window_weeks,
)
from ar_engines.metrics import compute_metrics
from ar_kernel.domain.dtos import EmptyDatasetError
from ar_kernel.domain.snapshot import StoreSnapshot
from ar_kernel.domain.weekly_fields import TRACKED_METRICS
from ar_kernel.exceptions import WeekNotFoundError
from tests.conftest import make_record


def _weekly(start: date, n: int) -> StoreSnapshot:
    """n consecutive weeks with dso = 10 + index."""
    return StoreSnapshot.from_records(
        [make_record(start + timedelta(weeks=i), dso=10.0 + i) for i in range(n)]
    )


class TestGuards:

    def test_window_weeks(self):
        assert window_weeks(3, 4.33) == 13
        assert window_weeks(6, 4.33) == 26
        assert window_weeks(12, 4.33) == 52
        assert window_weeks(1, 4.33) == 4
        assert window_weeks(36, 4.33) == 156

    def test_window_weeks_rounds_half_up(self):
        assert window_weeks(1, 4.5) == 5

    def test_finite_or_none(self):
        assert finite_or_none(float("nan")) is None
        assert finite_or_none(float("inf")) is None
        assert finite_or_none(0.0) == 0.0
        assert finite_or_none(7) == 7

    @pytest.mark.parametrize(
        "current, previous, expected",
        [
            (110.0, 100.0, 10.0),
            (90.0, 100.0, -10.0),
            (-50.0, -100.0, 50.0),
            (5.0, 0.0, None),
            (5.0, None, None),
            (None, 5.0, None),
        ],
    )
    def test_safe_percentage_change(self, current, previous, expected):
        result = safe_percentage_change(current, previous)
        if expected is None:
            assert result is None
        else:
            assert result == pytest.approx(expected)

    def test_mean_skips_nulls(self):
        assert mean_of_non_null([1.0, None, 3.0]) == 2.0
        assert mean_of_non_null([None, None]) is None
        assert mean_of_non_null([]) is None


class TestCurrentWeek:

    def test_empty_snapshot(self):
        result = compute_metrics(snapshot=StoreSnapshot())
        assert isinstance(result, EmptyDatasetError)
        assert result.code == "EMPTY_DATASET"

    def test_defaults_to_latest_week(self):
        report = compute_metrics(snapshot=_weekly(date(2024, 1, 1), 5))
        assert report.current_week == date(2024, 1, 29)
        assert report.metric("dso").current == 14.0
        assert report.data_points == 5

    def test_explicit_week(self):
        report = compute_metrics(snapshot=_weekly(date(2024, 1, 1), 5), as_of=date(2024, 1, 15))
        assert report.current_week == date(2024, 1, 15)
        assert report.metric("dso").current == 12.0
        assert report.data_points == 3

    def test_unknown_week_raises(self):
        with pytest.raises(WeekNotFoundError) as exc_info:
            compute_metrics(snapshot=_weekly(date(2024, 1, 1), 3), as_of=date(2024, 1, 10))
        assert exc_info.value.week_start == date(2024, 1, 10)

    def test_reports_every_tracked_metric(self):
        report = compute_metrics(snapshot=_weekly(date(2024, 1, 1), 2))
        assert list(report.metrics) == [f.key for f in TRACKED_METRICS]
        assert len(report.metrics) == 9

    def test_null_current_value(self):
        report = compute_metrics(snapshot=_weekly(date(2024, 1, 1), 2))
        assert report.metric("cei").current is None


class TestWeekOverWeek:

    def test_consecutive_weeks(self):
        snap = StoreSnapshot.from_records(
            [
                make_record(date(2024, 1, 1), collected_gmv=1000.0),
                make_record(date(2024, 1, 8), collected_gmv=1100.0),
            ]
        )
        wow = compute_metrics(snapshot=snap).metric("collectedGmv").week_over_week

        assert wow.absolute == 100.0
        assert wow.percentage == pytest.approx(10.0)

    def test_negative_previous_uses_magnitude(self):
        snap = StoreSnapshot.from_records(
            [make_record(date(2024, 1, 1), overdue_gmv=-200.0), make_record(date(2024, 1, 8), overdue_gmv=-100.0)]
        )
        assert compute_metrics(snapshot=snap).metric("overdueGmv").week_over_week.percentage == pytest.approx(50.0)

    def test_gap_gives_null_delta_but_averages_include_both(self):
        """Weeks 2023-01-02 and 2023-01-16 only: no 7-day predecessor for 01-16."""
        snap = StoreSnapshot.from_records(
            [make_record(date(2023, 1, 2), dso=40.0), make_record(date(2023, 1, 16), dso=50.0)]
        )
        report = compute_metrics(snapshot=snap)

        assert report.current_week == date(2023, 1, 16)
        for metric in report.metrics.values():
            assert metric.week_over_week.absolute is None
            assert metric.week_over_week.percentage is None
        assert report.metric("dso").trailing_averages["threeMonth"] == 45.0

    def test_previous_zero_gives_null_percentage(self):
        snap = StoreSnapshot.from_records(
            [make_record(date(2024, 1, 1), collected_invoices=0), make_record(date(2024, 1, 8), collected_invoices=12)]
        )
        wow = compute_metrics(snapshot=snap).metric("collectedInvoices").week_over_week

        assert wow.absolute == 12
        assert wow.percentage is None

    def test_previous_null_gives_null_delta(self):
        snap = StoreSnapshot.from_records(
            [make_record(date(2024, 1, 1), cei=None), make_record(date(2024, 1, 8), cei=90.0)]
        )
        wow = compute_metrics(snapshot=snap).metric("cei").week_over_week
        assert wow.absolute is None
        assert wow.percentage is None

    def test_first_week_has_no_delta(self):
        report = compute_metrics(snapshot=_weekly(date(2024, 1, 1), 3), as_of=date(2024, 1, 1))
        assert report.metric("dso").week_over_week.absolute is None


class TestTrailingAverages:

    def test_window_sizes(self):
        snap = _weekly(date(2022, 1, 3), 60)  # dso = 10..69
        averages = compute_metrics(snapshot=snap).metric("dso").trailing_averages

        assert averages["threeMonth"] == pytest.approx(sum(range(57, 70)) / 13)
        assert averages["sixMonth"] == pytest.approx(sum(range(44, 70)) / 26)
        assert averages["twelveMonth"] == pytest.approx(sum(range(18, 70)) / 52)

    def test_window_ends_at_reference_week(self):
        snap = _weekly(date(2024, 1, 1), 20)
        averages = compute_metrics(snapshot=snap, as_of=date(2024, 1, 29)).metric("dso").trailing_averages

        # Only weeks 0..4 are at or before the reference week
        assert averages["threeMonth"] == 12.0

    def test_nulls_excluded_from_numerator_and_denominator(self):
        snap = StoreSnapshot.from_records(
            [
                make_record(date(2024, 1, 1), cei=80.0),
                make_record(date(2024, 1, 8), cei=None),
                make_record(date(2024, 1, 15), cei=90.0),
            ]
        )
        assert compute_metrics(snapshot=snap).metric("cei").trailing_averages["threeMonth"] == 85.0

    def test_all_null_gives_null_average(self):
        report = compute_metrics(snapshot=_weekly(date(2024, 1, 1), 4))
        assert report.metric("arTurnoverRatio").trailing_averages == {
            "threeMonth": None,
            "sixMonth": None,
            "twelveMonth": None,
        }

    def test_custom_windows(self):
        snap = _weekly(date(2024, 1, 1), 8)
        averages = compute_metrics(snapshot=snap, windows={"oneMonth": 1}).metric("dso").trailing_averages

        assert list(averages) == ["oneMonth"]
        assert averages["oneMonth"] == pytest.approx((14 + 15 + 16 + 17) / 4)

    def test_emits_engine_trace(self, captured_logs):
        compute_metrics(snapshot=_weekly(date(2024, 1, 1), 2))

        traces = [r for r in captured_logs() if r["message"] == "AR_ENGINE_TRACE"]
        assert traces[0]["engine_name"] == "metrics"
        assert len(traces[0]["input_fingerprint"]) == 16
