"""
Tests for derived insights: trends, health scores, DSO banding and aging mix.
"""

from datetime import date

import pytest

from ar_config.schema import InsightThresholds
from ar_engines.insights import (
    DsoStatus,
    EfficiencyRating,
    TrendDirection,
    aging_distribution,
    aging_health_score,
    derive_insights,
    dso_status,
    efficiency_rating,
    efficiency_score,
)
from ar_engines.metrics import compute_metrics
from ar_kernel.domain.snapshot import StoreSnapshot
from tests.conftest import make_record

THRESHOLDS = InsightThresholds()


def _report(previous: dict, current: dict):
    snap = StoreSnapshot.from_records(
        [make_record(date(2024, 2, 5), **previous), make_record(date(2024, 2, 12), **current)]
    )
    return compute_metrics(snapshot=snap)


class TestTrendIndicators:

    def test_collected_gmv_rise_is_positive(self):
        insights = derive_insights(report=_report({"collected_gmv": 100.0}, {"collected_gmv": 110.0}))

        assert len(insights.trends) == 1
        trend = insights.trends[0]
        assert trend.metric == "collectedGmv"
        assert trend.direction is TrendDirection.POSITIVE
        assert trend.message == "collectedGmv up 10.0% week-over-week"

    def test_overdue_and_dso_rises_are_negative(self):
        report = _report({"overdue_gmv": 100.0, "dso": 40.0}, {"overdue_gmv": 120.0, "dso": 44.0})
        trends = derive_insights(report=report).trends

        assert {(t.metric, t.direction) for t in trends} == {
            ("overdueGmv", TrendDirection.NEGATIVE),
            ("dso", TrendDirection.NEGATIVE),
        }

    def test_threshold_is_exclusive(self):
        report = _report({"cei": 50.0}, {"cei": 51.0})  # exactly +2%
        assert derive_insights(report=report).trends == ()

    def test_null_percentage_never_fires(self):
        report = _report({"collected_gmv": 0.0}, {"collected_gmv": 500.0})
        assert derive_insights(report=report).trends == ()


class TestScores:

    def test_aging_health_all_clear(self):
        assert aging_health_score(10.0, 5.0, 20.0, THRESHOLDS) == 100

    def test_aging_health_all_penalties(self):
        assert aging_health_score(2_000_000.0, 45.0, 60.0, THRESHOLDS) == 30

    def test_aging_health_nulls_count_as_zero(self):
        assert aging_health_score(None, None, None, THRESHOLDS) == 100

    @pytest.mark.parametrize(
        "dso, expected",
        [
            (25.0, DsoStatus.EXCELLENT),
            (30.0, DsoStatus.EXCELLENT),
            (45.0, DsoStatus.GOOD),
            (55.0, DsoStatus.FAIR),
            (61.0, DsoStatus.POOR),
            (None, None),
        ],
    )
    def test_dso_status(self, dso, expected):
        assert dso_status(dso, THRESHOLDS) is expected

    def test_efficiency_perfect(self):
        assert efficiency_score(100.0, 12.0, 0.0) == 100.0

    def test_efficiency_nulls(self):
        # CEI and turnover score nothing; DSO taken as 45 days -> 7.5
        assert efficiency_score(None, None, None) == pytest.approx(7.5)

    def test_efficiency_turnover_saturates(self):
        assert efficiency_score(0.0, 24.0, 60.0) == pytest.approx(30.0)

    @pytest.mark.parametrize(
        "score, rating",
        [
            (95.0, EfficiencyRating.EXCELLENT),
            (80.0, EfficiencyRating.EXCELLENT),
            (60.0, EfficiencyRating.GOOD),
            (40.0, EfficiencyRating.FAIR),
            (39.9, EfficiencyRating.POOR),
        ],
    )
    def test_efficiency_rating(self, score, rating):
        assert efficiency_rating(score) is rating


class TestAgingDistribution:

    def test_shares_sum_to_hundred(self):
        record = make_record(
            date(2024, 1, 1),
            due_0_10=500.0,
            due_11_30=250.0,
            due_31_60=150.0,
            due_61_90=75.0,
            due_90_plus=25.0,
        )
        shares = aging_distribution(record)

        assert [s.percentage for s in shares] == pytest.approx([50.0, 25.0, 15.0, 7.5, 2.5])
        assert shares[0].label == "Due: 0-10 Days"

    def test_null_bucket_has_null_share(self):
        record = make_record(date(2024, 1, 1), due_0_10=100.0, due_90_plus=None)
        shares = {s.key: s for s in aging_distribution(record)}

        assert shares["due0To10"].percentage == 100.0
        assert shares["due90Plus"].percentage is None

    def test_all_empty(self):
        shares = aging_distribution(make_record(date(2024, 1, 1)))
        assert all(s.percentage is None for s in shares)


class TestDeriveInsights:

    def test_benchmark_difference(self):
        insights = derive_insights(report=_report({}, {"dso": 38.5}))

        assert insights.dso_vs_benchmark == pytest.approx(8.5)
        assert insights.dso_status is DsoStatus.GOOD

    def test_custom_thresholds(self):
        thresholds = InsightThresholds(dso_benchmark=40.0)
        insights = derive_insights(report=_report({}, {"dso": 38.5}), thresholds=thresholds)

        assert insights.dso_status is DsoStatus.EXCELLENT
