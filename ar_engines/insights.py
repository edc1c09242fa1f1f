"""
Module: ar_engines.insights
Responsibility:
    Derive dashboard insights from a MetricsReport: trend indicators,
    the aging health score, the DSO status band, the collection
    efficiency score and the aging bucket distribution.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Consumes only the
    MetricsReport; never reads the store.

Invariants enforced:
    - Null percentages never trigger a trend indicator.
    - Scores stay within 0..100.
    - Bucket shares are null (not zero) when there is nothing to share.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ar_config.schema import InsightThresholds
from ar_engines.guards import finite_or_none
from ar_engines.metrics import MetricsReport
from ar_engines.tracer import traced_engine
from ar_kernel.domain.dtos import WeeklyRecord
from ar_kernel.domain.weekly_fields import AGING_BUCKETS

# DSO above this contributes nothing to the efficiency score
DSO_CEILING_DAYS = 60.0
DSO_FAIR_DAYS = 60.0
TURNOVER_TARGET = 12.0
DSO_WHEN_UNKNOWN = 45.0


class TrendDirection(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"


class DsoStatus(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"


class EfficiencyRating(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"


@dataclass(frozen=True)
class TrendIndicator:
    metric: str
    direction: TrendDirection
    percentage: float
    threshold: float

    @property
    def message(self) -> str:
        verb = "up" if self.percentage >= 0 else "down"
        return f"{self.metric} {verb} {abs(self.percentage):.1f}% week-over-week"


@dataclass(frozen=True)
class AgingBucketShare:
    key: str
    label: str
    amount: float | None
    percentage: float | None


@dataclass(frozen=True)
class Insights:
    trends: tuple[TrendIndicator, ...]
    aging_health_score: int
    dso_status: DsoStatus | None
    dso_vs_benchmark: float | None  # Days above (+) or below (-) the benchmark
    efficiency_score: float
    efficiency_rating: EfficiencyRating
    aging_distribution: tuple[AgingBucketShare, ...]


# (metric key, direction, threshold attribute); a rise past the threshold fires
_TREND_RULES: tuple[tuple[str, TrendDirection, str], ...] = (
    ("collectedGmv", TrendDirection.POSITIVE, "collected_gmv_improved_pct"),
    ("cei", TrendDirection.POSITIVE, "cei_improved_pct"),
    ("overdueGmv", TrendDirection.NEGATIVE, "overdue_gmv_worsened_pct"),
    ("dso", TrendDirection.NEGATIVE, "dso_worsened_pct"),
)


def trend_indicators(
    report: MetricsReport,
    thresholds: InsightThresholds,
) -> tuple[TrendIndicator, ...]:
    indicators = []
    for key, direction, attr in _TREND_RULES:
        pct = report.metric(key).week_over_week.percentage
        threshold = getattr(thresholds, attr)
        if pct is not None and pct > threshold:
            indicators.append(TrendIndicator(key, direction, pct, threshold))
    return tuple(indicators)


def aging_health_score(
    overdue_gmv: float | None,
    days_overdue: float | None,
    dso: float | None,
    thresholds: InsightThresholds,
) -> int:
    """100 minus fixed penalties for each alert threshold crossed; nulls count as 0."""
    score = 100
    if (overdue_gmv or 0) > thresholds.overdue_gmv_alert:
        score -= 20
    if (days_overdue or 0) > thresholds.days_overdue_alert:
        score -= 25
    if (dso or 0) > thresholds.dso_alert:
        score -= 25
    return max(0, score)


def dso_status(dso: float | None, thresholds: InsightThresholds) -> DsoStatus | None:
    if dso is None:
        return None
    if dso <= thresholds.dso_benchmark:
        return DsoStatus.EXCELLENT
    if dso <= thresholds.dso_alert:
        return DsoStatus.GOOD
    if dso <= DSO_FAIR_DAYS:
        return DsoStatus.FAIR
    return DsoStatus.POOR


def efficiency_score(
    cei: float | None,
    turnover: float | None,
    dso: float | None,
) -> float:
    """
    Weighted 0..100 score: CEI 40%, AR turnover 30%, DSO 30%.

    Turnover saturates at 12x; DSO scores linearly from 0 days (full
    credit) to 60 days (none).  Missing CEI or turnover scores 0; missing
    DSO is taken as 45 days.
    """
    cei = cei if cei is not None else 0.0
    turnover = turnover if turnover is not None else 0.0
    dso = dso if dso is not None else DSO_WHEN_UNKNOWN

    score = (cei / 100) * 40
    score += min(turnover / TURNOVER_TARGET, 1) * 30
    score += max(0.0, (DSO_CEILING_DAYS - dso) / DSO_CEILING_DAYS) * 30
    return min(100.0, max(0.0, score))


def efficiency_rating(score: float) -> EfficiencyRating:
    if score >= 80:
        return EfficiencyRating.EXCELLENT
    if score >= 60:
        return EfficiencyRating.GOOD
    if score >= 40:
        return EfficiencyRating.FAIR
    return EfficiencyRating.POOR


def aging_distribution(record: WeeklyRecord) -> tuple[AgingBucketShare, ...]:
    """Each aging bucket's share of the week's non-null bucket total."""
    amounts = [(wf, finite_or_none(record.value(wf.name))) for wf in AGING_BUCKETS]
    total = sum(amount for _, amount in amounts if amount is not None)
    return tuple(
        AgingBucketShare(
            key=wf.key,
            label=wf.header,
            amount=amount,
            percentage=(
                finite_or_none(amount / total * 100)
                if amount is not None and total != 0
                else None
            ),
        )
        for wf, amount in amounts
    )


@traced_engine("insights", "1.0", fingerprint_fields=("report", "thresholds"))
def derive_insights(
    report: MetricsReport,
    thresholds: InsightThresholds | None = None,
) -> Insights:
    """Compute every insight for the report's current week."""
    thresholds = thresholds or InsightThresholds()
    dso = report.metric("dso").current
    score = efficiency_score(
        report.metric("cei").current,
        report.metric("arTurnoverRatio").current,
        dso,
    )
    return Insights(
        trends=trend_indicators(report, thresholds),
        aging_health_score=aging_health_score(
            report.metric("overdueGmv").current,
            report.metric("weightedAvgDaysOverdue").current,
            dso,
            thresholds,
        ),
        dso_status=dso_status(dso, thresholds),
        dso_vs_benchmark=finite_or_none(dso - thresholds.dso_benchmark) if dso is not None else None,
        efficiency_score=score,
        efficiency_rating=efficiency_rating(score),
        aging_distribution=aging_distribution(report.record),
    )
