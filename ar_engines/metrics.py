"""
Module: ar_engines.metrics
Responsibility:
    Compute the headline metrics for one reference week: the current
    value, the week-over-week delta and the trailing 3/6/12-month averages
    of each tracked metric.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Reads a StoreSnapshot; never touches the database or a clock.

Invariants enforced:
    - Week-over-week compares against the record dated exactly seven days
      earlier; any other gap yields a null delta.
    - Percentage deltas are null when the previous value is null or zero.
    - Trailing averages take the latest N stored records at or before the
      reference week, N = round(months x weeks_per_month); null samples are
      excluded from both the sum and the count.
    - No output is NaN or Infinity.
    - DSO, CEI and AR turnover are averaged and diffed as reported; they
      are never recomputed from components.

Failure modes:
    - Empty snapshot: returns ``EmptyDatasetError`` (not raised).
    - Reference week absent from the snapshot: raises ``WeekNotFoundError``.

Usage:
    from ar_engines.metrics import compute_metrics

    report = compute_metrics(snapshot=snapshot, as_of=date(2024, 3, 4))
    report.metrics["dso"].week_over_week.percentage
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Mapping

from ar_engines.guards import (
    finite_or_none,
    mean_of_non_null,
    safe_difference,
    safe_percentage_change,
    window_weeks,
)
from ar_engines.tracer import traced_engine
from ar_kernel.domain.dtos import EmptyDatasetError, WeeklyRecord
from ar_kernel.domain.snapshot import StoreSnapshot
from ar_kernel.domain.weekly_fields import TRACKED_METRICS
from ar_kernel.exceptions import WeekNotFoundError
from ar_kernel.logging_config import get_logger

logger = get_logger("engines.metrics")

DEFAULT_WEEKS_PER_MONTH = 4.33

DEFAULT_WINDOWS: Mapping[str, int] = {
    "threeMonth": 3,
    "sixMonth": 6,
    "twelveMonth": 12,
}

WEEK = timedelta(days=7)


@dataclass(frozen=True)
class WeekOverWeek:
    """Change against the week exactly seven days earlier."""

    absolute: float | int | None = None
    percentage: float | None = None


@dataclass(frozen=True)
class MetricSnapshot:
    """
    One tracked metric at the reference week.

    ``trailing_averages`` is keyed by window name (``threeMonth`` ...), in
    the order the windows were configured.
    """

    current: float | int | None
    week_over_week: WeekOverWeek = field(default_factory=WeekOverWeek)
    trailing_averages: dict[str, float | None] = field(default_factory=dict)


@dataclass(frozen=True)
class MetricsReport:
    """Headline metrics for ``current_week``, keyed by metric API key."""

    current_week: date
    metrics: dict[str, MetricSnapshot]
    data_points: int
    record: WeeklyRecord  # The reference week's full row

    def metric(self, key: str) -> MetricSnapshot:
        return self.metrics[key]


def resolve_current_week(snapshot: StoreSnapshot, as_of: date | None = None) -> date | None:
    """
    The week metrics are reported for.

    The latest stored week by default; an explicit ``as_of`` must be a stored
    week.  Returns None for an empty snapshot.
    """
    if snapshot.is_empty:
        return None
    if as_of is None:
        return snapshot.latest_week
    if snapshot.get(as_of) is None:
        raise WeekNotFoundError(as_of)
    return as_of


def week_over_week(current: float | int | None, previous: float | int | None) -> WeekOverWeek:
    return WeekOverWeek(
        absolute=safe_difference(current, previous),
        percentage=safe_percentage_change(current, previous),
    )


@traced_engine(
    "metrics",
    "1.0",
    fingerprint_fields=("snapshot", "as_of", "weeks_per_month", "windows"),
)
def compute_metrics(
    snapshot: StoreSnapshot,
    as_of: date | None = None,
    weeks_per_month: float = DEFAULT_WEEKS_PER_MONTH,
    windows: Mapping[str, int] | None = None,
) -> MetricsReport | EmptyDatasetError:
    """
    Compute every tracked metric for the reference week.

    Args:
        snapshot: Records to compute from.
        as_of: Reference week; defaults to the latest stored week.
        weeks_per_month: Converts window months to a record count.
        windows: Window name -> months.  Defaults to 3/6/12.

    Returns:
        MetricsReport, or EmptyDatasetError if the snapshot has no records.

    Raises:
        WeekNotFoundError: ``as_of`` is given but not stored.
    """
    current_week = resolve_current_week(snapshot, as_of)
    if current_week is None:
        return EmptyDatasetError()

    windows = DEFAULT_WINDOWS if windows is None else windows
    record = snapshot.get(current_week)
    previous = snapshot.get(current_week - WEEK)

    # One slice per window; the metric loop only projects fields out of them
    window_records = {
        name: snapshot.latest(window_weeks(months, weeks_per_month), current_week)
        for name, months in windows.items()
    }

    metrics: dict[str, MetricSnapshot] = {}
    for wf in TRACKED_METRICS:
        current = finite_or_none(record.value(wf.name))
        prior = finite_or_none(previous.value(wf.name)) if previous is not None else None
        metrics[wf.key] = MetricSnapshot(
            current=current,
            week_over_week=week_over_week(current, prior),
            trailing_averages={
                name: mean_of_non_null(r.value(wf.name) for r in records)
                for name, records in window_records.items()
            },
        )

    if previous is None:
        logger.debug(
            "no_prior_week",
            extra={"as_of_week": current_week.isoformat()},
        )

    return MetricsReport(
        current_week=current_week,
        metrics=metrics,
        data_points=snapshot.count_through(current_week),
        record=record,
    )
