"""
Module: ar_engines.history
Responsibility:
    Project the stored weekly records inside a trailing calendar window into
    an ascending series for charting.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - The window covers round(months x weeks_per_month) calendar weeks
      ending at the as-of week, inclusive on both ends.
    - Sparse: weeks with no stored record are omitted, never zero-filled.
    - Raw field values only; no deltas or averages.

Failure modes:
    - ``months`` outside the configured bounds: raises
      ``InvalidQueryParameterError`` (checked before the store is consulted).
    - Empty snapshot: returns ``EmptyDatasetError``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta

from ar_engines.guards import window_weeks
from ar_engines.metrics import DEFAULT_WEEKS_PER_MONTH
from ar_engines.tracer import traced_engine
from ar_kernel.domain.dtos import EmptyDatasetError, WeeklyRecord
from ar_kernel.domain.snapshot import StoreSnapshot
from ar_kernel.exceptions import InvalidQueryParameterError

MIN_MONTHS = 1
MAX_MONTHS = 36


@dataclass(frozen=True)
class HistorySeries:
    """Ascending weekly records with ``start <= week_start <= as_of``."""

    months: int
    start: date
    as_of: date
    points: tuple[WeeklyRecord, ...]

    def __len__(self) -> int:
        return len(self.points)


def validate_months(months: object, min_months: int = MIN_MONTHS, max_months: int = MAX_MONTHS) -> int:
    if isinstance(months, bool) or not isinstance(months, int):
        raise InvalidQueryParameterError("months", months, "must be an integer")
    if not min_months <= months <= max_months:
        raise InvalidQueryParameterError(
            "months", months, f"must be between {min_months} and {max_months}"
        )
    return months


def history_start(as_of: date, months: int, weeks_per_month: float = DEFAULT_WEEKS_PER_MONTH) -> date:
    """First week included in a ``months``-month window ending at ``as_of``."""
    return as_of - timedelta(days=7 * (window_weeks(months, weeks_per_month) - 1))


@traced_engine("history", "1.0", fingerprint_fields=("snapshot", "months", "as_of", "weeks_per_month"))
def build_history(
    snapshot: StoreSnapshot,
    months: int,
    as_of: date | None = None,
    weeks_per_month: float = DEFAULT_WEEKS_PER_MONTH,
    min_months: int = MIN_MONTHS,
    max_months: int = MAX_MONTHS,
) -> HistorySeries | EmptyDatasetError:
    """
    Stored records within the ``months``-month window ending at ``as_of``.

    ``as_of`` defaults to the latest stored week.  It need not be a stored
    week itself.
    """
    months = validate_months(months, min_months, max_months)
    if snapshot.is_empty:
        return EmptyDatasetError()

    as_of = snapshot.latest_week if as_of is None else as_of
    start = history_start(as_of, months, weeks_per_month)
    return HistorySeries(
        months=months,
        start=start,
        as_of=as_of,
        points=snapshot.range(start, as_of),
    )
