"""
StoreSnapshot -- immutable, ordered view of the weekly record store.

Responsibility:
    Holds the records a query reads in one statement, in ascending
    ``week_start`` order, and answers the store's three read shapes (point
    lookup, range scan, latest-K) in memory.  Engines compute from a snapshot
    so that every derived value of one request sees the same data, even while
    an upload commits concurrently.

Architecture position:
    Kernel > Domain -- pure, zero I/O.

Invariants enforced:
    - Ascending, unique ``week_start`` (checked on construction).
"""

from __future__ import annotations

from bisect import bisect_left, bisect_right
from dataclasses import dataclass, field
from datetime import date
from typing import Iterator, Sequence

from ar_kernel.domain.dtos import WeeklyRecord


@dataclass(frozen=True)
class StoreSnapshot:
    """Ascending tuple of weekly records with keyed access."""

    records: tuple[WeeklyRecord, ...] = ()
    _weeks: tuple[date, ...] = field(init=False, repr=False, compare=False)
    _index: dict[date, WeeklyRecord] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        weeks = tuple(r.week_start for r in self.records)
        for prev, cur in zip(weeks, weeks[1:]):
            if cur <= prev:
                raise ValueError(
                    f"Snapshot records must be strictly ascending by week_start: "
                    f"{prev.isoformat()} then {cur.isoformat()}"
                )
        object.__setattr__(self, "_weeks", weeks)
        object.__setattr__(self, "_index", {r.week_start: r for r in self.records})

    @classmethod
    def from_records(cls, records: Sequence[WeeklyRecord]) -> StoreSnapshot:
        """Build a snapshot from records in any order."""
        return cls(tuple(sorted(records, key=lambda r: r.week_start)))

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[WeeklyRecord]:
        return iter(self.records)

    @property
    def is_empty(self) -> bool:
        return not self.records

    @property
    def latest_week(self) -> date | None:
        return self._weeks[-1] if self._weeks else None

    def get(self, week_start: date) -> WeeklyRecord | None:
        """Point lookup by week."""
        return self._index.get(week_start)

    def range(self, start: date, end: date) -> tuple[WeeklyRecord, ...]:
        """Records with start <= week_start <= end, ascending."""
        lo = bisect_left(self._weeks, start)
        hi = bisect_right(self._weeks, end)
        return self.records[lo:hi]

    def latest(self, k: int, as_of: date) -> tuple[WeeklyRecord, ...]:
        """The latest ``k`` records at or before ``as_of``, ascending."""
        if k <= 0:
            return ()
        hi = bisect_right(self._weeks, as_of)
        return self.records[max(0, hi - k):hi]

    def count_through(self, as_of: date) -> int:
        """Number of records at or before ``as_of``."""
        return bisect_right(self._weeks, as_of)
