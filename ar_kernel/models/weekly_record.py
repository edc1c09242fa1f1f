"""
WeeklyRecordModel -- ORM row for one week of AR summary metrics.

Contract:
    One row per ``week_start`` (unique index).  Rows are created or replaced
    in full by WeeklyRecordStore.apply_batch; nothing else writes them.
    ``last_batch_id`` records which upload batch last wrote the row.

Architecture: ar_kernel/models. Imports from ar_kernel.db.base only.
"""

from __future__ import annotations

from datetime import date
from uuid import UUID

from sqlalchemy import Index
from sqlalchemy.orm import Mapped, mapped_column

from ar_kernel.db.base import TrackedBase, UUIDString
from ar_kernel.domain.dtos import WeeklyRecord
from ar_kernel.domain.weekly_fields import FIELD_NAMES


class WeeklyRecordModel(TrackedBase):
    """Persisted weekly AR summary row."""

    __tablename__ = "weekly_records"
    __table_args__ = (
        Index("ix_weekly_records_week_start", "week_start", unique=True),
    )

    week_start: Mapped[date] = mapped_column(nullable=False)
    overdue_gmv: Mapped[float | None] = mapped_column(nullable=True)
    collected_gmv: Mapped[float | None] = mapped_column(nullable=True)
    collected_invoices: Mapped[int | None] = mapped_column(nullable=True)
    dso: Mapped[float | None] = mapped_column(nullable=True)
    weighted_avg_days_overdue: Mapped[float | None] = mapped_column(nullable=True)
    weighted_avg_days_late: Mapped[float | None] = mapped_column(nullable=True)
    due_0_10: Mapped[float | None] = mapped_column(nullable=True)
    due_11_30: Mapped[float | None] = mapped_column(nullable=True)
    due_31_60: Mapped[float | None] = mapped_column(nullable=True)
    due_61_90: Mapped[float | None] = mapped_column(nullable=True)
    due_90_plus: Mapped[float | None] = mapped_column(nullable=True)
    credit_sales_percent: Mapped[float | None] = mapped_column(nullable=True)
    cei: Mapped[float | None] = mapped_column(nullable=True)
    ar_turnover_ratio: Mapped[float | None] = mapped_column(nullable=True)
    last_batch_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    def to_dto(self) -> WeeklyRecord:
        return WeeklyRecord(
            week_start=self.week_start,
            **{name: getattr(self, name) for name in FIELD_NAMES},
        )

    def replace_from(self, record: WeeklyRecord, batch_id: UUID | None = None) -> None:
        """Overwrite every metric column from ``record`` (nulls included)."""
        if record.week_start != self.week_start:
            raise ValueError(
                f"Cannot replace week {self.week_start.isoformat()} "
                f"with record for {record.week_start.isoformat()}"
            )
        for name in FIELD_NAMES:
            setattr(self, name, getattr(record, name))
        self.last_batch_id = batch_id

    @classmethod
    def from_dto(cls, record: WeeklyRecord, batch_id: UUID | None = None) -> WeeklyRecordModel:
        return cls(
            week_start=record.week_start,
            last_batch_id=batch_id,
            **{name: getattr(record, name) for name in FIELD_NAMES},
        )
