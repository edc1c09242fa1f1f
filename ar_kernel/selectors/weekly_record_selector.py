"""
Module: ar_kernel.selectors.weekly_record_selector
Responsibility: Read path of the weekly record store: point lookup, ascending
    range scan, latest-K weeks at or before an as-of week, and the
    one-statement snapshot the engines compute from.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Every multi-row result is ordered by week_start ascending.
    - snapshot() reads all rows it returns in a single SELECT, so a
      concurrently committing batch is seen entirely or not at all.
"""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import func, select

from ar_kernel.domain.dtos import StoreStatus, UploadBatch, UploadBatchStatus, WeeklyRecord
from ar_kernel.domain.snapshot import StoreSnapshot
from ar_kernel.logging_config import get_logger
from ar_kernel.models.upload_batch import UploadBatchModel
from ar_kernel.models.weekly_record import WeeklyRecordModel
from ar_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.weekly_record")


class WeeklyRecordSelector(BaseSelector[WeeklyRecordModel]):
    """Read-only queries over weekly_records."""

    def get(self, week_start: date) -> WeeklyRecord | None:
        """Point lookup by week."""
        model = self.session.execute(
            select(WeeklyRecordModel).where(WeeklyRecordModel.week_start == week_start)
        ).scalar_one_or_none()
        return model.to_dto() if model is not None else None

    def range(self, start: date, end: date) -> list[WeeklyRecord]:
        """Records with start <= week_start <= end, ascending."""
        rows = self.session.execute(
            select(WeeklyRecordModel)
            .where(WeeklyRecordModel.week_start >= start)
            .where(WeeklyRecordModel.week_start <= end)
            .order_by(WeeklyRecordModel.week_start.asc())
        ).scalars()
        return [m.to_dto() for m in rows]

    def latest(self, k: int, as_of: date) -> list[WeeklyRecord]:
        """The latest ``k`` distinct weeks at or before ``as_of``, ascending."""
        if k <= 0:
            return []
        rows = self.session.execute(
            select(WeeklyRecordModel)
            .where(WeeklyRecordModel.week_start <= as_of)
            .order_by(WeeklyRecordModel.week_start.desc())
            .limit(k)
        ).scalars()
        return sorted((m.to_dto() for m in rows), key=lambda r: r.week_start)

    def latest_week(self) -> date | None:
        return self.session.execute(
            select(func.max(WeeklyRecordModel.week_start))
        ).scalar_one_or_none()

    def count(self) -> int:
        return self.session.execute(
            select(func.count()).select_from(WeeklyRecordModel)
        ).scalar_one()

    def snapshot(self) -> StoreSnapshot:
        """Read every record, ascending by week, in one statement."""
        stmt = select(WeeklyRecordModel).order_by(WeeklyRecordModel.week_start.asc())
        records = tuple(m.to_dto() for m in self.session.execute(stmt).scalars())
        logger.debug("snapshot_loaded", extra={"record_count": len(records)})
        return StoreSnapshot(records)


class UploadBatchSelector(BaseSelector[UploadBatchModel]):
    """Read-only queries over upload_batches."""

    def get(self, batch_id) -> UploadBatch | None:
        model = self.session.get(UploadBatchModel, batch_id)
        return model.to_dto() if model is not None else None

    def last_completed(self) -> UploadBatch | None:
        model = self.session.execute(
            select(UploadBatchModel)
            .where(UploadBatchModel.status == UploadBatchStatus.COMPLETED.value)
            .order_by(UploadBatchModel.completed_at.desc())
            .limit(1)
        ).scalar_one_or_none()
        return model.to_dto() if model is not None else None

    def history(self, limit: int = 20) -> list[UploadBatch]:
        """Most recent upload attempts first."""
        rows = self.session.execute(
            select(UploadBatchModel)
            .order_by(UploadBatchModel.created_at.desc())
            .limit(limit)
        ).scalars()
        return [m.to_dto() for m in rows]


def load_store_status(session) -> StoreStatus:
    """Status summary: last completed upload, latest week, record count."""
    # Latest week and count from one statement so they always agree
    latest_week, total = session.execute(
        select(func.max(WeeklyRecordModel.week_start), func.count(WeeklyRecordModel.id))
    ).one()
    last = UploadBatchSelector(session).last_completed()
    last_upload_at: datetime | None = last.completed_at if last is not None else None
    return StoreStatus(
        last_upload_at=last_upload_at,
        latest_week=latest_week,
        total_records=total,
    )
