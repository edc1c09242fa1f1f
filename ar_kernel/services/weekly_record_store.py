"""
Module: ar_kernel.services.weekly_record_store
Responsibility: The weekly record store.  Owns the write path (atomic batch
    upsert with whole-row replacement) and hands out snapshot reads through
    WeeklyRecordSelector.
Architecture position: Kernel > Services.  May import db/, models/,
    selectors/ and domain/.

Invariants enforced:
    - At most one row per week_start (unique index plus in-batch check).
    - Whole-row replacement: an existing week is overwritten column by
      column from the incoming record, nulls included.  Fields are never
      merged across uploads.
    - Batch atomicity: every record of one batch and its UploadBatch row are
      written in one transaction.  A failure rolls the whole batch back.
    - Single writer: ``_write_lock`` serializes apply_batch/record_rejected
      so one upload runs to completion before the next begins.

Failure modes:
    - ValueError if a batch carries the same week twice (the parser rejects
      this earlier; the store re-checks).
    - SQLAlchemy errors propagate after rollback.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import date
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from ar_kernel.db.engine import session_scope
from ar_kernel.domain.dtos import StoreStatus, UploadBatch, UploadBatchStatus, WeeklyRecord
from ar_kernel.domain.snapshot import StoreSnapshot
from ar_kernel.logging_config import get_logger
from ar_kernel.models.upload_batch import UploadBatchModel
from ar_kernel.models.weekly_record import WeeklyRecordModel
from ar_kernel.selectors.weekly_record_selector import (
    WeeklyRecordSelector,
    load_store_status,
)

logger = get_logger("services.weekly_record_store")


@dataclass(frozen=True)
class ApplyResult:
    """Outcome of one committed batch."""

    inserted: int
    replaced: int

    @property
    def applied(self) -> int:
        return self.inserted + self.replaced


class WeeklyRecordStore:
    """Keyed, ordered persistence of weekly records."""

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory
        self._write_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Write path
    # ------------------------------------------------------------------

    def apply_batch(self, records: Sequence[WeeklyRecord], batch: UploadBatch) -> ApplyResult:
        """
        Upsert every record and persist the batch row, all or nothing.

        Preconditions: ``batch.status`` is COMPLETED; weeks are unique.
        Postconditions: on return, every record is readable and fully
            replaces any earlier row for its week.
        """
        if batch.status is not UploadBatchStatus.COMPLETED:
            raise ValueError(f"apply_batch expects a completed batch, got {batch.status.value}")
        weeks = [r.week_start for r in records]
        if len(set(weeks)) != len(weeks):
            raise ValueError("Batch contains the same week_start more than once")

        with self._write_lock:
            with session_scope(self._session_factory) as session:
                existing: dict[date, WeeklyRecordModel] = {}
                if weeks:
                    rows = session.execute(
                        select(WeeklyRecordModel)
                        .where(WeeklyRecordModel.week_start.in_(weeks))
                        .with_for_update()
                    ).scalars()
                    existing = {m.week_start: m for m in rows}

                inserted = replaced = 0
                for record in records:
                    model = existing.get(record.week_start)
                    if model is None:
                        session.add(WeeklyRecordModel.from_dto(record, batch.batch_id))
                        inserted += 1
                    else:
                        model.replace_from(record, batch.batch_id)
                        replaced += 1

                session.add(UploadBatchModel.from_dto(batch))

        result = ApplyResult(inserted=inserted, replaced=replaced)
        logger.info(
            "batch_applied",
            extra={
                "batch_id": str(batch.batch_id),
                "inserted": inserted,
                "replaced": replaced,
            },
        )
        return result

    def record_rejected(self, batch: UploadBatch) -> None:
        """Persist the bookkeeping row of a rejected upload; no records change."""
        if batch.status is not UploadBatchStatus.REJECTED:
            raise ValueError(f"record_rejected expects a rejected batch, got {batch.status.value}")
        with self._write_lock:
            with session_scope(self._session_factory) as session:
                session.add(UploadBatchModel.from_dto(batch))
        logger.info("batch_rejected_recorded", extra={"batch_id": str(batch.batch_id)})

    # ------------------------------------------------------------------
    # Read path (each call is its own short read)
    # ------------------------------------------------------------------

    def snapshot(self) -> StoreSnapshot:
        with session_scope(self._session_factory) as session:
            return WeeklyRecordSelector(session).snapshot()

    def get(self, week_start: date) -> WeeklyRecord | None:
        with session_scope(self._session_factory) as session:
            return WeeklyRecordSelector(session).get(week_start)

    def range(self, start: date, end: date) -> list[WeeklyRecord]:
        with session_scope(self._session_factory) as session:
            return WeeklyRecordSelector(session).range(start, end)

    def latest(self, k: int, as_of: date) -> list[WeeklyRecord]:
        with session_scope(self._session_factory) as session:
            return WeeklyRecordSelector(session).latest(k, as_of)

    def status(self) -> StoreStatus:
        with session_scope(self._session_factory) as session:
            return load_store_status(session)
