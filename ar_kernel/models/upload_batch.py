"""
UploadBatchModel -- bookkeeping row for one CSV upload attempt.

Contract:
    Written once per upload, completed or rejected.  The status query reads
    the latest completed batch for ``lastUploadTimestamp``.  Rejected batches
    are recorded for traceability; they never touch weekly_records.

Architecture: ar_kernel/models. Imports from ar_kernel.db.base only.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from ar_kernel.db.base import TrackedBase
from ar_kernel.domain.dtos import UploadBatch, UploadBatchStatus


class UploadBatchModel(TrackedBase):
    """One upload attempt."""

    __tablename__ = "upload_batches"
    __table_args__ = (
        Index("ix_upload_batches_status_completed", "status", "completed_at"),
    )

    filename: Mapped[str] = mapped_column(String(500), nullable=False)
    checksum: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    total_records: Mapped[int] = mapped_column(default=0, nullable=False)
    success_count: Mapped[int] = mapped_column(default=0, nullable=False)
    skip_count: Mapped[int] = mapped_column(default=0, nullable=False)
    error_count: Mapped[int] = mapped_column(default=0, nullable=False)
    warning_count: Mapped[int] = mapped_column(default=0, nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def to_dto(self) -> UploadBatch:
        return UploadBatch(
            batch_id=self.id,
            filename=self.filename,
            checksum=self.checksum,
            status=UploadBatchStatus(self.status),
            total_records=self.total_records,
            success_count=self.success_count,
            skip_count=self.skip_count,
            error_count=self.error_count,
            warning_count=self.warning_count,
            created_at=self.created_at,
            completed_at=self.completed_at,
        )

    @classmethod
    def from_dto(cls, dto: UploadBatch) -> UploadBatchModel:
        return cls(
            id=dto.batch_id,
            filename=dto.filename,
            checksum=dto.checksum,
            status=dto.status.value,
            total_records=dto.total_records,
            success_count=dto.success_count,
            skip_count=dto.skip_count,
            error_count=dto.error_count,
            warning_count=dto.warning_count,
            completed_at=dto.completed_at,
        )
