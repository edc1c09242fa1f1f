"""
Data Transfer Objects for the AR metrics kernel.

Responsibility:
    Frozen dataclasses that cross layer boundaries: the validated weekly
    record, upload batch bookkeeping, validation messages and the explicit
    empty-dataset result.  Engines and selectors exchange these rather than
    ORM instances.

Architecture position:
    Kernel > Domain -- pure, zero I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any
from uuid import UUID

from ar_kernel.domain.weekly_fields import FIELD_NAMES


@dataclass(frozen=True)
class ValidationError:
    """
    A single validation message.

    Contract:
        Carries a machine-readable code, human-readable message, optional field
        name, and optional details dict.  Used for both structural errors and
        soft field-normalization warnings produced by the CSV parser.

    Non-goals:
        - Does NOT raise exceptions -- it IS the error representation.
    """

    code: str
    message: str
    field: str | None = None
    details: dict[str, Any] | None = None

    @property
    def line(self) -> int | None:
        """1-based source line the message refers to, if any."""
        if self.details:
            return self.details.get("line")
        return None

    def render(self) -> str:
        """Human-readable form used in upload responses."""
        if self.line is not None:
            return f"Row {self.line}: {self.message}"
        return self.message


@dataclass(frozen=True)
class EmptyDatasetError:
    """
    Explicit "no data" result returned by queries against an empty store.

    Returned, not raised: callers branch on ``isinstance`` to tell an empty
    store apart from a populated one whose metrics are legitimately null.
    """

    code: str = "EMPTY_DATASET"
    message: str = "No weekly AR data has been uploaded yet"


@dataclass(frozen=True)
class WeeklyRecord:
    """
    One validated weekly AR summary row, keyed by ``week_start``.

    Every numeric field is optional: absent or unparseable input is None,
    never 0.  Percent fields hold 0-100 values.
    """

    week_start: date
    overdue_gmv: float | None = None
    collected_gmv: float | None = None
    collected_invoices: int | None = None
    dso: float | None = None
    weighted_avg_days_overdue: float | None = None
    weighted_avg_days_late: float | None = None
    due_0_10: float | None = None
    due_11_30: float | None = None
    due_31_60: float | None = None
    due_61_90: float | None = None
    due_90_plus: float | None = None
    credit_sales_percent: float | None = None
    cei: float | None = None
    ar_turnover_ratio: float | None = None

    def value(self, name: str) -> float | int | None:
        """Return a numeric field by attribute name."""
        if name not in FIELD_NAMES:
            raise KeyError(name)
        return getattr(self, name)


class UploadBatchStatus(str, Enum):
    """Upload batch outcome."""

    COMPLETED = "completed"  # Every row applied to the store
    REJECTED = "rejected"  # Structural errors; nothing applied


@dataclass(frozen=True)
class UploadBatch:
    """Immutable snapshot of one upload attempt."""

    batch_id: UUID
    filename: str
    checksum: str  # SHA-256 of the uploaded bytes
    status: UploadBatchStatus
    total_records: int = 0
    success_count: int = 0
    skip_count: int = 0
    error_count: int = 0
    warning_count: int = 0
    created_at: datetime | None = None
    completed_at: datetime | None = None


@dataclass(frozen=True)
class StoreStatus:
    """Summary of the store for the status query."""

    last_upload_at: datetime | None
    latest_week: date | None
    total_records: int

    @property
    def is_empty(self) -> bool:
        return self.total_records == 0
