"""Pure domain types for the AR metrics kernel (zero I/O)."""

from ar_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from ar_kernel.domain.dtos import (
    EmptyDatasetError,
    StoreStatus,
    UploadBatch,
    UploadBatchStatus,
    ValidationError,
    WeeklyRecord,
)
from ar_kernel.domain.snapshot import StoreSnapshot
from ar_kernel.domain.weekly_fields import (
    AGING_BUCKETS,
    CSV_HEADERS,
    TRACKED_METRICS,
    WEEKLY_FIELDS,
    FieldKind,
    WeeklyField,
)

__all__ = [
    "AGING_BUCKETS",
    "CSV_HEADERS",
    "Clock",
    "DeterministicClock",
    "EmptyDatasetError",
    "FieldKind",
    "StoreSnapshot",
    "StoreStatus",
    "SystemClock",
    "TRACKED_METRICS",
    "UploadBatch",
    "UploadBatchStatus",
    "ValidationError",
    "WEEKLY_FIELDS",
    "WeeklyField",
    "WeeklyRecord",
]
