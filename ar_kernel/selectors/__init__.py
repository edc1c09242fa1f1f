"""Read-only selectors over the weekly record store."""

from ar_kernel.selectors.base import BaseSelector
from ar_kernel.selectors.weekly_record_selector import (
    UploadBatchSelector,
    WeeklyRecordSelector,
    load_store_status,
)

__all__ = [
    "BaseSelector",
    "UploadBatchSelector",
    "WeeklyRecordSelector",
    "load_store_status",
]
