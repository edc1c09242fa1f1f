"""ORM models. Importing this package registers every table on Base.metadata."""

from ar_kernel.models.upload_batch import UploadBatchModel
from ar_kernel.models.weekly_record import WeeklyRecordModel

__all__ = ["UploadBatchModel", "WeeklyRecordModel"]
