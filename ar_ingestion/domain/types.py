"""
ar_ingestion.domain.types -- Pure frozen dataclasses for the upload pipeline.

ZERO I/O. Imports only from ar_kernel.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from ar_kernel.domain.dtos import UploadBatchStatus, ValidationError, WeeklyRecord
from ar_kernel.exceptions import StructuralCsvError

# Structural error codes (row or file level; any one rejects the batch)
COLUMN_COUNT_MISMATCH = "COLUMN_COUNT_MISMATCH"
INVALID_WEEK = "INVALID_WEEK"
DUPLICATE_WEEK = "DUPLICATE_WEEK"
EMPTY_FILE = "EMPTY_FILE"
MISSING_HEADER = "MISSING_HEADER"
NO_DATA_ROWS = "NO_DATA_ROWS"
HEADER_COLUMN_COUNT = "HEADER_COLUMN_COUNT"
INVALID_ENCODING = "INVALID_ENCODING"
MALFORMED_CSV = "MALFORMED_CSV"
UPLOAD_TOO_LARGE = "UPLOAD_TOO_LARGE"

# Soft warning codes (field or header level; never reject the batch)
FIELD_NORMALIZATION_WARNING = "FIELD_NORMALIZATION_WARNING"
HEADER_NAME_MISMATCH = "HEADER_NAME_MISMATCH"


@dataclass(frozen=True)
class ParseResult:
    """
    Outcome of parsing one upload.

    ``total_rows`` counts non-blank data rows; ``success_count`` rows parsed
    into records; ``skip_count`` rows dropped for structural defects.
    File-level defects appear in ``errors`` without a row.
    """

    records: tuple[WeeklyRecord, ...] = ()
    total_rows: int = 0
    success_count: int = 0
    skip_count: int = 0
    warnings: tuple[ValidationError, ...] = ()
    errors: tuple[ValidationError, ...] = ()

    @property
    def ok(self) -> bool:
        """True when no structural error occurred."""
        return not self.errors

    def raise_for_errors(self) -> None:
        """Raise StructuralCsvError if any structural error occurred."""
        if self.errors:
            raise StructuralCsvError(self.errors)


@dataclass(frozen=True)
class UploadOutcome:
    """Result of one upload: parse counts plus what the store did."""

    batch_id: UUID
    filename: str
    status: UploadBatchStatus
    total_records: int
    success_count: int
    skip_count: int
    inserted: int = 0
    replaced: int = 0
    errors: tuple[ValidationError, ...] = ()
    warnings: tuple[ValidationError, ...] = ()

    @property
    def success(self) -> bool:
        return self.status is UploadBatchStatus.COMPLETED
