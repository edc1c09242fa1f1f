"""
Import service: bytes -> parse -> validate -> store.

Orchestrates the CSV adapter, the parser/validator and the weekly record
store.  An upload either commits every row (status COMPLETED) or commits
nothing but its own bookkeeping row (status REJECTED).

Uses structured logging (LogContext bound to upload_id and filename,
get_logger("ingestion.*")).
"""

from __future__ import annotations

import hashlib
from uuid import UUID, uuid4

from ar_ingestion.adapters.base import SourceAdapter
from ar_ingestion.adapters.csv_adapter import CsvSourceAdapter
from ar_ingestion.domain.normalizers import DEFAULT_SENTINELS
from ar_ingestion.domain.parser import parse_weekly_csv
from ar_ingestion.domain.types import INVALID_ENCODING, ParseResult, UploadOutcome
from ar_kernel.domain.clock import Clock, SystemClock
from ar_kernel.domain.dtos import UploadBatch, UploadBatchStatus, ValidationError
from ar_kernel.exceptions import IngestionError, StructuralCsvError, UploadTooLargeError
from ar_kernel.logging_config import LogContext, get_logger
from ar_kernel.services.weekly_record_store import WeeklyRecordStore

logger = get_logger("ingestion.import_service")

DEFAULT_MAX_BYTES = 5 * 1024 * 1024


def preview_upload(
    data: bytes,
    max_bytes: int = DEFAULT_MAX_BYTES,
    sentinels: frozenset[str] = DEFAULT_SENTINELS,
    adapter: SourceAdapter | None = None,
) -> ParseResult:
    """
    Size-check, decode and parse an upload.

    Raises:
        UploadTooLargeError: data exceeds ``max_bytes``.
        StructuralCsvError: data is not valid UTF-8.
    """
    adapter = adapter or CsvSourceAdapter()
    if len(data) > max_bytes:
        raise UploadTooLargeError(len(data), max_bytes)
    try:
        text = adapter.decode(data)
    except UnicodeDecodeError as exc:
        raise StructuralCsvError(
            [
                ValidationError(
                    code=INVALID_ENCODING,
                    message=f"File is not valid UTF-8 text (byte {exc.start})",
                )
            ]
        ) from exc
    return parse_weekly_csv(text, sentinels, adapter)


class ImportService:
    """Runs one upload at a time through parse, validation and the store."""

    def __init__(
        self,
        store: WeeklyRecordStore,
        clock: Clock | None = None,
        adapter: SourceAdapter | None = None,
        max_bytes: int = DEFAULT_MAX_BYTES,
        sentinels: frozenset[str] = DEFAULT_SENTINELS,
    ):
        self._store = store
        self._clock = clock or SystemClock()
        self._adapter = adapter or CsvSourceAdapter()
        self._max_bytes = max_bytes
        self._sentinels = sentinels

    def preview(self, data: bytes) -> ParseResult:
        """Parse and validate without touching the store."""
        return preview_upload(data, self._max_bytes, self._sentinels, self._adapter)

    def upload(self, data: bytes, filename: str) -> UploadOutcome:
        """
        Ingest one CSV upload.

        Postconditions:
            - COMPLETED: every parsed record is in the store (new weeks
              inserted, existing weeks replaced in full).
            - REJECTED: the store is unchanged; ``errors`` lists every
              structural defect.
        """
        batch_id = uuid4()
        checksum = hashlib.sha256(data).hexdigest()

        with LogContext.bind(upload_id=str(batch_id), filename=filename):
            logger.info("upload_started", extra={"size_bytes": len(data), "checksum": checksum})

            result: ParseResult | None = None
            try:
                result = self.preview(data)
                result.raise_for_errors()
            except IngestionError as exc:
                return self._reject(batch_id, filename, checksum, exc, result)

            batch = UploadBatch(
                batch_id=batch_id,
                filename=filename,
                checksum=checksum,
                status=UploadBatchStatus.COMPLETED,
                total_records=result.total_rows,
                success_count=result.success_count,
                skip_count=result.skip_count,
                error_count=0,
                warning_count=len(result.warnings),
                completed_at=self._clock.now_utc(),
            )
            applied = self._store.apply_batch(result.records, batch)

            logger.info(
                "upload_completed",
                extra={
                    "total_records": result.total_rows,
                    "inserted": applied.inserted,
                    "replaced": applied.replaced,
                    "warning_count": len(result.warnings),
                },
            )
            return UploadOutcome(
                batch_id=batch_id,
                filename=filename,
                status=UploadBatchStatus.COMPLETED,
                total_records=result.total_rows,
                success_count=result.success_count,
                skip_count=result.skip_count,
                inserted=applied.inserted,
                replaced=applied.replaced,
                warnings=result.warnings,
            )

    def _reject(
        self,
        batch_id: UUID,
        filename: str,
        checksum: str,
        exc: IngestionError,
        result: ParseResult | None,
    ) -> UploadOutcome:
        if isinstance(exc, StructuralCsvError):
            errors = exc.errors
        else:
            errors = (ValidationError(code=exc.code, message=str(exc)),)
        warnings = result.warnings if result is not None else ()
        total = result.total_rows if result is not None else 0
        success = result.success_count if result is not None else 0
        skipped = result.skip_count if result is not None else 0

        self._store.record_rejected(
            UploadBatch(
                batch_id=batch_id,
                filename=filename,
                checksum=checksum,
                status=UploadBatchStatus.REJECTED,
                total_records=total,
                success_count=success,
                skip_count=skipped,
                error_count=len(errors),
                warning_count=len(warnings),
                completed_at=self._clock.now_utc(),
            )
        )
        logger.warning(
            "upload_rejected",
            extra={
                "error_code": exc.code,
                "error_count": len(errors),
                "first_error": errors[0].render() if errors else None,
            },
        )
        return UploadOutcome(
            batch_id=batch_id,
            filename=filename,
            status=UploadBatchStatus.REJECTED,
            total_records=total,
            success_count=success,
            skip_count=skipped,
            errors=tuple(errors),
            warnings=tuple(warnings),
        )
