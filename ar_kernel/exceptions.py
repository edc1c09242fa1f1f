"""
Typed exception hierarchy for the AR metrics kernel.

Every exception carries a class-level ``code`` (machine-readable, API-safe)
and keeps its context as attributes rather than only in the message, so the
HTTP layer and the log formatter can surface structured data.

    ArMetricsError (base)
    |
    +-- IngestionError
    |   +-- StructuralCsvError
    |   +-- UploadTooLargeError
    |
    +-- QueryError
    |   +-- InvalidQueryParameterError
    |   +-- WeekNotFoundError
    |
    +-- ConfigurationError

Category        | Code                     | When Raised
----------------|--------------------------|-----------------------------------------
Ingestion       | STRUCTURAL_CSV_ERROR     | Bad column count, bad week, duplicate week
                | UPLOAD_TOO_LARGE         | Upload exceeds the configured byte limit
----------------|--------------------------|-----------------------------------------
Query           | INVALID_QUERY_PARAMETER  | months outside the configured bounds
                | WEEK_NOT_FOUND           | Explicit reference week has no record
----------------|--------------------------|-----------------------------------------
Configuration   | CONFIGURATION_ERROR      | YAML config missing keys or out of range

Soft field defects are never raised; they travel as ``ValidationError``
DTOs (code FIELD_NORMALIZATION_WARNING). An empty store is likewise not an
exception: queries return the ``EmptyDatasetError`` DTO from
``ar_kernel.domain.dtos``.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from ar_kernel.domain.dtos import ValidationError


class ArMetricsError(Exception):
    """
    Base exception for all AR metrics errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "ARMETRICS_ERROR"


# Ingestion


class IngestionError(ArMetricsError):
    """Base exception for upload and parsing errors."""

    code: str = "INGESTION_ERROR"


class StructuralCsvError(IngestionError):
    """The CSV has row-level or file-level structural defects.

    The whole batch is rejected; ``errors`` holds every structural defect
    found so they can be surfaced verbatim.
    """

    code: str = "STRUCTURAL_CSV_ERROR"

    def __init__(self, errors: Sequence[ValidationError]):
        self.errors = tuple(errors)
        first = self.errors[0].message if self.errors else "unknown defect"
        super().__init__(
            f"CSV rejected with {len(self.errors)} structural error(s): {first}"
        )


class UploadTooLargeError(IngestionError):
    """Upload exceeds the configured size limit."""

    code: str = "UPLOAD_TOO_LARGE"

    def __init__(self, size_bytes: int, max_bytes: int):
        self.size_bytes = size_bytes
        self.max_bytes = max_bytes
        super().__init__(
            f"Upload is {size_bytes} bytes; the limit is {max_bytes} bytes"
        )


# Query


class QueryError(ArMetricsError):
    """Base exception for metrics and history query errors."""

    code: str = "QUERY_ERROR"


class InvalidQueryParameterError(QueryError):
    """A query parameter is outside its allowed range."""

    code: str = "INVALID_QUERY_PARAMETER"

    def __init__(self, parameter: str, value: object, reason: str):
        self.parameter = parameter
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {parameter}={value!r}: {reason}")


class WeekNotFoundError(QueryError):
    """The requested reference week has no stored record."""

    code: str = "WEEK_NOT_FOUND"

    def __init__(self, week_start: date):
        self.week_start = week_start
        super().__init__(f"No weekly record for week starting {week_start.isoformat()}")


# Configuration


class ConfigurationError(ArMetricsError):
    """Configuration file is missing keys or holds invalid values."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, key: str, message: str):
        self.key = key
        super().__init__(f"Invalid configuration for {key!r}: {message}")
