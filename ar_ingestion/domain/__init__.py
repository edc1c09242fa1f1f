"""
ar_ingestion.domain -- Pure parsing, normalization and result types.

ZERO I/O. Imports only from ar_kernel.
"""

from ar_ingestion.domain.normalizers import (
    DEFAULT_SENTINELS,
    NormalizationIssue,
    NormalizedCell,
    normalize_cell,
    parse_week,
)
from ar_ingestion.domain.parser import parse_row, parse_weekly_csv
from ar_ingestion.domain.types import ParseResult, UploadOutcome

__all__ = [
    "DEFAULT_SENTINELS",
    "NormalizationIssue",
    "NormalizedCell",
    "ParseResult",
    "UploadOutcome",
    "normalize_cell",
    "parse_row",
    "parse_week",
    "parse_weekly_csv",
]
