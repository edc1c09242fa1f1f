"""Source adapters for AR uploads (text handling only, no DB)."""

from ar_ingestion.adapters.base import SourceAdapter, SourceProbe, SourceRow
from ar_ingestion.adapters.csv_adapter import CsvSourceAdapter

__all__ = [
    "SourceAdapter",
    "SourceProbe",
    "SourceRow",
    "CsvSourceAdapter",
]
