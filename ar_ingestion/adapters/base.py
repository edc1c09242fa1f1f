"""
Source adapter protocol and probe DTO.

Contract:
    SourceAdapter.decode() turns uploaded bytes into text.
    SourceAdapter.read_rows() yields one SourceRow per physical CSV record.
    SourceAdapter.probe() returns a quick snapshot: row count, columns, sample rows.

Architecture: ar_ingestion/adapters. Text handling only, no DB or kernel imports.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Protocol, runtime_checkable


@dataclass(frozen=True)
class SourceRow:
    """One CSV record with the 1-based line it ended on."""

    line: int
    cells: tuple[str, ...]

    @property
    def is_blank(self) -> bool:
        return all(not c.strip() for c in self.cells)


@runtime_checkable
class SourceAdapter(Protocol):
    """Protocol for reading uploaded CSV content into rows."""

    def decode(self, data: bytes) -> str:
        """Decode uploaded bytes to text. Raises UnicodeDecodeError."""
        ...

    def read_rows(self, text: str) -> Iterator[SourceRow]:
        """Yield one row per CSV record, header included."""
        ...

    def probe(self, text: str) -> "SourceProbe":
        """Quick probe: row count, detected columns, sample rows."""
        ...


@dataclass(frozen=True)
class SourceProbe:
    """Result of probing a source (data row count, header, first N rows)."""

    row_count: int
    columns: tuple[str, ...]
    sample_rows: tuple[tuple[str, ...], ...]  # First 5 data rows
    encoding: str | None = None
    detected_delimiter: str | None = None
