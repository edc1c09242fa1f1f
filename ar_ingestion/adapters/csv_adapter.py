"""
CSV source adapter.

Uses csv.reader over in-memory text (uploads are small, bounded by the
configured byte limit).  Decodes UTF-8 via utf-8-sig so a spreadsheet BOM is
dropped.  Streams rows; does not build a list of the whole file.
"""

from __future__ import annotations

import csv
import io
from typing import Iterator

from ar_ingestion.adapters.base import SourceProbe, SourceRow


class CsvSourceAdapter:
    """Read CSV text as one SourceRow per record."""

    def __init__(self, delimiter: str = ",", encoding: str = "utf-8"):
        self.delimiter = delimiter
        self.encoding = encoding

    def _codec(self) -> str:
        if self.encoding.lower() == "utf-8":
            return "utf-8-sig"  # Strip BOM if present
        return self.encoding

    def decode(self, data: bytes) -> str:
        return data.decode(self._codec())

    def read_rows(self, text: str) -> Iterator[SourceRow]:
        # newline="" semantics: let csv handle embedded newlines in quoted cells
        reader = csv.reader(io.StringIO(text, newline=""), delimiter=self.delimiter)
        for row in reader:
            yield SourceRow(line=reader.line_num, cells=tuple(row))

    def probe(self, text: str) -> SourceProbe:
        sample_size = 5
        columns: tuple[str, ...] = ()
        sample: list[tuple[str, ...]] = []
        count = 0
        for row in self.read_rows(text):
            if row.is_blank:
                continue
            if not columns:
                columns = row.cells
                continue
            count += 1
            if len(sample) < sample_size:
                sample.append(row.cells)
        return SourceProbe(
            row_count=count,
            columns=columns,
            sample_rows=tuple(sample),
            encoding=self._codec(),
            detected_delimiter=self.delimiter,
        )
