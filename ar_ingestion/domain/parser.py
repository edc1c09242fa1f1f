"""
Parser/validator for the weekly AR summary CSV.

Turns raw CSV text into typed WeeklyRecords.  Two classes of defect:

    Structural (row dropped, error reported, skip_count += 1; any one of
    these rejects the whole batch):
        - wrong column count on a data row
        - unparseable week date
        - a second row for a week already seen in this file
    File-level structural (single error, no records):
        - empty input, a missing header row, or a header with no data rows
        - header with the wrong column count
        - csv module cannot tokenize the text

    Soft (field becomes None, warning reported, row kept):
        - blank cell, spreadsheet sentinel, unparseable or non-finite
          number, fractional invoice count

Columns are positional.  A header whose names differ from the expected
titles only yields a warning.  Fully blank lines are ignored.

Architecture: ar_ingestion/domain. ZERO I/O.
"""

from __future__ import annotations

import csv
import re
from datetime import date

from ar_ingestion.adapters.base import SourceAdapter, SourceRow
from ar_ingestion.adapters.csv_adapter import CsvSourceAdapter
from ar_ingestion.domain.normalizers import (
    DEFAULT_SENTINELS,
    describe_issue,
    normalize_cell,
    parse_week,
)
from ar_ingestion.domain.types import (
    COLUMN_COUNT_MISMATCH,
    DUPLICATE_WEEK,
    EMPTY_FILE,
    FIELD_NORMALIZATION_WARNING,
    HEADER_COLUMN_COUNT,
    HEADER_NAME_MISMATCH,
    INVALID_WEEK,
    MALFORMED_CSV,
    MISSING_HEADER,
    NO_DATA_ROWS,
    ParseResult,
)
from ar_kernel.domain.dtos import ValidationError, WeeklyRecord
from ar_kernel.domain.weekly_fields import CSV_HEADERS, WEEK_HEADER, WEEKLY_FIELDS

EXPECTED_COLUMNS = len(CSV_HEADERS)

_WS_RE = re.compile(r"\s+")


def _header_key(name: str) -> str:
    return _WS_RE.sub(" ", name.strip()).casefold()


def check_header(row: SourceRow) -> tuple[list[ValidationError], list[ValidationError]]:
    """Return (errors, warnings) for the header row."""
    if row.cells and parse_week(row.cells[0]) is not None:
        return (
            [
                ValidationError(
                    code=MISSING_HEADER,
                    message="First row holds data, not column titles; a header row is required",
                    details={"line": row.line},
                )
            ],
            [],
        )
    if len(row.cells) != EXPECTED_COLUMNS:
        return (
            [
                ValidationError(
                    code=HEADER_COLUMN_COUNT,
                    message=(
                        f"Header has {len(row.cells)} columns; expected {EXPECTED_COLUMNS}: "
                        + ", ".join(CSV_HEADERS)
                    ),
                    details={"line": row.line, "found": len(row.cells)},
                )
            ],
            [],
        )
    warnings = [
        ValidationError(
            code=HEADER_NAME_MISMATCH,
            message=f"Column {i + 1} is titled {found!r}; expected {expected!r}",
            field=expected,
            details={"line": row.line, "column": i + 1},
        )
        for i, (found, expected) in enumerate(zip(row.cells, CSV_HEADERS))
        if _header_key(found) != _header_key(expected)
    ]
    return [], warnings


def parse_row(
    row: SourceRow,
    sentinels: frozenset[str] = DEFAULT_SENTINELS,
) -> tuple[WeeklyRecord | None, ValidationError | None, list[ValidationError]]:
    """
    Parse one data row.

    Returns (record, structural_error, warnings).  Exactly one of record and
    structural_error is set.  Duplicate weeks are a batch concern and are
    checked by the caller.
    """
    if len(row.cells) != EXPECTED_COLUMNS:
        return (
            None,
            ValidationError(
                code=COLUMN_COUNT_MISMATCH,
                message=f"Expected {EXPECTED_COLUMNS} columns, found {len(row.cells)}",
                details={"line": row.line, "found": len(row.cells)},
            ),
            [],
        )

    week_cell = row.cells[0]
    week_start = parse_week(week_cell)
    if week_start is None:
        return (
            None,
            ValidationError(
                code=INVALID_WEEK,
                message=f"Invalid {WEEK_HEADER} value {week_cell.strip()!r}; expected M/D/YYYY",
                field=WEEK_HEADER,
                details={"line": row.line, "value": week_cell},
            ),
            [],
        )

    values: dict[str, float | int | None] = {}
    warnings: list[ValidationError] = []
    for wf, cell in zip(WEEKLY_FIELDS, row.cells[1:]):
        normalized = normalize_cell(cell, wf.kind, sentinels)
        values[wf.name] = normalized.value
        if normalized.issue is not None:
            warnings.append(
                ValidationError(
                    code=FIELD_NORMALIZATION_WARNING,
                    message=f"{wf.header} {describe_issue(normalized.issue)} ({cell.strip()!r}); stored as null",
                    field=wf.key,
                    details={
                        "line": row.line,
                        "week": week_start.isoformat(),
                        "reason": normalized.issue.value,
                        "value": cell,
                    },
                )
            )

    return WeeklyRecord(week_start=week_start, **values), None, warnings


def parse_weekly_csv(
    text: str,
    sentinels: frozenset[str] = DEFAULT_SENTINELS,
    adapter: SourceAdapter | None = None,
) -> ParseResult:
    """Parse an upload's CSV text into records, warnings and structural errors."""
    adapter = adapter or CsvSourceAdapter()
    records: list[WeeklyRecord] = []
    warnings: list[ValidationError] = []
    errors: list[ValidationError] = []
    first_line_for_week: dict[date, int] = {}
    header_seen = False
    total = skipped = 0

    try:
        for row in adapter.read_rows(text):
            if row.is_blank:
                continue

            if not header_seen:
                header_seen = True
                header_errors, header_warnings = check_header(row)
                warnings.extend(header_warnings)
                if header_errors:
                    errors.extend(header_errors)
                    # Positional mapping is meaningless; count the rest as skipped
                    remaining = sum(1 for r in adapter.read_rows(text) if not r.is_blank)
                    if header_errors[0].code != MISSING_HEADER:
                        remaining -= 1
                    return ParseResult(
                        total_rows=remaining,
                        skip_count=remaining,
                        warnings=tuple(warnings),
                        errors=tuple(errors),
                    )
                continue

            total += 1
            record, error, row_warnings = parse_row(row, sentinels)
            if error is not None:
                errors.append(error)
                skipped += 1
                continue

            first_line = first_line_for_week.get(record.week_start)
            if first_line is not None:
                errors.append(
                    ValidationError(
                        code=DUPLICATE_WEEK,
                        message=(
                            f"Duplicate week {row.cells[0].strip()} "
                            f"(already defined on row {first_line})"
                        ),
                        field=WEEK_HEADER,
                        details={
                            "line": row.line,
                            "week": record.week_start.isoformat(),
                            "first_line": first_line,
                        },
                    )
                )
                skipped += 1
                continue

            first_line_for_week[record.week_start] = row.line
            warnings.extend(row_warnings)
            records.append(record)
    except csv.Error as exc:
        errors.append(
            ValidationError(
                code=MALFORMED_CSV,
                message=f"CSV could not be read: {exc}",
            )
        )
        return ParseResult(
            total_rows=total,
            skip_count=total,
            warnings=tuple(warnings),
            errors=tuple(errors),
        )

    if not header_seen:
        errors.append(
            ValidationError(
                code=EMPTY_FILE,
                message="File is empty; expected a header row and at least one week",
            )
        )
    elif total == 0:
        errors.append(
            ValidationError(
                code=NO_DATA_ROWS,
                message="File has a header row but no weekly data rows",
            )
        )

    return ParseResult(
        records=tuple(records),
        total_rows=total,
        success_count=len(records),
        skip_count=skipped,
        warnings=tuple(warnings),
        errors=tuple(errors),
    )
