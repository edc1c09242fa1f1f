"""
Cell normalizers for the weekly AR upload.

Tolerant of spreadsheet formatting noise, strict about what counts as a
number:

    "$1,234,567.89"  -> 1234567.89
    "(1,234.50)"     -> -1234.5      accounting negative
    "87.5%"          -> 87.5         percent stays on a 0-100 scale
    "#N/A", "", "-"  -> None         with a NormalizationIssue

Architecture: ar_ingestion/domain. ZERO I/O.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date
from enum import Enum

from ar_kernel.domain.weekly_fields import FieldKind

DEFAULT_SENTINELS: frozenset[str] = frozenset(
    {"#N/A", "N/A", "#VALUE!", "#DIV/0!", "#REF!", "#NUM!", "#NAME?", "#NULL!", "-"}
)

_WEEK_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_NUMBER_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")
_STRIP_CHARS = str.maketrans("", "", "$€£¥,% \u00a0")

# Counts are stored in signed 64-bit INTEGER columns
COUNT_MIN = -(2**63)
COUNT_MAX = 2**63 - 1


class NormalizationIssue(str, Enum):
    """Why a cell degraded to null."""

    BLANK = "blank"
    SENTINEL = "sentinel"
    UNPARSEABLE = "unparseable"
    NON_FINITE = "non_finite"
    NON_INTEGRAL = "non_integral"
    OUT_OF_RANGE = "out_of_range"


_ISSUE_TEXT = {
    NormalizationIssue.BLANK: "is blank",
    NormalizationIssue.SENTINEL: "holds a spreadsheet error value",
    NormalizationIssue.UNPARSEABLE: "is not a number",
    NormalizationIssue.NON_FINITE: "is not a finite number",
    NormalizationIssue.NON_INTEGRAL: "is not a whole number",
    NormalizationIssue.OUT_OF_RANGE: "is too large for a count",
}


def describe_issue(issue: NormalizationIssue) -> str:
    return _ISSUE_TEXT[issue]


@dataclass(frozen=True)
class NormalizedCell:
    """Parsed cell value, or None with the reason."""

    value: float | int | None
    issue: NormalizationIssue | None = None


def parse_week(cell: str) -> date | None:
    """Parse ``M/D/YYYY`` into a date; None when malformed or not a real day."""
    match = _WEEK_RE.match(cell.strip())
    if match is None:
        return None
    month, day, year = (int(g) for g in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def strip_numeric_noise(cell: str) -> str:
    """Remove currency symbols, separators, percent signs and accounting parens."""
    text = cell.strip()
    negative = len(text) > 2 and text[0] == "(" and text[-1] == ")"
    if negative:
        text = text[1:-1]
    text = text.translate(_STRIP_CHARS)
    return f"-{text}" if negative else text


def normalize_cell(
    cell: str,
    kind: FieldKind,
    sentinels: frozenset[str] = DEFAULT_SENTINELS,
) -> NormalizedCell:
    """Normalize one numeric cell."""
    raw = cell.strip()
    if not raw:
        return NormalizedCell(None, NormalizationIssue.BLANK)
    if raw.upper() in sentinels:
        return NormalizedCell(None, NormalizationIssue.SENTINEL)

    text = strip_numeric_noise(raw)
    if not _NUMBER_RE.match(text):
        return NormalizedCell(None, NormalizationIssue.UNPARSEABLE)

    value = float(text)
    if not math.isfinite(value):
        return NormalizedCell(None, NormalizationIssue.NON_FINITE)

    if kind is FieldKind.COUNT:
        if not value.is_integer():
            return NormalizedCell(None, NormalizationIssue.NON_INTEGRAL)
        count = int(value)
        if not COUNT_MIN <= count <= COUNT_MAX:
            return NormalizedCell(None, NormalizationIssue.OUT_OF_RANGE)
        return NormalizedCell(count)
    return NormalizedCell(value)
