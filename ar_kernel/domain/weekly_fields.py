"""
Catalog of the weekly AR summary columns.

One ``WeeklyField`` per numeric column of the upload schema, in CSV order.
The catalog ties together the three spellings of each field:

    header  -- CSV column title ("Overdue GMV")
    name    -- Python attribute on WeeklyRecord / ORM column ("overdue_gmv")
    key     -- JSON key in API responses ("overdueGmv")

Percent-kind fields (``creditSalesPercent``, ``cei``) are stored on a 0-100
scale everywhere; nothing in the system divides them by 100.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FieldKind(str, Enum):
    """How a column's cells are normalized."""

    AMOUNT = "amount"  # Currency amount, may carry $ and thousands separators
    COUNT = "count"  # Integral count
    DAYS = "days"
    PERCENT = "percent"  # 0-100 scale, may carry %
    RATIO = "ratio"


@dataclass(frozen=True)
class WeeklyField:
    """A single numeric column of the weekly summary row."""

    header: str
    name: str
    key: str
    kind: FieldKind
    tracked: bool = False  # One of the headline metrics


WEEK_HEADER = "Week"

WEEKLY_FIELDS: tuple[WeeklyField, ...] = (
    WeeklyField("Overdue GMV", "overdue_gmv", "overdueGmv", FieldKind.AMOUNT, tracked=True),
    WeeklyField("Collected GMV", "collected_gmv", "collectedGmv", FieldKind.AMOUNT, tracked=True),
    WeeklyField("Collected Invoices", "collected_invoices", "collectedInvoices", FieldKind.COUNT, tracked=True),
    WeeklyField("DSO", "dso", "dso", FieldKind.DAYS, tracked=True),
    WeeklyField(
        "Weighted Avg Days Overdue",
        "weighted_avg_days_overdue",
        "weightedAvgDaysOverdue",
        FieldKind.DAYS,
        tracked=True,
    ),
    WeeklyField(
        "Weighted Avg Days Late",
        "weighted_avg_days_late",
        "weightedAvgDaysLate",
        FieldKind.DAYS,
        tracked=True,
    ),
    WeeklyField("Due: 0-10 Days", "due_0_10", "due0To10", FieldKind.AMOUNT),
    WeeklyField("Due: 11-30 Days", "due_11_30", "due11To30", FieldKind.AMOUNT),
    WeeklyField("Due: 31-60 Days", "due_31_60", "due31To60", FieldKind.AMOUNT),
    WeeklyField("Due: 61-90 Days", "due_61_90", "due61To90", FieldKind.AMOUNT),
    WeeklyField("Due: 90+ Days", "due_90_plus", "due90Plus", FieldKind.AMOUNT),
    WeeklyField("% Credit Sales", "credit_sales_percent", "creditSalesPercent", FieldKind.PERCENT, tracked=True),
    WeeklyField("CEI", "cei", "cei", FieldKind.PERCENT, tracked=True),
    WeeklyField("AR Turnover Ratio", "ar_turnover_ratio", "arTurnoverRatio", FieldKind.RATIO, tracked=True),
)

CSV_HEADERS: tuple[str, ...] = (WEEK_HEADER,) + tuple(f.header for f in WEEKLY_FIELDS)

# Metric order matches the dashboard's headline cards
TRACKED_METRICS: tuple[WeeklyField, ...] = (
    WEEKLY_FIELDS[0],
    WEEKLY_FIELDS[1],
    WEEKLY_FIELDS[2],
    WEEKLY_FIELDS[3],
    WEEKLY_FIELDS[4],
    WEEKLY_FIELDS[5],
    WEEKLY_FIELDS[11],
    WEEKLY_FIELDS[12],
    WEEKLY_FIELDS[13],
)

AGING_BUCKETS: tuple[WeeklyField, ...] = WEEKLY_FIELDS[6:11]

FIELD_NAMES: tuple[str, ...] = tuple(f.name for f in WEEKLY_FIELDS)
