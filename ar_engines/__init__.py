"""
Module: ar_engines
Responsibility:
    Package entrypoint re-exporting the pure calculation engines:
    current metrics, historical series and dashboard insights.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import ar_kernel domain types and ar_config schema.
    MUST NOT import ar_services or ar_api.

Invariants enforced:
    - Engines never read a clock; the reference week is always an explicit
      argument (or derived from the snapshot).
    - No engine output is NaN or Infinity.

Usage:
    from ar_engines import compute_metrics, build_history, derive_insights
"""

from ar_engines.history import HistorySeries, build_history
from ar_engines.insights import (
    AgingBucketShare,
    DsoStatus,
    EfficiencyRating,
    Insights,
    TrendDirection,
    TrendIndicator,
    derive_insights,
)
from ar_engines.metrics import (
    MetricSnapshot,
    MetricsReport,
    WeekOverWeek,
    compute_metrics,
)

__all__ = [
    "AgingBucketShare",
    "DsoStatus",
    "EfficiencyRating",
    "HistorySeries",
    "Insights",
    "MetricSnapshot",
    "MetricsReport",
    "TrendDirection",
    "TrendIndicator",
    "WeekOverWeek",
    "build_history",
    "compute_metrics",
    "derive_insights",
]
