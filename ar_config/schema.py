"""
Configuration schema (``ar_config.schema``).

Frozen dataclasses describing every tunable of the AR metrics engine.  The
loader builds these from YAML; the rest of the system only ever sees these
types, never raw dicts.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class WindowConfig:
    """Trailing-average windows, in months, keyed by response name."""

    months: tuple[tuple[str, int], ...] = (
        ("threeMonth", 3),
        ("sixMonth", 6),
        ("twelveMonth", 12),
    )

    def as_dict(self) -> dict[str, int]:
        return dict(self.months)


@dataclass(frozen=True)
class HistoryConfig:
    """Bounds for the historical query's ``months`` parameter."""

    min_months: int = 1
    max_months: int = 36
    default_months: int = 12


@dataclass(frozen=True)
class UploadConfig:
    """Upload limits and the spreadsheet sentinels read as null."""

    max_bytes: int = 5 * 1024 * 1024
    sentinels: frozenset[str] = frozenset(
        {"#N/A", "N/A", "#VALUE!", "#DIV/0!", "#REF!", "#NUM!", "#NAME?", "#NULL!", "-"}
    )


@dataclass(frozen=True)
class InsightThresholds:
    """Thresholds for trend indicators and health scores."""

    collected_gmv_improved_pct: float = 5.0
    cei_improved_pct: float = 2.0
    overdue_gmv_worsened_pct: float = 10.0
    dso_worsened_pct: float = 5.0
    overdue_gmv_alert: float = 1_000_000.0
    days_overdue_alert: float = 30.0
    dso_alert: float = 45.0
    dso_benchmark: float = 30.0


@dataclass(frozen=True)
class ArMetricsConfig:
    """The complete, validated configuration."""

    database_url: str = "sqlite:///ar_metrics.db"
    weeks_per_month: float = 4.33
    trailing_windows: WindowConfig = field(default_factory=WindowConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)
    upload: UploadConfig = field(default_factory=UploadConfig)
    insights: InsightThresholds = field(default_factory=InsightThresholds)
    log_level: str = "INFO"
    source: str | None = None  # Path the config was loaded from
