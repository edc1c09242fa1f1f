"""
DashboardService -- the four contract operations of the AR dashboard.

Responsibility:
    Wires the weekly record store, the import service and the pure engines
    together, and returns JSON-ready dicts.  The HTTP layer and the CLIs are
    thin shells over this class.

Architecture position:
    Services -- may import ar_kernel, ar_config, ar_ingestion, ar_engines.

Invariants enforced:
    - Each query computes from one store snapshot, read in one statement.
    - Engines are always called with an explicit reference week or a
      snapshot that determines it; no clock is consulted for metrics.

Failure modes:
    - Queries against an empty store return ``EmptyDatasetError``.
    - ``WeekNotFoundError`` / ``InvalidQueryParameterError`` propagate to
      the caller.
    - Upload failures never raise; they are reported in the response.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from ar_config.schema import ArMetricsConfig
from ar_engines.history import build_history
from ar_engines.insights import derive_insights
from ar_engines.metrics import compute_metrics
from ar_ingestion.services.import_service import ImportService
from ar_kernel.db.engine import create_tables, get_session_factory, init_engine_from_url
from ar_kernel.domain.clock import Clock, SystemClock
from ar_kernel.domain.dtos import EmptyDatasetError
from ar_kernel.logging_config import LogContext, configure_logging, get_logger
from ar_kernel.services.weekly_record_store import WeeklyRecordStore
from ar_services.serializers import (
    serialize_history,
    serialize_report,
    serialize_status,
    serialize_upload,
)

logger = get_logger("services.dashboard")


class DashboardService:
    """Upload, status, current-metrics and historical queries."""

    def __init__(
        self,
        store: WeeklyRecordStore,
        config: ArMetricsConfig | None = None,
        clock: Clock | None = None,
    ):
        self._store = store
        self._config = config or ArMetricsConfig()
        self._clock = clock or SystemClock()
        self._importer = ImportService(
            store,
            clock=self._clock,
            max_bytes=self._config.upload.max_bytes,
            sentinels=self._config.upload.sentinels,
        )

    @classmethod
    def from_config(cls, config: ArMetricsConfig, clock: Clock | None = None) -> DashboardService:
        """Initialize logging and the database from config and build the service."""
        configure_logging(level=config.log_level)
        init_engine_from_url(config.database_url)
        create_tables()
        return cls(WeeklyRecordStore(get_session_factory()), config=config, clock=clock)

    @property
    def config(self) -> ArMetricsConfig:
        return self._config

    @property
    def store(self) -> WeeklyRecordStore:
        return self._store

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def upload_csv(self, data: bytes, filename: str) -> dict[str, Any]:
        """Ingest one CSV upload; ``success`` is False on any structural error."""
        outcome = self._importer.upload(data, filename)
        return serialize_upload(outcome)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def status(self) -> dict[str, Any]:
        return serialize_status(self._store.status())

    def current_metrics(self, week: date | None = None) -> dict[str, Any] | EmptyDatasetError:
        """
        Metrics for ``week`` (default: latest stored week), with insights.

        Raises:
            WeekNotFoundError: ``week`` is given but not stored.
        """
        # Unfiltered, so an unknown week is told apart from an empty store
        report = compute_metrics(
            snapshot=self._store.snapshot(),
            as_of=week,
            weeks_per_month=self._config.weeks_per_month,
            windows=self._config.trailing_windows.as_dict(),
        )
        if isinstance(report, EmptyDatasetError):
            logger.info("metrics_empty_store")
            return report

        with LogContext.bind(as_of_week=report.current_week.isoformat()):
            insights = derive_insights(report=report, thresholds=self._config.insights)
            logger.info("metrics_computed", extra={"data_points": report.data_points})
        return serialize_report(report, insights)

    def historical(self, months: int | None = None) -> dict[str, Any] | EmptyDatasetError:
        """
        Raw weekly series for the trailing ``months`` months.

        Raises:
            InvalidQueryParameterError: ``months`` is out of bounds.
        """
        bounds = self._config.history
        months = bounds.default_months if months is None else months
        series = build_history(
            snapshot=self._store.snapshot(),
            months=months,
            weeks_per_month=self._config.weeks_per_month,
            min_months=bounds.min_months,
            max_months=bounds.max_months,
        )
        if isinstance(series, EmptyDatasetError):
            logger.info("history_empty_store")
            return series

        logger.info(
            "history_computed",
            extra={"months": months, "points": len(series), "start_week": series.start.isoformat()},
        )
        return serialize_history(series)
