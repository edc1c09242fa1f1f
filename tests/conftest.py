"""
Pytest fixtures for the AR metrics test suite.

Provides:
- A fresh SQLite file database per test (WAL mode, real multi-connection
  behaviour for the concurrency tests)
- The weekly record store, import service and dashboard service bound to it
- CSV builders for the weekly summary format
- Structured log capture

Environment Variables:
- AR_TEST_DATABASE_URL: run the suite against another database (e.g.
  PostgreSQL).  Tables are dropped and recreated around each test.
"""

import json
import logging
import os
from datetime import date, datetime, timezone
from io import StringIO

import pytest

from ar_config.schema import ArMetricsConfig
from ar_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
)
from ar_kernel.domain.clock import DeterministicClock
from ar_kernel.domain.dtos import WeeklyRecord
from ar_kernel.domain.weekly_fields import CSV_HEADERS, WEEKLY_FIELDS
from ar_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from ar_kernel.services.weekly_record_store import WeeklyRecordStore
from ar_ingestion.services.import_service import ImportService
from ar_services.dashboard_service import DashboardService


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG, stream=StringIO())
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture ar_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, import_service):
            import_service.upload(data, "weekly.csv")
            logs = captured_logs()
            assert any(r["message"] == "upload_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("ar_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def database_url(tmp_path) -> str:
    return os.environ.get("AR_TEST_DATABASE_URL") or f"sqlite:///{tmp_path / 'ar_metrics_test.db'}"


@pytest.fixture
def engine(database_url):
    eng = init_engine_from_url(database_url)
    drop_tables()
    create_tables()
    yield eng
    drop_tables()
    reset_engine()


@pytest.fixture
def session_factory(engine):
    return get_session_factory()


@pytest.fixture
def session(session_factory):
    s = session_factory()
    yield s
    s.rollback()
    s.close()


@pytest.fixture
def store(session_factory) -> WeeklyRecordStore:
    return WeeklyRecordStore(session_factory)


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    return DeterministicClock(datetime(2024, 3, 4, 9, 30, tzinfo=timezone.utc))


@pytest.fixture
def import_service(store, deterministic_clock) -> ImportService:
    return ImportService(store, clock=deterministic_clock)


@pytest.fixture
def config(database_url) -> ArMetricsConfig:
    return ArMetricsConfig(database_url=database_url)


@pytest.fixture
def dashboard(store, config, deterministic_clock) -> DashboardService:
    return DashboardService(store, config=config, clock=deterministic_clock)


# =============================================================================
# CSV and record builders
# =============================================================================


def format_week(week: date) -> str:
    """M/D/YYYY, the way spreadsheet exports write it."""
    return f"{week.month}/{week.day}/{week.year}"


def make_row(week: date, **overrides: str) -> list[str]:
    """
    One CSV data row with plausible values; override cells by field name.

    ``make_row(date(2024, 1, 1), dso="#N/A")``
    """
    defaults = {
        "overdue_gmv": "250000.50",
        "collected_gmv": "1200000",
        "collected_invoices": "340",
        "dso": "38.5",
        "weighted_avg_days_overdue": "12.25",
        "weighted_avg_days_late": "6.5",
        "due_0_10": "500000",
        "due_11_30": "250000",
        "due_31_60": "150000",
        "due_61_90": "75000",
        "due_90_plus": "25000",
        "credit_sales_percent": "82.5",
        "cei": "91.2",
        "ar_turnover_ratio": "9.6",
    }
    defaults.update(overrides)
    return [format_week(week)] + [defaults[f.name] for f in WEEKLY_FIELDS]


def make_csv(rows: list[list[str]], header: tuple[str, ...] = CSV_HEADERS) -> bytes:
    """Render rows as CSV bytes with the standard header."""
    import csv

    buf = StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return buf.getvalue().encode("utf-8")


def make_record(week: date, **values) -> WeeklyRecord:
    """A WeeklyRecord with every field null except ``values``."""
    return WeeklyRecord(week_start=week, **values)
