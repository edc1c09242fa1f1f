"""
JSON-ready projections of engine and ingestion results.

Keys are camelCase, dates are ISO ``YYYY-MM-DD`` and timestamps ISO 8601
UTC.  Everything returned here is plain dicts, lists, strings, numbers and
None, so it can go straight to ``json.dumps`` or a FastAPI response.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any

from ar_engines.history import HistorySeries
from ar_engines.insights import Insights
from ar_engines.metrics import MetricSnapshot, MetricsReport
from ar_ingestion.domain.types import UploadOutcome
from ar_kernel.domain.dtos import EmptyDatasetError, StoreStatus, WeeklyRecord
from ar_kernel.domain.weekly_fields import WEEKLY_FIELDS


def iso_date(value: date | None) -> str | None:
    return value.isoformat() if value is not None else None


def iso_timestamp(value: datetime | None) -> str | None:
    """ISO 8601 in UTC.  Naive values (SQLite drops tzinfo) are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def serialize_empty(result: EmptyDatasetError) -> dict[str, Any]:
    return {"error": result.code, "message": result.message}


def serialize_metric(snapshot: MetricSnapshot) -> dict[str, Any]:
    return {
        "current": snapshot.current,
        "weekOverWeek": {
            "absolute": snapshot.week_over_week.absolute,
            "percentage": snapshot.week_over_week.percentage,
        },
        "trailingAverages": dict(snapshot.trailing_averages),
    }


def serialize_insights(insights: Insights) -> dict[str, Any]:
    return {
        "trends": [
            {
                "metric": t.metric,
                "direction": t.direction.value,
                "percentage": t.percentage,
                "threshold": t.threshold,
                "message": t.message,
            }
            for t in insights.trends
        ],
        "agingHealthScore": insights.aging_health_score,
        "dsoStatus": insights.dso_status.value if insights.dso_status else None,
        "dsoVsBenchmark": insights.dso_vs_benchmark,
        "efficiencyScore": insights.efficiency_score,
        "efficiencyRating": insights.efficiency_rating.value,
        "agingDistribution": [
            {
                "bucket": share.key,
                "label": share.label,
                "amount": share.amount,
                "percentage": share.percentage,
            }
            for share in insights.aging_distribution
        ],
    }


def serialize_report(report: MetricsReport, insights: Insights | None = None) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "currentWeek": iso_date(report.current_week),
        "metrics": {key: serialize_metric(m) for key, m in report.metrics.items()},
        "dataPoints": report.data_points,
    }
    if insights is not None:
        payload["insights"] = serialize_insights(insights)
    return payload


def serialize_record(record: WeeklyRecord) -> dict[str, Any]:
    row: dict[str, Any] = {"week": iso_date(record.week_start)}
    for wf in WEEKLY_FIELDS:
        row[wf.key] = record.value(wf.name)
    return row


def serialize_history(series: HistorySeries) -> dict[str, Any]:
    return {"data": [serialize_record(r) for r in series.points]}


def serialize_status(status: StoreStatus) -> dict[str, Any]:
    return {
        "lastUploadTimestamp": iso_timestamp(status.last_upload_at),
        "latestDataWeek": iso_date(status.latest_week),
        "totalRecords": status.total_records,
        "status": "empty" if status.is_empty else "ready",
    }


def serialize_upload(outcome: UploadOutcome) -> dict[str, Any]:
    if outcome.success:
        message = (
            f"Successfully processed {outcome.success_count} weekly records "
            f"({outcome.inserted} new, {outcome.replaced} updated)"
        )
    else:
        message = (
            f"Upload rejected with {len(outcome.errors)} error(s); "
            "no records were saved"
        )
    return {
        "success": outcome.success,
        "message": message,
        "details": {
            "filename": outcome.filename,
            "totalRecords": outcome.total_records,
            "successCount": outcome.success_count,
            "skipCount": outcome.skip_count,
        },
        "errors": [e.render() for e in outcome.errors],
        "warnings": [w.render() for w in outcome.warnings],
    }
