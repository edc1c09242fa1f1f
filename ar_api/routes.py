"""
AR dashboard API routes.

Four endpoints over DashboardService:
    POST /api/upload-csv               ingest a CSV file (multipart ``file``)
    GET  /api/upload-csv               store status
    GET  /api/ar-metrics               current-week metrics and insights
    GET  /api/ar-metrics/historical    raw weekly series for charting
"""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, File, Query, Request, UploadFile
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from ar_kernel.domain.dtos import EmptyDatasetError
from ar_services.dashboard_service import DashboardService
from ar_services.serializers import serialize_empty

router = APIRouter()


def get_service(request: Request) -> DashboardService:
    return request.app.state.dashboard


def _empty_response(result: EmptyDatasetError) -> JSONResponse:
    return JSONResponse(status_code=404, content=serialize_empty(result))


@router.post("/upload-csv")
async def upload_csv(request: Request, file: UploadFile | None = File(None)) -> JSONResponse:
    """
    Upload a weekly AR summary CSV.

    200 when every row was stored, 400 when the batch was rejected.
    """
    if file is None:
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "message": "No file provided; send the CSV as multipart field 'file'",
                "details": None,
                "errors": ["No file provided"],
                "warnings": [],
            },
        )

    data = await file.read()
    service = get_service(request)
    # Store writes block on the writer lock; keep them off the event loop
    payload = await run_in_threadpool(service.upload_csv, data, file.filename or "upload.csv")
    return JSONResponse(status_code=200 if payload["success"] else 400, content=payload)


@router.get("/upload-csv")
def upload_status(request: Request) -> dict:
    """Last upload time, latest stored week and record count."""
    return get_service(request).status()


@router.get("/ar-metrics")
def current_metrics(
    request: Request,
    week: date | None = Query(None, description="Reference week YYYY-MM-DD (default: latest)"),
):
    result = get_service(request).current_metrics(week)
    if isinstance(result, EmptyDatasetError):
        return _empty_response(result)
    return result


@router.get("/ar-metrics/historical")
def historical_metrics(
    request: Request,
    months: int | None = Query(None, description="Months of history (default 12)"),
):
    result = get_service(request).historical(months)
    if isinstance(result, EmptyDatasetError):
        return _empty_response(result)
    return result
