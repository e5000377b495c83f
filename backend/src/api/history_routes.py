"""
History API routes
Metrics, filtered views, chart series and exports over analysis records
supplied in the request body. Nothing is read from or written to storage.
"""

import logging
from functools import lru_cache
from typing import List, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..config.settings import Settings, load_settings
from ..history.errors import HistoryError, InvalidRecordError
from ..history.models import AnalysisRecord
from ..services.history_export_service import ExportPayload
from ..services.history_service import HistoryService
from .models.history_models import (
    AnalysisRecordModel,
    ChartPointModel,
    HistoryViewRequest,
    HistoryViewResponse,
    MetricsResponse,
    ProgressRequest,
    ProgressResponse,
    RecordsRequest,
    SkillComparisonModel,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/history", tags=["History"])

_ERROR_STATUS = {
    "invalid_spec": status.HTTP_400_BAD_REQUEST,
    "unsupported_format": status.HTTP_400_BAD_REQUEST,
    "invalid_record": status.HTTP_422_UNPROCESSABLE_ENTITY,
}


def get_history_service() -> HistoryService:
    return HistoryService()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()


def _raise_history_error(exc: HistoryError) -> NoReturn:
    status_code = _ERROR_STATUS.get(exc.code, status.HTTP_400_BAD_REQUEST)
    logger.info("Rejected history request (%s): %s", exc.code, exc)
    raise HTTPException(
        status_code=status_code,
        detail={"code": exc.code, "message": str(exc)},
    ) from exc


def _validation_code(request: Request, errors: List[dict]) -> str:
    if request.url.path == f"{router.prefix}/report":
        return "invalid_record"
    if any(tuple(error.get("loc", ()))[:2] == ("body", "records") for error in errors):
        return "invalid_record"
    return "invalid_spec"


async def history_validation_handler(request: Request, exc: RequestValidationError) -> Response:
    """Give body-schema failures on history routes the same ``{code, message}`` detail."""
    if not request.url.path.startswith(router.prefix):
        return await request_validation_exception_handler(request, exc)
    errors = list(exc.errors())
    code = _validation_code(request, errors)
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = f"{location}: {first.get('msg', 'invalid request')}" if location else "Invalid request"
    logger.info("Rejected history request (%s): %s", code, message)
    return JSONResponse(
        status_code=_ERROR_STATUS[code],
        content={"detail": {"code": code, "message": message, "errors": jsonable_encoder(errors)}},
    )


def _load_records(request: RecordsRequest, settings: Settings) -> List[AnalysisRecord]:
    if len(request.records) > settings.max_records:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail={
                "code": "too_many_records",
                "message": f"At most {settings.max_records} records per request",
            },
        )
    try:
        return request.to_records()
    except InvalidRecordError as exc:
        _raise_history_error(exc)


def _download(payload: ExportPayload) -> Response:
    return Response(
        content=payload.content,
        media_type=payload.media_type,
        headers={"Content-Disposition": f'attachment; filename="{payload.filename}"'},
    )


@router.post("/metrics", response_model=MetricsResponse)
def history_metrics(
    request: RecordsRequest,
    service: HistoryService = Depends(get_history_service),
    settings: Settings = Depends(get_settings),
) -> MetricsResponse:
    records = _load_records(request, settings)
    try:
        snapshot = service.metrics(records)
    except HistoryError as exc:
        _raise_history_error(exc)
    return MetricsResponse.from_snapshot(snapshot)


@router.post("/view", response_model=HistoryViewResponse)
def history_view(
    request: HistoryViewRequest,
    service: HistoryService = Depends(get_history_service),
    settings: Settings = Depends(get_settings),
) -> HistoryViewResponse:
    records = _load_records(request, settings)
    try:
        items = service.view(records, request.filters.to_options(), request.sort.to_options())
    except HistoryError as exc:
        _raise_history_error(exc)
    return HistoryViewResponse(
        items=[AnalysisRecordModel.from_record(item) for item in items],
        total=len(items),
    )


@router.post("/progress", response_model=ProgressResponse)
def history_progress(
    request: ProgressRequest,
    service: HistoryService = Depends(get_history_service),
    settings: Settings = Depends(get_settings),
) -> ProgressResponse:
    records = _load_records(request, settings)
    try:
        series = service.progress(records, limit=request.limit)
    except HistoryError as exc:
        _raise_history_error(exc)
    return ProgressResponse(
        points=[ChartPointModel.from_point(point) for point in series["points"]],
        skills=[SkillComparisonModel.from_row(row) for row in series["skills"]],
    )


@router.post("/export")
def history_export(
    request: RecordsRequest,
    format: str = Query("csv", description="Export format: csv or json"),
    service: HistoryService = Depends(get_history_service),
    settings: Settings = Depends(get_settings),
) -> Response:
    records = _load_records(request, settings)
    try:
        payload = service.export(records, format)
    except HistoryError as exc:
        _raise_history_error(exc)
    return _download(payload)


@router.post("/report")
def history_entry_report(
    entry: AnalysisRecordModel,
    service: HistoryService = Depends(get_history_service),
) -> Response:
    try:
        payload = service.entry_report(entry.to_record())
    except HistoryError as exc:
        _raise_history_error(exc)
    return _download(payload)
