from __future__ import annotations

import csv
import io
from datetime import date
from typing import Iterable, Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response, StreamingResponse
from sqlalchemy.orm import Session

from charityhub.auth.deps import require_admin
from charityhub.core.db import get_db
from charityhub.models.targets import TargetType
from charityhub.models.user import RoleName, User
from charityhub.schemas.activity_log import ActivityLogListResponse, ActivityLogOut, ActivityStatistics
from charityhub.services import activity_log as activity_log_service
from charityhub.services.activity_log import ActivityLogFilters
from charityhub.services.activity_pdf import build_activity_log_pdf

router = APIRouter(prefix="/admin/activity-logs", tags=["activity-logs"])

UTF8_BOM = "﻿"


def _stream_activity_csv(rows: Iterable[list[str]]) -> Iterable[str]:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    buffer.write(UTF8_BOM)
    writer.writerow(activity_log_service.EXPORT_HEADERS)
    yield buffer.getvalue()
    buffer.seek(0)
    buffer.truncate(0)
    for row in rows:
        writer.writerow(row)
        yield buffer.getvalue()
        buffer.seek(0)
        buffer.truncate(0)


def _filters(
    action_type: Optional[str] = Query(default=None),
    target_type: Optional[TargetType] = Query(default=None),
    user_role: Optional[RoleName] = Query(default=None),
    start_date: Optional[date] = Query(default=None),
    end_date: Optional[date] = Query(default=None),
    search: Optional[str] = Query(default=None, max_length=255),
) -> ActivityLogFilters:
    return ActivityLogFilters(
        action_type=action_type or None,
        target_type=target_type.value if target_type else None,
        user_role=user_role.value if user_role else None,
        start_date=start_date,
        end_date=end_date,
        search=(search or "").strip() or None,
    ).validate()


@router.get("", response_model=ActivityLogListResponse, status_code=status.HTTP_200_OK)
def list_activity_logs(
    *,
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
    filters: ActivityLogFilters = Depends(_filters),
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
) -> ActivityLogListResponse:
    items, total = activity_log_service.list_logs(db, filters, page=page, page_size=page_size)
    return ActivityLogListResponse(
        items=[activity_log_service.to_schema(entry) for entry in items],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/statistics", response_model=ActivityStatistics, status_code=status.HTTP_200_OK)
def activity_statistics(
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
) -> ActivityStatistics:
    return activity_log_service.statistics(db)


@router.get("/export", status_code=status.HTTP_200_OK)
def export_activity_logs(
    filters: ActivityLogFilters = Depends(_filters),
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
) -> StreamingResponse:
    rows = activity_log_service.export_rows(db, filters)
    filename = f"activity_logs_{date.today().isoformat()}.csv"
    response = StreamingResponse(_stream_activity_csv(rows), media_type="text/csv")
    response.headers["Content-Disposition"] = f"attachment; filename={filename}"
    return response


@router.get("/export/pdf", status_code=status.HTTP_200_OK)
def export_activity_logs_pdf(
    filters: ActivityLogFilters = Depends(_filters),
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
) -> Response:
    report = activity_log_service.activity_report(db, filters)
    pdf_bytes = build_activity_log_pdf(report, filters)
    filename = f"activity_log_{date.today().isoformat()}.pdf"
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}
    return Response(content=pdf_bytes, media_type="application/pdf", headers=headers)


@router.get("/{log_id:int}", response_model=ActivityLogOut, status_code=status.HTTP_200_OK)
def get_activity_log(
    log_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
) -> ActivityLogOut:
    return activity_log_service.to_schema(activity_log_service.get_log(db, log_id))
