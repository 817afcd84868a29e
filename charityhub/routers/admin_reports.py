from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.orm import Session

from charityhub.auth.deps import get_current_user, require_admin
from charityhub.core.db import get_db
from charityhub.models.report import ReportReason, ReportStatus
from charityhub.models.targets import EntityType
from charityhub.models.user import User
from charityhub.schemas.report import (
    ReportApproveRequest,
    ReportDecisionResponse,
    ReportDetail,
    ReportListResponse,
    ReportOut,
    ReportRejectRequest,
    ReportStatistics,
)
from charityhub.services import reports as reports_service
from charityhub.services.activity_log import request_meta

router = APIRouter(prefix="/admin/reports", tags=["admin-reports"])


@router.get("", response_model=ReportListResponse, status_code=status.HTTP_200_OK)
def list_reports(
    *,
    status_filter: Optional[ReportStatus] = Query(default=None, alias="status"),
    entity_type: Optional[EntityType] = Query(default=None),
    reason: Optional[ReportReason] = Query(default=None),
    search: Optional[str] = Query(default=None, max_length=255),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
) -> ReportListResponse:
    items, total = reports_service.list_reports(
        db,
        status_filter=status_filter,
        entity_type=entity_type,
        reason=reason,
        search=(search or "").strip() or None,
        limit=limit,
        offset=offset,
    )
    return ReportListResponse(
        items=[reports_service.serialize(report) for report in items],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/statistics", response_model=ReportStatistics, status_code=status.HTTP_200_OK)
def report_statistics(
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
) -> ReportStatistics:
    return reports_service.statistics(db)


@router.get("/{report_id:int}", response_model=ReportDetail, status_code=status.HTTP_200_OK)
def get_report(
    report_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
) -> ReportDetail:
    return reports_service.get_report_detail(db, report_id)


# Decision routes check admin rights in the service layer.
@router.post("/{report_id:int}/review", response_model=ReportOut, status_code=status.HTTP_200_OK)
def start_review(
    report_id: int,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> ReportOut:
    report = reports_service.start_review(db, report_id, user, meta=request_meta(request))
    return reports_service.serialize(report)


@router.post("/{report_id:int}/approve", response_model=ReportDecisionResponse, status_code=status.HTTP_200_OK)
def approve_report(
    report_id: int,
    payload: ReportApproveRequest,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> ReportDecisionResponse:
    report, suspended_until = reports_service.approve(
        db,
        report_id,
        user,
        admin_notes=payload.admin_notes,
        penalty_days=payload.penalty_days,
        severity=payload.severity,
        meta=request_meta(request),
    )
    return ReportDecisionResponse(
        message=f"Report approved. Account suspended for {report.penalty_days} days.",
        report=reports_service.serialize(report),
        suspended_until=suspended_until,
    )


@router.post("/{report_id:int}/reject", response_model=ReportDecisionResponse, status_code=status.HTTP_200_OK)
def reject_report(
    report_id: int,
    payload: ReportRejectRequest,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> ReportDecisionResponse:
    report = reports_service.reject(
        db,
        report_id,
        user,
        admin_notes=payload.admin_notes,
        meta=request_meta(request),
    )
    return ReportDecisionResponse(message="Report dismissed.", report=reports_service.serialize(report))


@router.delete("/{report_id:int}", status_code=status.HTTP_204_NO_CONTENT)
def delete_report(
    report_id: int,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> Response:
    reports_service.delete(db, report_id, user, meta=request_meta(request))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
