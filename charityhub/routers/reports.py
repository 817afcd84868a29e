from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from charityhub.auth.deps import get_current_user
from charityhub.core.db import get_db
from charityhub.models.user import User
from charityhub.schemas.report import ReportCreate, ReportOut
from charityhub.services import reports as reports_service
from charityhub.services.activity_log import request_meta

router = APIRouter(prefix="/reports", tags=["reports"])


@router.post("", response_model=ReportOut, status_code=status.HTTP_201_CREATED)
def submit_report(
    request: Request,
    payload: ReportCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> ReportOut:
    report = reports_service.submit(db, user, payload, meta=request_meta(request))
    return reports_service.serialize(report)


@router.get("/mine", response_model=list[ReportOut], status_code=status.HTTP_200_OK)
def my_reports(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> list[ReportOut]:
    return [reports_service.serialize(report) for report in reports_service.my_reports(db, user)]
