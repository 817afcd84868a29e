from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from charityhub.auth.deps import require_admin
from charityhub.core.db import get_db
from charityhub.models.user import User
from charityhub.schemas.donation import CharityOut, CharityRejectRequest
from charityhub.services import charities as charities_service
from charityhub.services.activity_log import request_meta

router = APIRouter(prefix="/admin/charities", tags=["admin-charities"])


@router.post("/{charity_id:int}/approve", response_model=CharityOut, status_code=status.HTTP_200_OK)
def approve_charity(
    charity_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> CharityOut:
    charity = charities_service.approve_charity(db, charity_id, admin, meta=request_meta(request))
    return CharityOut.model_validate(charity)


@router.post("/{charity_id:int}/reject", response_model=CharityOut, status_code=status.HTTP_200_OK)
def reject_charity(
    charity_id: int,
    payload: CharityRejectRequest,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> CharityOut:
    charity = charities_service.reject_charity(
        db,
        charity_id,
        admin,
        reason=payload.reason,
        meta=request_meta(request),
    )
    return CharityOut.model_validate(charity)
