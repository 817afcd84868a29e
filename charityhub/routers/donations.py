from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from charityhub.auth.deps import require_roles
from charityhub.core.db import get_db
from charityhub.models.user import ADMIN_ROLE, CHARITY_ADMIN_ROLE, User
from charityhub.schemas.donation import DonationOut, DonationRejectRequest
from charityhub.services import donations as donations_service
from charityhub.services.activity_log import request_meta

router = APIRouter(prefix="/donations", tags=["donations"])

MANAGE_ROLES = (ADMIN_ROLE, CHARITY_ADMIN_ROLE)


@router.post("/{donation_id:int}/confirm", response_model=DonationOut, status_code=status.HTTP_200_OK)
def confirm_donation(
    donation_id: int,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*MANAGE_ROLES)),
) -> DonationOut:
    donation = donations_service.confirm_donation(db, donation_id, user, meta=request_meta(request))
    return DonationOut.model_validate(donation)


@router.post("/{donation_id:int}/reject", response_model=DonationOut, status_code=status.HTTP_200_OK)
def reject_donation(
    donation_id: int,
    payload: DonationRejectRequest,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*MANAGE_ROLES)),
) -> DonationOut:
    donation = donations_service.reject_donation(
        db,
        donation_id,
        user,
        reason=payload.reason,
        meta=request_meta(request),
    )
    return DonationOut.model_validate(donation)
