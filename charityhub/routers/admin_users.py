from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from charityhub.auth.deps import require_admin
from charityhub.core.db import get_db
from charityhub.models.user import User
from charityhub.schemas.account import AccountStatusOut, AccountSuspendRequest
from charityhub.services import accounts as accounts_service
from charityhub.services.activity_log import request_meta

router = APIRouter(prefix="/admin/users", tags=["admin-users"])


@router.post("/{user_id:int}/suspend", response_model=AccountStatusOut, status_code=status.HTTP_200_OK)
def suspend_user(
    user_id: int,
    payload: AccountSuspendRequest,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> AccountStatusOut:
    user = accounts_service.suspend_account(
        db,
        user_id,
        days=payload.days,
        reason=payload.reason,
        actor=admin,
        meta=request_meta(request),
    )
    return AccountStatusOut.model_validate(user)


@router.post("/{user_id:int}/activate", response_model=AccountStatusOut, status_code=status.HTTP_200_OK)
def activate_user(
    user_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> AccountStatusOut:
    user = accounts_service.activate_account(db, user_id, actor=admin, meta=request_meta(request))
    return AccountStatusOut.model_validate(user)
