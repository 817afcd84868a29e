from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from charityhub.auth.deps import get_current_user
from charityhub.auth.security import create_access_token, verify_password
from charityhub.core.db import get_db
from charityhub.models.targets import TargetRef, TargetType
from charityhub.models.user import User
from charityhub.schemas.auth import LoginRequest, TokenResponse, WhoAmIResponse
from charityhub.services import activity_log
from charityhub.services.accounts import ensure_not_suspended, now_utc
from charityhub.services.activity_log import ActivityAction

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
def login(request: Request, payload: LoginRequest, db: Session = Depends(get_db)) -> TokenResponse:
    user = db.query(User).filter(User.email == payload.email).first()
    if not user or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    if not verify_password(payload.password, user.hashed_password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    ensure_not_suspended(db, user)

    user.last_login_at = now_utc()
    db.commit()
    activity_log.record(
        db,
        user,
        ActivityAction.LOGIN,
        target=TargetRef(TargetType.USER, user.id),
        **activity_log.request_meta(request),
    )
    token = create_access_token(subject=str(user.id), role=user.role)
    return TokenResponse(access_token=token)


@router.get("/whoami", response_model=WhoAmIResponse)
def whoami(user: User = Depends(get_current_user)) -> WhoAmIResponse:
    return WhoAmIResponse(
        id=user.id,
        user=user.email,
        role=user.role,
        status=user.status,
        full_name=user.full_name,
        suspended_until=user.suspended_until,
    )
