"""Account lifecycle: suspension windows and reactivation."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from charityhub.core.config import settings
from charityhub.models.targets import TargetRef, TargetType
from charityhub.models.user import User
from charityhub.services import activity_log
from charityhub.services.activity_log import ActivityAction
from charityhub.services.notifications import notify_account_reactivated, notify_account_suspended

logger = logging.getLogger(__name__)

SUSPENDED = "suspended"
ACTIVE = "active"


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """SQLite hands timestamps back naive; everything stored here is UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def validate_penalty_days(days: int) -> int:
    if days < 1 or days > settings.MAX_PENALTY_DAYS:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Penalty days must be between 1 and {settings.MAX_PENALTY_DAYS}",
        )
    return days


def is_suspended(user: User, now: datetime | None = None) -> bool:
    if user.status != SUSPENDED:
        return False
    until = as_utc(user.suspended_until)
    if until is None:
        return True
    return until > (now or now_utc())


def suspend(
    user: User,
    days: int,
    *,
    reason: str | None = None,
    level: str | None = None,
    now: datetime | None = None,
) -> datetime:
    """Open a suspension window on ``user``. The caller owns the commit."""
    start = now or now_utc()
    suspended_until = start + timedelta(days=days)
    user.status = SUSPENDED
    user.suspended_until = suspended_until
    user.suspension_reason = reason
    user.suspension_level = level
    return suspended_until


def activate(user: User) -> None:
    user.status = ACTIVE
    user.suspended_until = None
    user.suspension_reason = None
    user.suspension_level = None


def ensure_not_suspended(db: Session, user: User) -> User:
    """Reject suspended accounts; lift windows that have already ended."""
    if user.status != SUSPENDED:
        return user
    if is_suspended(user):
        until = as_utc(user.suspended_until)
        detail = f"Account suspended until {until.isoformat()}" if until else "Account suspended"
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
    activate(user)
    db.commit()
    notify_account_reactivated(user)
    return user


def clear_expired_suspensions(db: Session, now: datetime | None = None) -> int:
    cutoff = now or now_utc()
    expired = (
        db.query(User)
        .filter(
            User.status == SUSPENDED,
            User.suspended_until.isnot(None),
            User.suspended_until <= cutoff,
        )
        .all()
    )
    if not expired:
        return 0
    for user in expired:
        activate(user)
    db.commit()
    for user in expired:
        notify_account_reactivated(user)
    logger.info(
        "expired_suspensions_cleared",
        extra={"count": len(expired), "user_ids": [user.id for user in expired]},
    )
    return len(expired)


def _load_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


def suspend_account(
    db: Session,
    user_id: int,
    *,
    days: int,
    reason: str | None,
    actor: User,
    meta: dict | None = None,
) -> User:
    user = _load_user(db, user_id)
    if user.id == actor.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot suspend your own account")
    validate_penalty_days(days)
    suspended_until = suspend(user, days, reason=reason, level="manual")
    db.commit()
    db.refresh(user)
    activity_log.record(
        db,
        actor,
        ActivityAction.USER_SUSPENDED,
        target=TargetRef(TargetType.USER, user.id),
        details={
            "suspended_user_id": user.id,
            "suspended_user_name": user.display_name,
            "reason": reason,
            "penalty_days": days,
            "suspended_until": suspended_until.isoformat(),
        },
        **(meta or {}),
    )
    notify_account_suspended(user, suspended_until=suspended_until, penalty_days=days, reason=reason)
    return user


def activate_account(db: Session, user_id: int, *, actor: User, meta: dict | None = None) -> User:
    user = _load_user(db, user_id)
    if user.status != SUSPENDED:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Account is not suspended")
    activate(user)
    db.commit()
    db.refresh(user)
    activity_log.record(
        db,
        actor,
        ActivityAction.USER_ACTIVATED,
        target=TargetRef(TargetType.USER, user.id),
        details={"activated_user_id": user.id, "activated_user_name": user.display_name},
        **(meta or {}),
    )
    notify_account_reactivated(user)
    return user
