from __future__ import annotations

import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from charityhub.models.charity import Charity
from charityhub.models.targets import TargetRef, TargetType
from charityhub.models.user import User
from charityhub.services import activity_log
from charityhub.services.activity_log import ActivityAction

logger = logging.getLogger(__name__)


def _load_pending_charity(db: Session, charity_id: int) -> Charity:
    charity = db.get(Charity, charity_id)
    if not charity:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Charity not found")
    if charity.verification_status != "pending":
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Charity application is already {charity.verification_status}",
        )
    return charity


def approve_charity(db: Session, charity_id: int, admin: User, *, meta: dict | None = None) -> Charity:
    charity = _load_pending_charity(db, charity_id)
    charity.verification_status = "approved"
    charity.rejection_reason = None
    db.commit()
    db.refresh(charity)
    logger.info("charity_approved", extra={"charity_id": charity.id, "admin_id": admin.id})

    activity_log.record(
        db,
        admin,
        ActivityAction.CHARITY_APPROVED,
        target=TargetRef(TargetType.CHARITY, charity.id),
        details={"charity_id": charity.id, "charity_name": charity.name},
        **(meta or {}),
    )
    return charity


def reject_charity(
    db: Session,
    charity_id: int,
    admin: User,
    *,
    reason: str | None = None,
    meta: dict | None = None,
) -> Charity:
    charity = _load_pending_charity(db, charity_id)
    charity.verification_status = "rejected"
    charity.rejection_reason = reason
    db.commit()
    db.refresh(charity)
    logger.info("charity_rejected", extra={"charity_id": charity.id, "admin_id": admin.id})

    activity_log.record(
        db,
        admin,
        ActivityAction.CHARITY_REJECTED,
        target=TargetRef(TargetType.CHARITY, charity.id),
        details={"charity_id": charity.id, "charity_name": charity.name, "reason": reason},
        **(meta or {}),
    )
    return charity
