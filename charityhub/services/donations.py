from __future__ import annotations

import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from charityhub.models.donation import Donation
from charityhub.models.targets import TargetRef, TargetType
from charityhub.models.user import User
from charityhub.services import activity_log
from charityhub.services.activity_log import ActivityAction

logger = logging.getLogger(__name__)


def _load_donation(db: Session, donation_id: int) -> Donation:
    donation = db.get(Donation, donation_id)
    if not donation:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Donation not found")
    return donation


def _ensure_can_manage(donation: Donation, actor: User) -> None:
    if actor.is_admin:
        return
    charity = donation.charity
    if charity is None or charity.owner_id != actor.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the receiving charity or an admin can manage this donation",
        )


def _ensure_pending(donation: Donation) -> None:
    if donation.status != "pending":
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Donation is already {donation.status}",
        )


def _details(donation: Donation) -> dict:
    return {
        "donation_id": donation.id,
        "amount": str(donation.amount),
        "charity_id": donation.charity_id,
        "campaign_id": donation.campaign_id,
        "donor_id": donation.donor_id,
    }


def confirm_donation(db: Session, donation_id: int, actor: User, *, meta: dict | None = None) -> Donation:
    donation = _load_donation(db, donation_id)
    _ensure_can_manage(donation, actor)
    _ensure_pending(donation)

    donation.status = "confirmed"
    db.commit()
    db.refresh(donation)
    logger.info("donation_confirmed", extra={"donation_id": donation.id, "actor_id": actor.id})

    activity_log.record(
        db,
        actor,
        ActivityAction.DONATION_CONFIRMED,
        target=TargetRef(TargetType.DONATION, donation.id),
        details=_details(donation),
        **(meta or {}),
    )
    return donation


def reject_donation(
    db: Session,
    donation_id: int,
    actor: User,
    *,
    reason: str | None = None,
    meta: dict | None = None,
) -> Donation:
    donation = _load_donation(db, donation_id)
    _ensure_can_manage(donation, actor)
    _ensure_pending(donation)

    donation.status = "rejected"
    donation.rejection_reason = reason
    db.commit()
    db.refresh(donation)
    logger.info("donation_rejected", extra={"donation_id": donation.id, "actor_id": actor.id})

    details = _details(donation)
    details["reason"] = reason
    activity_log.record(
        db,
        actor,
        ActivityAction.DONATION_REJECTED,
        target=TargetRef(TargetType.DONATION, donation.id),
        details=details,
        **(meta or {}),
    )
    return donation
