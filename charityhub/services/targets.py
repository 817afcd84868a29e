"""Resolve tagged entity references to rows and to the accounts behind them."""

from __future__ import annotations

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from charityhub.models.campaign import Campaign
from charityhub.models.charity import Charity
from charityhub.models.donation import Donation
from charityhub.models.targets import EntityType
from charityhub.models.user import User
from charityhub.schemas.report import ReportedEntitySummary

ENTITY_MODELS = {
    EntityType.USER: User,
    EntityType.CHARITY: Charity,
    EntityType.CAMPAIGN: Campaign,
    EntityType.DONATION: Donation,
}


def load_entity(db: Session, kind: EntityType | str, entity_id: int):
    return db.get(ENTITY_MODELS[EntityType(kind)], entity_id)


def require_entity(db: Session, kind: EntityType | str, entity_id: int):
    entity = load_entity(db, kind, entity_id)
    if entity is None:
        label = EntityType(kind).value.capitalize()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found")
    return entity


def responsible_account(kind: EntityType | str, entity) -> User | None:
    """The account that answers for ``entity`` when a report against it is upheld."""
    kind = EntityType(kind)
    if entity is None:
        return None
    if kind is EntityType.USER:
        return entity
    if kind is EntityType.CHARITY:
        return entity.owner
    if kind is EntityType.CAMPAIGN:
        return entity.charity.owner if entity.charity else None
    if kind is EntityType.DONATION:
        return entity.donor
    raise ValueError(f"Unsupported entity type: {kind}")


def entity_label(kind: EntityType | str, entity) -> str:
    kind = EntityType(kind)
    if kind is EntityType.USER:
        return entity.display_name
    if kind is EntityType.CHARITY:
        return entity.name
    if kind is EntityType.CAMPAIGN:
        return entity.title
    return f"Donation #{entity.id}"


def summarize(db: Session, kind: EntityType | str, entity_id: int) -> ReportedEntitySummary | None:
    entity = load_entity(db, kind, entity_id)
    if entity is None:
        return None
    account = responsible_account(kind, entity)
    return ReportedEntitySummary(
        type=EntityType(kind).value,
        id=entity_id,
        label=entity_label(kind, entity),
        account_id=account.id if account else None,
        account_name=account.display_name if account else None,
        account_status=account.status if account else None,
    )
