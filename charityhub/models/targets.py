"""Tagged references to the platform entities that logs and reports point at."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class TargetType(str, enum.Enum):
    USER = "User"
    CHARITY = "Charity"
    CAMPAIGN = "Campaign"
    DONATION = "Donation"
    REPORT = "Report"
    DOCUMENT = "Document"
    REFUND = "Refund"
    FUND_USAGE = "FundUsage"
    UPDATE = "Update"
    COMMENT = "Comment"


class EntityType(str, enum.Enum):
    """Entities a report may be filed against."""

    USER = "user"
    CHARITY = "charity"
    CAMPAIGN = "campaign"
    DONATION = "donation"

    @property
    def target_type(self) -> TargetType:
        return _ENTITY_TARGETS[self]


_ENTITY_TARGETS = {
    EntityType.USER: TargetType.USER,
    EntityType.CHARITY: TargetType.CHARITY,
    EntityType.CAMPAIGN: TargetType.CAMPAIGN,
    EntityType.DONATION: TargetType.DONATION,
}


@dataclass(frozen=True)
class TargetRef:
    kind: TargetType
    id: int

    @classmethod
    def of(cls, kind: TargetType | EntityType, target_id: int) -> "TargetRef":
        if isinstance(kind, EntityType):
            kind = kind.target_type
        return cls(kind=kind, id=target_id)
