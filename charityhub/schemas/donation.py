from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class DonationOut(BaseModel):
    id: int
    donor_id: int | None = None
    charity_id: int
    campaign_id: int | None = None
    amount: Decimal
    status: str
    rejection_reason: str | None = None
    created_at: datetime

    class Config:
        from_attributes = True


class DonationRejectRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=500)


class CharityOut(BaseModel):
    id: int
    name: str
    owner_id: int | None = None
    verification_status: str
    rejection_reason: str | None = None
    created_at: datetime

    class Config:
        from_attributes = True


class CharityRejectRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=1000)
