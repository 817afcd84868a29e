from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class AccountSuspendRequest(BaseModel):
    days: int
    reason: str | None = Field(default=None, max_length=1000)


class AccountStatusOut(BaseModel):
    id: int
    email: str
    full_name: str | None = None
    role: str
    status: str
    suspended_until: datetime | None = None
    suspension_reason: str | None = None
    suspension_level: str | None = None

    class Config:
        from_attributes = True
