from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel


class ActivityActor(BaseModel):
    id: int | None = None
    name: str
    email: str | None = None
    role: str | None = None


class ActivityLogOut(BaseModel):
    id: int
    actor: ActivityActor
    action_type: str
    family: str
    description: str
    target_type: str | None = None
    target_id: int | None = None
    details: dict[str, Any] | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    created_at: datetime


class ActivityLogListResponse(BaseModel):
    items: list[ActivityLogOut]
    total: int
    page: int
    page_size: int


class ActionCount(BaseModel):
    action_type: str
    count: int


class ActivityStatistics(BaseModel):
    total: int
    families: dict[str, int]
    logins_today: int
    unique_actions: list[str]
    by_action: list[ActionCount]
    recent: list[ActivityLogOut]
