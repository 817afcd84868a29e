from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from charityhub.models.report import ReportReason, ReportSeverity
from charityhub.models.targets import EntityType
from charityhub.schemas.activity_log import ActivityLogOut


class ReportCreate(BaseModel):
    target_type: EntityType
    target_id: int
    reason: ReportReason
    description: str = Field(..., min_length=10, max_length=1000)


class ReportApproveRequest(BaseModel):
    penalty_days: int | None = None
    admin_notes: str = Field(default="", max_length=1000)
    severity: ReportSeverity | None = None


class ReportRejectRequest(BaseModel):
    admin_notes: str = Field(default="", max_length=1000)


class ReportUserSummary(BaseModel):
    id: int
    name: str
    email: str
    role: str


class ReportOut(BaseModel):
    id: int
    reporter: ReportUserSummary | None = None
    reporter_role: str | None = None
    reported_entity_type: str
    reported_entity_id: int
    reason: str
    description: str
    evidence_path: str | None = None
    evidence_url: str | None = None
    severity: str
    status: str
    penalty_days: int | None = None
    admin_notes: str | None = None
    reviewer: ReportUserSummary | None = None
    reviewed_at: datetime | None = None
    action_taken: str | None = None
    created_at: datetime


class ReportListResponse(BaseModel):
    items: list[ReportOut]
    total: int
    limit: int
    offset: int


class ReportedEntitySummary(BaseModel):
    type: str
    id: int
    label: str
    account_id: int | None = None
    account_name: str | None = None
    account_status: str | None = None


class ReportReviewContext(BaseModel):
    entity_report_count: int
    prior_suspensions: int
    suggested_penalty_days: dict[str, int]
    recent_activity: list[ActivityLogOut]


class ReportDetail(BaseModel):
    report: ReportOut
    reported_entity: ReportedEntitySummary | None = None
    context: ReportReviewContext


class ReportDecisionResponse(BaseModel):
    message: str
    report: ReportOut
    suspended_until: datetime | None = None


class ReportStatistics(BaseModel):
    total: int
    by_status: dict[str, int]
    by_reason: dict[str, int]
    recent: list[ReportOut]
