"""Append-only audit trail of user actions.

``record`` is called by action-performing code *after* its own commit. It
never raises: an entry that cannot be written is rolled back and reported on
the error log, and the business operation it describes stands.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Callable, Iterable, Union

from fastapi import HTTPException, Request, status
from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, joinedload

from charityhub.core.db import LIKE_ESCAPE, contains_pattern
from charityhub.models.activity_log import ActivityLog
from charityhub.models.targets import TargetRef
from charityhub.models.user import User
from charityhub.schemas.activity_log import (
    ActionCount,
    ActivityActor,
    ActivityLogOut,
    ActivityStatistics,
)

logger = logging.getLogger(__name__)

CURRENCY_SYMBOL = "₱"
RECENT_LIMIT = 10


class ActivityAction(str, enum.Enum):
    LOGIN = "login"
    LOGOUT = "logout"
    USER_REGISTERED = "user_registered"
    EMAIL_VERIFIED = "email_verified"
    PROFILE_UPDATED = "profile_updated"
    PASSWORD_CHANGED = "password_changed"
    EMAIL_CHANGED = "email_changed"
    ACCOUNT_DEACTIVATED = "account_deactivated"
    ACCOUNT_REACTIVATED = "account_reactivated"
    ACCOUNT_DELETED = "account_deleted"
    DONATION_CREATED = "donation_created"
    DONATION_CONFIRMED = "donation_confirmed"
    DONATION_REJECTED = "donation_rejected"
    DONATION_UPDATED = "donation_updated"
    CAMPAIGN_CREATED = "campaign_created"
    CAMPAIGN_UPDATED = "campaign_updated"
    CAMPAIGN_ACTIVATED = "campaign_activated"
    CAMPAIGN_PAUSED = "campaign_paused"
    CAMPAIGN_DELETED = "campaign_deleted"
    CAMPAIGN_COMPLETED = "campaign_completed"
    CHARITY_CREATED = "charity_created"
    CHARITY_UPDATED = "charity_updated"
    CHARITY_APPROVED = "charity_approved"
    CHARITY_REJECTED = "charity_rejected"
    CHARITY_SUSPENDED = "charity_suspended"
    CHARITY_ACTIVATED = "charity_activated"
    CHARITY_FOLLOWED = "charity_followed"
    CHARITY_UNFOLLOWED = "charity_unfollowed"
    DOCUMENT_UPLOADED = "document_uploaded"
    DOCUMENT_APPROVED = "document_approved"
    DOCUMENT_REJECTED = "document_rejected"
    POST_CREATED = "post_created"
    POST_UPDATED = "post_updated"
    POST_DELETED = "post_deleted"
    UPDATE_CREATED = "update_created"
    UPDATE_UPDATED = "update_updated"
    UPDATE_DELETED = "update_deleted"
    COMMENT_CREATED = "comment_created"
    COMMENT_UPDATED = "comment_updated"
    COMMENT_DELETED = "comment_deleted"
    FUND_USAGE_CREATED = "fund_usage_created"
    FUND_USAGE_UPDATED = "fund_usage_updated"
    FUND_USAGE_DELETED = "fund_usage_deleted"
    REFUND_REQUESTED = "refund_requested"
    REFUND_APPROVED = "refund_approved"
    REFUND_REJECTED = "refund_rejected"
    USER_SUSPENDED = "user_suspended"
    USER_ACTIVATED = "user_activated"
    REPORT_SUBMITTED = "report_submitted"
    REPORT_REVIEW_STARTED = "report_review_started"
    REPORT_REVIEWED = "report_reviewed"
    REPORT_DELETED = "report_deleted"


A = ActivityAction

_FAMILY_MEMBERS: dict[str, tuple[ActivityAction, ...]] = {
    "authentication": (A.LOGIN, A.LOGOUT, A.EMAIL_VERIFIED),
    "registrations": (A.USER_REGISTERED,),
    "account": (
        A.PROFILE_UPDATED,
        A.PASSWORD_CHANGED,
        A.EMAIL_CHANGED,
        A.ACCOUNT_DEACTIVATED,
        A.ACCOUNT_REACTIVATED,
        A.ACCOUNT_DELETED,
    ),
    "donations": (A.DONATION_CREATED, A.DONATION_CONFIRMED, A.DONATION_REJECTED, A.DONATION_UPDATED),
    "campaigns": (
        A.CAMPAIGN_CREATED,
        A.CAMPAIGN_UPDATED,
        A.CAMPAIGN_ACTIVATED,
        A.CAMPAIGN_PAUSED,
        A.CAMPAIGN_DELETED,
        A.CAMPAIGN_COMPLETED,
    ),
    "charities": (
        A.CHARITY_CREATED,
        A.CHARITY_UPDATED,
        A.CHARITY_APPROVED,
        A.CHARITY_REJECTED,
        A.CHARITY_SUSPENDED,
        A.CHARITY_ACTIVATED,
        A.CHARITY_FOLLOWED,
        A.CHARITY_UNFOLLOWED,
        A.DOCUMENT_UPLOADED,
        A.DOCUMENT_APPROVED,
        A.DOCUMENT_REJECTED,
    ),
    "content": (
        A.POST_CREATED,
        A.POST_UPDATED,
        A.POST_DELETED,
        A.UPDATE_CREATED,
        A.UPDATE_UPDATED,
        A.UPDATE_DELETED,
        A.COMMENT_CREATED,
        A.COMMENT_UPDATED,
        A.COMMENT_DELETED,
    ),
    "finance": (
        A.FUND_USAGE_CREATED,
        A.FUND_USAGE_UPDATED,
        A.FUND_USAGE_DELETED,
        A.REFUND_REQUESTED,
        A.REFUND_APPROVED,
        A.REFUND_REJECTED,
    ),
    "moderation": (
        A.USER_SUSPENDED,
        A.USER_ACTIVATED,
        A.REPORT_SUBMITTED,
        A.REPORT_REVIEW_STARTED,
        A.REPORT_REVIEWED,
        A.REPORT_DELETED,
    ),
}
OTHER_FAMILY = "other"
FAMILIES: tuple[str, ...] = tuple(_FAMILY_MEMBERS) + (OTHER_FAMILY,)
ACTION_FAMILIES: dict[str, str] = {
    action.value: family for family, actions in _FAMILY_MEMBERS.items() for action in actions
}

ActorLike = Union[User, int, None]


def action_family(action_type: str) -> str:
    return ACTION_FAMILIES.get(action_type, OTHER_FAMILY)


def request_meta(request: Request | None) -> dict[str, str | None]:
    if request is None:
        return {}
    user_agent = request.headers.get("user-agent")
    return {
        "ip_address": request.client.host if request.client else None,
        "user_agent": user_agent[:512] if user_agent else None,
    }


def _actor_identity(actor: ActorLike) -> tuple[int | None, str | None]:
    if actor is None:
        return None, None
    if isinstance(actor, int):
        return actor, None
    return actor.id, actor.role


def _persist(db: Session, entry: ActivityLog) -> None:
    db.add(entry)
    db.commit()


def record(
    db: Session,
    actor: ActorLike,
    action: ActivityAction | str,
    *,
    description: str | None = None,
    target: TargetRef | None = None,
    details: dict[str, Any] | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> ActivityLog | None:
    """Append one audit entry. Returns ``None`` when nothing was written."""

    action_type = action.value if isinstance(action, ActivityAction) else str(action)
    actor_id, actor_role = _actor_identity(actor)
    if actor_id is None:
        logger.warning("activity_log_skipped", extra={"action_type": action_type, "cause": "no_actor"})
        return None

    entry = ActivityLog(
        actor_user_id=actor_id,
        actor_role=actor_role,
        action_type=action_type,
        description=description,
        target_type=target.kind.value if target else None,
        target_id=target.id if target else None,
        details=details or None,
        ip_address=ip_address,
        user_agent=user_agent,
    )
    try:
        _persist(db, entry)
    except SQLAlchemyError:
        db.rollback()
        logger.exception(
            "activity_log_failed",
            extra={
                "action_type": action_type,
                "actor_id": actor_id,
                "target_type": entry.target_type,
                "target_id": entry.target_id,
            },
        )
        return None
    return entry


def _money(details: dict[str, Any]) -> str:
    amount = details.get("amount")
    if amount is None:
        return ""
    try:
        return f"{CURRENCY_SYMBOL}{float(amount):,.2f}"
    except (TypeError, ValueError):
        return str(amount)


def _suffix(details: dict[str, Any], key: str, template: str) -> str:
    value = details.get(key)
    return template.format(value) if value not in (None, "") else ""


def _changes(details: dict[str, Any]) -> str:
    changes = details.get("changes")
    if not changes:
        return ""
    if isinstance(changes, dict):
        changes = list(changes)
    return " - Updated: " + ", ".join(str(field) for field in list(changes)[:3])


_DESCRIBERS: dict[str, Callable[[dict[str, Any]], str]] = {
    "login": lambda d: "Logged in to the system",
    "logout": lambda d: "Logged out from the system",
    "user_registered": lambda d: f"Registered as {str(d.get('role') or 'user').replace('_', ' ').title()}",
    "email_verified": lambda d: "Email address verified",
    "password_changed": lambda d: "Changed account password",
    "email_changed": lambda d: f"Changed email from {d.get('old_email', '')} to {d.get('new_email', '')}",
    "profile_updated": lambda d: "Updated profile" + _changes(d),
    "account_deactivated": lambda d: "Deactivated account",
    "account_reactivated": lambda d: "Reactivated account",
    "account_deleted": lambda d: "Deleted account",
    "donation_created": lambda d: f"Made a donation of {_money(d) or 'unknown amount'}"
    + _suffix(d, "campaign_id", " (Campaign ID: {})"),
    "donation_confirmed": lambda d: f"Confirmed donation {_money(d)}".rstrip()
    + _suffix(d, "donation_id", " (Donation #{})"),
    "donation_rejected": lambda d: "Rejected donation"
    + _suffix(d, "donation_id", " #{}")
    + _suffix(d, "reason", " - Reason: {}"),
    "campaign_created": lambda d: f"Created campaign: \"{d.get('campaign_title') or 'Untitled Campaign'}\""
    + _suffix(d, "campaign_id", " (ID: {})"),
    "campaign_updated": lambda d: f"Updated {d.get('campaign_title') or 'campaign'}" + _changes(d),
    "campaign_activated": lambda d: f"Activated campaign: {d.get('campaign_title') or 'campaign'}",
    "campaign_paused": lambda d: f"Paused campaign: {d.get('campaign_title') or 'campaign'}",
    "campaign_deleted": lambda d: f"Deleted campaign: {d.get('campaign_title') or 'a campaign'}",
    "campaign_completed": lambda d: f"Completed campaign: {d.get('campaign_title') or 'campaign'}",
    "charity_created": lambda d: f"Registered charity: {d.get('charity_name') or 'new charity'}",
    "charity_updated": lambda d: f"Updated charity profile: {d.get('charity_name') or 'charity'}" + _changes(d),
    "charity_approved": lambda d: f"Approved charity application: {d.get('charity_name') or 'charity'}",
    "charity_rejected": lambda d: f"Rejected charity application: {d.get('charity_name') or 'charity'}"
    + _suffix(d, "reason", " - Reason: {}"),
    "charity_suspended": lambda d: f"Suspended charity: {d.get('charity_name') or 'charity'}"
    + _suffix(d, "reason", " - Reason: {}"),
    "charity_activated": lambda d: f"Activated charity: {d.get('charity_name') or 'charity'}",
    "charity_followed": lambda d: "Started following charity" + _suffix(d, "charity_id", " (Charity #{})"),
    "charity_unfollowed": lambda d: "Unfollowed charity" + _suffix(d, "charity_id", " (Charity #{})"),
    "document_uploaded": lambda d: f"Uploaded {d.get('doc_type') or 'document'}"
    + _suffix(d, "charity_id", " for Charity #{}"),
    "document_approved": lambda d: "Approved document" + _suffix(d, "document_id", " #{}"),
    "document_rejected": lambda d: "Rejected document"
    + _suffix(d, "document_id", " #{}")
    + _suffix(d, "reason", " - {}"),
    "fund_usage_created": lambda d: f"Logged fund usage of {_money(d)}".rstrip()
    + _suffix(d, "campaign_id", " for Campaign #{}"),
    "refund_requested": lambda d: "Requested refund" + _suffix(d, "donation_id", " for Donation #{}"),
    "refund_approved": lambda d: f"Approved refund of {_money(d)}".rstrip()
    + _suffix(d, "donation_id", " (Donation #{})"),
    "refund_rejected": lambda d: "Rejected refund"
    + _suffix(d, "donation_id", " for Donation #{}")
    + _suffix(d, "reason", " - {}"),
    "user_suspended": lambda d: f"Suspended user: {d.get('suspended_user_name') or 'user'}"
    + _suffix(d, "reason", " - {}"),
    "user_activated": lambda d: f"Activated user: {d.get('activated_user_name') or 'user'}",
    "report_submitted": lambda d: "Submitted a report"
    + _suffix(d, "reported_entity", " against {}")
    + _suffix(d, "reason", " ({})"),
    "report_review_started": lambda d: "Started reviewing report" + _suffix(d, "report_id", " #{}"),
    "report_reviewed": lambda d: f"Reviewed report - Action: {d.get('review_action') or 'reviewed'}",
    "report_deleted": lambda d: "Deleted report" + _suffix(d, "report_id", " #{}"),
}


def describe(entry: ActivityLog) -> str:
    if entry.description:
        return entry.description
    details = entry.details if isinstance(entry.details, dict) else {}
    describer = _DESCRIBERS.get(entry.action_type)
    if describer:
        return describer(details)

    readable = entry.action_type.replace("_", " ").title()
    if details.get("amount") is not None:
        readable += f" - Amount: {_money(details)}"
    if details.get("campaign_title"):
        readable += f" - Campaign: {details['campaign_title']}"
    if details.get("charity_name"):
        readable += f" - Charity: {details['charity_name']}"
    return readable


def _actor_summary(entry: ActivityLog) -> ActivityActor:
    actor = entry.actor
    if actor is None:
        return ActivityActor(id=entry.actor_user_id, name="Unknown", role=entry.actor_role)
    return ActivityActor(
        id=actor.id,
        name=actor.display_name,
        email=actor.email,
        role=actor.role or entry.actor_role,
    )


def to_schema(entry: ActivityLog) -> ActivityLogOut:
    return ActivityLogOut(
        id=entry.id,
        actor=_actor_summary(entry),
        action_type=entry.action_type,
        family=action_family(entry.action_type),
        description=describe(entry),
        target_type=entry.target_type,
        target_id=entry.target_id,
        details=entry.details,
        ip_address=entry.ip_address,
        user_agent=entry.user_agent,
        created_at=entry.created_at,
    )


@dataclass
class ActivityLogFilters:
    action_type: str | None = None
    target_type: str | None = None
    user_role: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    search: str | None = None

    def validate(self) -> "ActivityLogFilters":
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="start_date must be on or before end_date",
            )
        return self


def _day_start(value: date) -> datetime:
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def _day_end(value: date) -> datetime:
    return datetime.combine(value, time.max, tzinfo=timezone.utc)


def _base_query(db: Session) -> Query:
    return db.query(ActivityLog).options(joinedload(ActivityLog.actor))


def _apply_filters(query: Query, filters: ActivityLogFilters) -> Query:
    if filters.action_type:
        query = query.filter(ActivityLog.action_type == filters.action_type)
    if filters.target_type:
        query = query.filter(ActivityLog.target_type == filters.target_type)
    if filters.user_role:
        query = query.filter(ActivityLog.actor_role == filters.user_role)
    if filters.start_date:
        query = query.filter(ActivityLog.created_at >= _day_start(filters.start_date))
    if filters.end_date:
        query = query.filter(ActivityLog.created_at <= _day_end(filters.end_date))
    if filters.search:
        pattern = contains_pattern(filters.search)
        query = query.outerjoin(User, ActivityLog.actor_user_id == User.id).filter(
            or_(
                func.lower(func.coalesce(ActivityLog.description, "")).like(pattern, escape=LIKE_ESCAPE),
                func.lower(func.coalesce(User.full_name, "")).like(pattern, escape=LIKE_ESCAPE),
                func.lower(func.coalesce(User.email, "")).like(pattern, escape=LIKE_ESCAPE),
            )
        )
    return query


def list_logs(
    db: Session,
    filters: ActivityLogFilters,
    *,
    page: int = 1,
    page_size: int = 50,
) -> tuple[list[ActivityLog], int]:
    query = _apply_filters(_base_query(db), filters.validate())
    total = query.order_by(None).count()
    items = (
        query.order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return items, total


def get_log(db: Session, log_id: int) -> ActivityLog:
    entry = _base_query(db).filter(ActivityLog.id == log_id).first()
    if not entry:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Activity log entry not found")
    return entry


def recent_for_actor(db: Session, actor_id: int, *, limit: int = 5) -> list[ActivityLog]:
    return (
        _base_query(db)
        .filter(ActivityLog.actor_user_id == actor_id)
        .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
        .limit(limit)
        .all()
    )


def statistics(db: Session, *, now: datetime | None = None) -> ActivityStatistics:
    current = now or datetime.now(timezone.utc)
    counts = (
        db.query(ActivityLog.action_type, func.count(ActivityLog.id))
        .group_by(ActivityLog.action_type)
        .all()
    )
    families = {family: 0 for family in FAMILIES}
    by_action: list[ActionCount] = []
    for action_type, count in counts:
        families[action_family(action_type)] += count
        by_action.append(ActionCount(action_type=action_type, count=count))
    by_action.sort(key=lambda item: (-item.count, item.action_type))

    logins_today = (
        db.query(func.count(ActivityLog.id))
        .filter(
            ActivityLog.action_type == ActivityAction.LOGIN.value,
            ActivityLog.created_at >= _day_start(current.date()),
        )
        .scalar()
        or 0
    )
    recent = (
        _base_query(db)
        .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
        .limit(RECENT_LIMIT)
        .all()
    )
    return ActivityStatistics(
        total=sum(item.count for item in by_action),
        families=families,
        logins_today=logins_today,
        unique_actions=sorted(item.action_type for item in by_action),
        by_action=by_action,
        recent=[to_schema(entry) for entry in recent],
    )


EXPORT_HEADERS = [
    "ID",
    "User",
    "Email",
    "Role",
    "Action",
    "Description",
    "Target Type",
    "Target ID",
    "IP Address",
    "Date",
]


def export_rows(db: Session, filters: ActivityLogFilters) -> Iterable[list[str]]:
    query = _apply_filters(_base_query(db), filters.validate()).order_by(
        ActivityLog.created_at.asc(), ActivityLog.id.asc()
    )
    for entry in query.all():
        actor = entry.actor
        yield [
            str(entry.id),
            actor.display_name if actor else "N/A",
            actor.email if actor else "N/A",
            (actor.role if actor else None) or entry.actor_role or "N/A",
            entry.action_type,
            describe(entry),
            entry.target_type or "",
            str(entry.target_id) if entry.target_id is not None else "",
            entry.ip_address or "",
            entry.created_at.strftime("%Y-%m-%d %H:%M:%S"),
        ]


PDF_ROW_LIMIT = 1000
PDF_DEFAULT_DAYS = 30


@dataclass
class ActivityReport:
    """Printable summary of the log over a period."""

    start_date: date
    end_date: date
    total: int
    unique_users: int
    login_count: int
    donation_count: int
    by_action: list[ActionCount]
    rows: list[list[str]]
    truncated: bool = False


def _report_period(filters: ActivityLogFilters, today: date) -> tuple[date, date]:
    end = filters.end_date or today
    start = filters.start_date or min(end, today - timedelta(days=PDF_DEFAULT_DAYS))
    return start, end


def activity_report(db: Session, filters: ActivityLogFilters, *, now: datetime | None = None) -> ActivityReport:
    """Summarize the log for the PDF export.

    Without explicit dates the period is the last 30 days. Only the newest
    ``PDF_ROW_LIMIT`` entries are listed; the counts cover the whole period.
    """

    filters.validate()
    current = now or datetime.now(timezone.utc)
    start, end = _report_period(filters, current.date())
    scoped = ActivityLogFilters(
        action_type=filters.action_type,
        target_type=filters.target_type,
        user_role=filters.user_role,
        start_date=start,
        end_date=end,
        search=filters.search,
    )

    counts = (
        _apply_filters(
            db.query(ActivityLog.action_type, func.count(ActivityLog.id)).select_from(ActivityLog), scoped
        )
        .group_by(ActivityLog.action_type)
        .all()
    )
    by_action = sorted(
        (ActionCount(action_type=action_type, count=count) for action_type, count in counts),
        key=lambda item: (-item.count, item.action_type),
    )
    per_action = {item.action_type: item.count for item in by_action}
    unique_users = (
        _apply_filters(
            db.query(func.count(func.distinct(ActivityLog.actor_user_id))).select_from(ActivityLog), scoped
        ).scalar()
        or 0
    )
    total = sum(per_action.values())

    entries = (
        _apply_filters(_base_query(db), scoped)
        .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
        .limit(PDF_ROW_LIMIT)
        .all()
    )
    rows = [
        [
            entry.created_at.strftime("%Y-%m-%d %H:%M"),
            entry.actor.display_name if entry.actor else "N/A",
            (entry.actor.role if entry.actor else None) or entry.actor_role or "N/A",
            entry.action_type,
            describe(entry),
            entry.ip_address or "",
        ]
        for entry in entries
    ]
    return ActivityReport(
        start_date=start,
        end_date=end,
        total=total,
        unique_users=unique_users,
        login_count=per_action.get(ActivityAction.LOGIN.value, 0),
        donation_count=per_action.get(ActivityAction.DONATION_CREATED.value, 0),
        by_action=by_action,
        rows=rows,
        truncated=total > len(rows),
    )
