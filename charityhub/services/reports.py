"""Report intake and the admin review workflow.

A report moves ``pending -> under_review -> resolved | dismissed``; the middle
step is advisory and admins may decide straight from ``pending``. Decisions
are final. Approval suspends the account responsible for the reported entity
in the same commit that resolves the report.
"""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Query, Session, joinedload
from sqlalchemy.orm.exc import StaleDataError

from charityhub.core.db import LIKE_ESCAPE, contains_pattern
from charityhub.models.activity_log import ActivityLog
from charityhub.models.report import Report, ReportReason, ReportSeverity, ReportStatus
from charityhub.models.targets import EntityType, TargetRef, TargetType
from charityhub.models.user import User
from charityhub.schemas.report import (
    ReportCreate,
    ReportDetail,
    ReportOut,
    ReportReviewContext,
    ReportStatistics,
    ReportUserSummary,
)
from charityhub.services import accounts, activity_log, evidence, targets
from charityhub.services.activity_log import ActivityAction
from charityhub.services.notifications import notify_account_suspended, notify_report_submitted

logger = logging.getLogger(__name__)

SEVERITY_PENALTY_DAYS = {
    ReportSeverity.LOW.value: 3,
    ReportSeverity.MEDIUM.value: 7,
    ReportSeverity.HIGH.value: 15,
}
DEFAULT_PENALTY_DAYS = 7
REVIEWABLE_SEVERITIES = frozenset(
    {
        ReportSeverity.LOW.value,
        ReportSeverity.MEDIUM.value,
        ReportSeverity.HIGH.value,
        ReportSeverity.CRITICAL.value,
    }
)
MIN_REJECT_NOTES = 10
RECENT_REPORTS = 5
RECENT_ACTIVITY = 5


def suggest_penalty_days(severity: ReportSeverity | str | None) -> int:
    if isinstance(severity, ReportSeverity):
        severity = severity.value
    return SEVERITY_PENALTY_DAYS.get(severity, DEFAULT_PENALTY_DAYS)


def _user_summary(user: User | None) -> ReportUserSummary | None:
    if user is None:
        return None
    return ReportUserSummary(id=user.id, name=user.display_name, email=user.email, role=user.role)


def serialize(report: Report) -> ReportOut:
    return ReportOut(
        id=report.id,
        reporter=_user_summary(report.reporter),
        reporter_role=report.reporter_role,
        reported_entity_type=report.reported_entity_type,
        reported_entity_id=report.reported_entity_id,
        reason=report.reason,
        description=report.description,
        evidence_path=report.evidence_path,
        evidence_url=evidence.evidence_url(report.evidence_path),
        severity=report.severity,
        status=report.status,
        penalty_days=report.penalty_days,
        admin_notes=report.admin_notes,
        reviewer=_user_summary(report.reviewer),
        reviewed_at=report.reviewed_at,
        action_taken=report.action_taken,
        created_at=report.created_at,
    )


def _require_admin(actor: User) -> None:
    if not actor.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin privileges required")


def _query(db: Session) -> Query:
    return db.query(Report).options(joinedload(Report.reporter), joinedload(Report.reviewer))


def _load_report(db: Session, report_id: int) -> Report:
    report = _query(db).filter(Report.id == report_id).first()
    if not report:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Report not found")
    return report


def _ensure_open(report: Report) -> None:
    if report.is_terminal:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Report has already been {report.status}",
        )


def _commit_decision(db: Session, report: Report) -> None:
    try:
        db.commit()
    except StaleDataError:
        db.rollback()
        logger.warning("report_concurrent_update", extra={"report_id": report.id})
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Report was modified by another reviewer",
        )


def submit(db: Session, reporter: User, payload: ReportCreate, *, meta: dict | None = None) -> Report:
    entity_type = EntityType(payload.target_type)
    entity = targets.require_entity(db, entity_type, payload.target_id)

    report = Report(
        reporter_id=reporter.id,
        reporter_role=reporter.role,
        reported_entity_type=entity_type.value,
        reported_entity_id=payload.target_id,
        reason=ReportReason(payload.reason).value,
        description=payload.description.strip(),
        severity=ReportSeverity.PENDING.value,
        status=ReportStatus.PENDING.value,
    )
    db.add(report)
    db.commit()
    db.refresh(report)

    activity_log.record(
        db,
        reporter,
        ActivityAction.REPORT_SUBMITTED,
        target=TargetRef(TargetType.REPORT, report.id),
        details={
            "report_id": report.id,
            "reported_entity": f"{entity_type.value} #{payload.target_id}",
            "reported_entity_label": targets.entity_label(entity_type, entity),
            "reason": report.reason,
        },
        **(meta or {}),
    )
    notify_report_submitted(report)
    return report


def my_reports(db: Session, reporter: User) -> list[Report]:
    return (
        _query(db)
        .filter(Report.reporter_id == reporter.id)
        .order_by(Report.created_at.desc(), Report.id.desc())
        .all()
    )


def start_review(db: Session, report_id: int, admin: User, *, meta: dict | None = None) -> Report:
    _require_admin(admin)
    report = _load_report(db, report_id)
    _ensure_open(report)
    if report.status == ReportStatus.UNDER_REVIEW.value:
        return report

    report.status = ReportStatus.UNDER_REVIEW.value
    _commit_decision(db, report)
    activity_log.record(
        db,
        admin,
        ActivityAction.REPORT_REVIEW_STARTED,
        target=TargetRef(TargetType.REPORT, report.id),
        details={"report_id": report.id},
        **(meta or {}),
    )
    return report


def _resolve_severity(severity: ReportSeverity | str | None) -> str | None:
    if severity is None:
        return None
    value = severity.value if isinstance(severity, ReportSeverity) else str(severity)
    if value not in REVIEWABLE_SEVERITIES:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Severity must be one of: low, medium, high, critical",
        )
    return value


def approve(
    db: Session,
    report_id: int,
    admin: User,
    *,
    admin_notes: str,
    penalty_days: int | None = None,
    severity: ReportSeverity | str | None = None,
    now: datetime | None = None,
    meta: dict | None = None,
) -> tuple[Report, datetime]:
    """Resolve ``report_id`` and suspend the responsible account.

    Returns the report and the end of the suspension window.
    """

    _require_admin(admin)
    report = _load_report(db, report_id)
    _ensure_open(report)

    notes = (admin_notes or "").strip()
    if not notes:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="Admin notes are required")
    chosen_severity = _resolve_severity(severity)
    if penalty_days is None:
        days = suggest_penalty_days(chosen_severity or report.severity)
    else:
        days = accounts.validate_penalty_days(penalty_days)

    entity = targets.load_entity(db, report.reported_entity_type, report.reported_entity_id)
    account = targets.responsible_account(report.reported_entity_type, entity)
    if account is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No account found for the reported entity",
        )
    if account.id == admin.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot suspend your own account")

    reviewed_at = now or accounts.now_utc()
    reason = f"Report #{report.id} ({report.reason}): {notes}"
    report.status = ReportStatus.RESOLVED.value
    report.penalty_days = days
    if chosen_severity:
        report.severity = chosen_severity
    report.admin_notes = notes
    report.reviewed_by_id = admin.id
    report.reviewed_at = reviewed_at
    report.action_taken = "suspended"
    suspended_until = accounts.suspend(account, days, reason=reason, level=report.severity, now=reviewed_at)
    _commit_decision(db, report)
    db.refresh(report)

    logger.info(
        "report_approved",
        extra={
            "report_id": report.id,
            "admin_id": admin.id,
            "suspended_user_id": account.id,
            "penalty_days": days,
        },
    )
    activity_log.record(
        db,
        admin,
        ActivityAction.REPORT_REVIEWED,
        target=TargetRef(TargetType.REPORT, report.id),
        details={
            "report_id": report.id,
            "review_action": "suspended",
            "severity": report.severity,
            "penalty_days": days,
            "reported_entity_type": report.reported_entity_type,
            "reported_entity_id": report.reported_entity_id,
        },
        **(meta or {}),
    )
    activity_log.record(
        db,
        admin,
        ActivityAction.USER_SUSPENDED,
        target=TargetRef(TargetType.USER, account.id),
        details={
            "suspended_user_id": account.id,
            "suspended_user_name": account.display_name,
            "report_id": report.id,
            "reason": report.reason,
            "penalty_days": days,
            "suspended_until": suspended_until.isoformat(),
        },
        **(meta or {}),
    )
    notify_account_suspended(account, suspended_until=suspended_until, penalty_days=days, reason=reason)
    return report, suspended_until


def reject(
    db: Session,
    report_id: int,
    admin: User,
    *,
    admin_notes: str,
    now: datetime | None = None,
    meta: dict | None = None,
) -> Report:
    _require_admin(admin)
    report = _load_report(db, report_id)
    _ensure_open(report)

    notes = (admin_notes or "").strip()
    if len(notes) < MIN_REJECT_NOTES:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Admin notes must be at least {MIN_REJECT_NOTES} characters when dismissing a report",
        )

    report.status = ReportStatus.DISMISSED.value
    report.admin_notes = notes
    report.reviewed_by_id = admin.id
    report.reviewed_at = now or accounts.now_utc()
    report.action_taken = "dismissed"
    _commit_decision(db, report)
    db.refresh(report)

    logger.info("report_dismissed", extra={"report_id": report.id, "admin_id": admin.id})
    activity_log.record(
        db,
        admin,
        ActivityAction.REPORT_REVIEWED,
        target=TargetRef(TargetType.REPORT, report.id),
        details={"report_id": report.id, "review_action": "dismissed"},
        **(meta or {}),
    )
    return report


def delete(db: Session, report_id: int, admin: User, *, meta: dict | None = None) -> None:
    _require_admin(admin)
    report = _load_report(db, report_id)
    details = {
        "report_id": report.id,
        "status": report.status,
        "reported_entity_type": report.reported_entity_type,
        "reported_entity_id": report.reported_entity_id,
    }
    evidence_path = report.evidence_path

    db.delete(report)
    db.commit()
    evidence.delete_evidence(evidence_path)

    logger.info("report_deleted", extra={"report_id": details["report_id"], "admin_id": admin.id})
    activity_log.record(
        db,
        admin,
        ActivityAction.REPORT_DELETED,
        target=TargetRef(TargetType.REPORT, details["report_id"]),
        details=details,
        **(meta or {}),
    )


def list_reports(
    db: Session,
    *,
    status_filter: ReportStatus | str | None = None,
    entity_type: EntityType | str | None = None,
    reason: ReportReason | str | None = None,
    search: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> tuple[list[Report], int]:
    query = _query(db)
    if status_filter:
        query = query.filter(Report.status == ReportStatus(status_filter).value)
    if entity_type:
        query = query.filter(Report.reported_entity_type == EntityType(entity_type).value)
    if reason:
        query = query.filter(Report.reason == ReportReason(reason).value)
    if search:
        query = query.filter(func.lower(Report.description).like(contains_pattern(search), escape=LIKE_ESCAPE))

    total = query.order_by(None).count()
    items = query.order_by(Report.created_at.desc(), Report.id.desc()).offset(offset).limit(limit).all()
    return items, total


def statistics(db: Session) -> ReportStatistics:
    by_status = {state.value: 0 for state in ReportStatus}
    for state, count in db.query(Report.status, func.count(Report.id)).group_by(Report.status).all():
        by_status[state] = count
    by_reason = {
        reason: count
        for reason, count in db.query(Report.reason, func.count(Report.id)).group_by(Report.reason).all()
    }
    recent = _query(db).order_by(Report.created_at.desc(), Report.id.desc()).limit(RECENT_REPORTS).all()
    return ReportStatistics(
        total=sum(by_status.values()),
        by_status=by_status,
        by_reason=by_reason,
        recent=[serialize(report) for report in recent],
    )


def get_report_detail(db: Session, report_id: int) -> ReportDetail:
    report = _load_report(db, report_id)
    summary = targets.summarize(db, report.reported_entity_type, report.reported_entity_id)

    entity_report_count = (
        db.query(func.count(Report.id))
        .filter(
            Report.reported_entity_type == report.reported_entity_type,
            Report.reported_entity_id == report.reported_entity_id,
        )
        .scalar()
        or 0
    )
    prior_suspensions = 0
    recent_activity: list[ActivityLog] = []
    if summary and summary.account_id is not None:
        prior_suspensions = (
            db.query(func.count(ActivityLog.id))
            .filter(
                ActivityLog.action_type == ActivityAction.USER_SUSPENDED.value,
                ActivityLog.target_type == TargetType.USER.value,
                ActivityLog.target_id == summary.account_id,
            )
            .scalar()
            or 0
        )
        recent_activity = activity_log.recent_for_actor(db, summary.account_id, limit=RECENT_ACTIVITY)

    return ReportDetail(
        report=serialize(report),
        reported_entity=summary,
        context=ReportReviewContext(
            entity_report_count=entity_report_count,
            prior_suspensions=prior_suspensions,
            suggested_penalty_days={
                severity: suggest_penalty_days(severity) for severity in sorted(REVIEWABLE_SEVERITIES)
            },
            recent_activity=[activity_log.to_schema(entry) for entry in recent_activity],
        ),
    )
