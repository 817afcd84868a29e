from __future__ import annotations

import logging
from datetime import datetime

from charityhub.models.report import Report
from charityhub.models.user import User

logger = logging.getLogger(__name__)


def notify_report_submitted(report: Report) -> None:
    """Placeholder hook for alerting the moderation team about a new report."""

    logger.info(
        "report_submitted",
        extra={
            "report_id": report.id,
            "reporter_id": report.reporter_id,
            "reported_entity_type": report.reported_entity_type,
            "reported_entity_id": report.reported_entity_id,
            "reason": report.reason,
        },
    )


def notify_account_suspended(user: User, *, suspended_until: datetime, penalty_days: int, reason: str | None) -> None:
    """Placeholder for the suspension email/in-app notice."""

    logger.warning(
        "account_suspended",
        extra={
            "user_id": user.id,
            "email": user.email,
            "penalty_days": penalty_days,
            "suspended_until": suspended_until.isoformat(),
            "suspension_reason": reason,
        },
    )


def notify_account_reactivated(user: User) -> None:
    logger.info(
        "account_reactivated",
        extra={"user_id": user.id, "email": user.email},
    )
