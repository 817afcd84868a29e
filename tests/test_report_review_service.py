from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from fastapi import HTTPException

from charityhub.models.activity_log import ActivityLog
from charityhub.models.report import Report
from charityhub.models.user import User
from charityhub.services import reports
from charityhub.services.accounts import as_utc


@pytest.mark.parametrize(
    ("severity", "days"),
    [("low", 3), ("medium", 7), ("high", 15), ("critical", 7), ("pending", 7), (None, 7)],
)
def test_suggest_penalty_days(severity, days):
    assert reports.suggest_penalty_days(severity) == days


def test_approve_sets_every_review_field(db_session, admin_user, donor_user, charity_admin_user, make_report):
    report = make_report(donor_user, "user", charity_admin_user.id)
    reviewed_at = datetime(2026, 6, 1, 10, 30, tzinfo=timezone.utc)

    resolved, suspended_until = reports.approve(
        db_session,
        report.id,
        admin_user,
        admin_notes="  Confirmed by payment processor.  ",
        severity="medium",
        now=reviewed_at,
    )

    assert resolved.status == "resolved"
    assert resolved.admin_notes == "Confirmed by payment processor."
    assert resolved.penalty_days == 7
    assert resolved.reviewed_by_id == admin_user.id
    assert as_utc(resolved.reviewed_at) == reviewed_at
    assert suspended_until == reviewed_at + timedelta(days=7)
    account = db_session.get(User, charity_admin_user.id)
    assert as_utc(account.suspended_until) == suspended_until
    assert "Report #" in account.suspension_reason


def test_non_admin_is_refused_before_lookup(db_session, donor_user):
    with pytest.raises(HTTPException) as excinfo:
        reports.approve(db_session, 12345, donor_user, admin_notes="Confirmed.")
    assert excinfo.value.status_code == 403


def test_unknown_report_is_not_found(db_session, admin_user):
    with pytest.raises(HTTPException) as excinfo:
        reports.reject(db_session, 12345, admin_user, admin_notes="No such report exists")
    assert excinfo.value.status_code == 404


def test_start_review_is_advisory(db_session, admin_user, charity_report):
    reviewed = reports.start_review(db_session, charity_report.id, admin_user)
    assert reviewed.status == "under_review"
    assert reviewed.reviewed_by_id is None
    assert reviewed.reviewed_at is None

    again = reports.start_review(db_session, charity_report.id, admin_user)
    assert again.status == "under_review"
    assert db_session.query(ActivityLog).filter_by(action_type="report_review_started").count() == 1


def test_concurrent_decision_is_a_conflict(
    db_session, session_factory, admin_user, donor_user, charity_admin_user, make_report
):
    report = make_report(donor_user, "user", charity_admin_user.id)
    first = session_factory()
    second = session_factory()
    try:
        stale = first.get(Report, report.id)
        assert stale.status == "pending"

        reports.reject(second, report.id, admin_user, admin_notes="Duplicate of report #1")

        with pytest.raises(HTTPException) as excinfo:
            reports.approve(first, report.id, admin_user, admin_notes="Confirmed fraud.", penalty_days=5)
        assert excinfo.value.status_code == 409
    finally:
        first.close()
        second.close()

    db_session.expire_all()
    assert db_session.get(Report, report.id).status == "dismissed"
    assert db_session.get(User, charity_admin_user.id).status == "active"


def test_decided_reports_satisfy_review_invariants(
    db_session, admin_user, donor_user, charity_admin_user, charity, campaign, make_report
):
    approved = make_report(donor_user, "campaign", campaign.id)
    dismissed = make_report(donor_user, "charity", charity.id)
    reports.approve(db_session, approved.id, admin_user, admin_notes="Misused funds.", penalty_days=12)
    reports.reject(db_session, dismissed.id, admin_user, admin_notes="Charity documents check out.")

    db_session.expire_all()
    for report in db_session.query(Report).filter(Report.status.in_(["resolved", "dismissed"])).all():
        assert report.reviewed_by_id is not None
        assert report.reviewed_at is not None
        assert report.admin_notes
        if report.action_taken == "suspended":
            assert report.penalty_days >= 1
            owner = db_session.get(User, charity_admin_user.id)
            assert as_utc(owner.suspended_until) == as_utc(report.reviewed_at) + timedelta(days=report.penalty_days)
        else:
            assert report.status == "dismissed"
            assert report.penalty_days is None

    stats = reports.statistics(db_session)
    assert stats.total == db_session.query(Report).count()
    assert sum(stats.by_status.values()) == stats.total
