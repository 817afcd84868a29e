from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import pytest

from charityhub.core.config import settings
from charityhub.models.activity_log import ActivityLog
from charityhub.models.report import Report
from charityhub.models.user import User
from charityhub.services.accounts import as_utc


def _reload(session, model, pk):
    session.expire_all()
    return session.get(model, pk)


def test_submit_report_starts_pending(client, authorize, db_session, donor_user, charity_admin_user):
    authorize(donor_user)

    response = client.post(
        "/reports",
        json={
            "target_type": "user",
            "target_id": charity_admin_user.id,
            "reason": "fraud",
            "description": "Asked me to wire money to a personal account.",
        },
    )
    assert response.status_code == 201, response.text
    body = response.json()
    assert body["status"] == "pending"
    assert body["severity"] == "pending"
    assert body["penalty_days"] is None
    assert body["evidence_url"] is None
    assert body["reporter"]["id"] == donor_user.id
    assert body["reporter_role"] == "donor"

    entry = db_session.query(ActivityLog).one()
    assert entry.action_type == "report_submitted"
    assert entry.target_type == "Report"
    assert entry.target_id == body["id"]

    mine = client.get("/reports/mine").json()
    assert [item["id"] for item in mine] == [body["id"]]


def test_submit_report_validates_target_and_description(client, authorize, donor_user):
    authorize(donor_user)

    missing = client.post(
        "/reports",
        json={"target_type": "campaign", "target_id": 999, "reason": "scam", "description": "This campaign is fake."},
    )
    assert missing.status_code == 404

    too_short = client.post(
        "/reports",
        json={"target_type": "user", "target_id": donor_user.id, "reason": "spam", "description": "spam"},
    )
    assert too_short.status_code == 422

    bad_reason = client.post(
        "/reports",
        json={"target_type": "user", "target_id": donor_user.id, "reason": "rude", "description": "Sent rude messages."},
    )
    assert bad_reason.status_code == 422


def test_approve_with_suggested_penalty_suspends_account(
    client, authorize, db_session, admin_user, donor_user, charity_admin_user, make_report
):
    report = make_report(donor_user, "user", charity_admin_user.id)
    authorize(admin_user)

    assert client.post(f"/admin/reports/{report.id}/review").json()["status"] == "under_review"
    response = client.post(
        f"/admin/reports/{report.id}/approve",
        json={"severity": "high", "admin_notes": "Verified with bank statements."},
    )
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["report"]["status"] == "resolved"
    assert body["report"]["penalty_days"] == 15
    assert body["report"]["severity"] == "high"
    assert body["report"]["action_taken"] == "suspended"
    assert body["report"]["reviewer"]["id"] == admin_user.id

    stored = _reload(db_session, Report, report.id)
    account = db_session.get(User, charity_admin_user.id)
    assert account.status == "suspended"
    assert as_utc(account.suspended_until) == as_utc(stored.reviewed_at) + timedelta(days=15)
    assert account.suspension_level == "high"

    suspensions = db_session.query(ActivityLog).filter_by(action_type="user_suspended").all()
    assert len(suspensions) == 1
    assert suspensions[0].target_type == "User"
    assert suspensions[0].target_id == charity_admin_user.id
    reviewed = db_session.query(ActivityLog).filter_by(action_type="report_reviewed").one()
    assert reviewed.target_id == report.id


def test_reject_dismisses_without_suspension(
    client, authorize, db_session, admin_user, donor_user, charity_admin_user, make_report
):
    report = make_report(donor_user, "user", charity_admin_user.id)
    authorize(admin_user)

    response = client.post(f"/admin/reports/{report.id}/reject", json={"admin_notes": "insufficient evidence"})
    assert response.status_code == 200, response.text

    stored = _reload(db_session, Report, report.id)
    assert stored.status == "dismissed"
    assert stored.action_taken == "dismissed"
    assert stored.penalty_days is None
    assert stored.reviewed_by_id == admin_user.id
    assert stored.reviewed_at is not None
    assert stored.admin_notes == "insufficient evidence"
    assert db_session.get(User, charity_admin_user.id).status == "active"
    assert db_session.query(ActivityLog).filter_by(action_type="user_suspended").count() == 0


@pytest.mark.parametrize(
    "payload",
    [
        {"admin_notes": ""},
        {"admin_notes": "   "},
        {"admin_notes": "Confirmed fraud.", "penalty_days": 0},
        {"admin_notes": "Confirmed fraud.", "penalty_days": 91},
        {"admin_notes": "Confirmed fraud.", "severity": "pending"},
        {"admin_notes": "Confirmed fraud.", "severity": "extreme"},
    ],
)
def test_invalid_approval_leaves_report_untouched(
    client, authorize, db_session, admin_user, donor_user, charity_admin_user, make_report, payload
):
    report = make_report(donor_user, "user", charity_admin_user.id)
    authorize(admin_user)

    response = client.post(f"/admin/reports/{report.id}/approve", json=payload)
    assert response.status_code == 422

    stored = _reload(db_session, Report, report.id)
    assert stored.status == "pending"
    assert stored.penalty_days is None
    assert stored.reviewed_by_id is None
    assert db_session.get(User, charity_admin_user.id).status == "active"


def test_reject_requires_ten_characters_of_notes(client, authorize, db_session, admin_user, charity_report):
    authorize(admin_user)

    response = client.post(f"/admin/reports/{charity_report.id}/reject", json={"admin_notes": "  no proof  "})
    assert response.status_code == 422
    assert _reload(db_session, Report, charity_report.id).status == "pending"


def test_non_admin_cannot_decide(client, authorize, db_session, charity_admin_user, charity_report):
    authorize(charity_admin_user)

    approve = client.post(
        f"/admin/reports/{charity_report.id}/approve",
        json={"admin_notes": "Looks bad", "penalty_days": 3},
    )
    assert approve.status_code == 403
    reject = client.post(f"/admin/reports/{charity_report.id}/reject", json={"admin_notes": "Not convincing"})
    assert reject.status_code == 403
    assert client.delete(f"/admin/reports/{charity_report.id}").status_code == 403
    assert client.get("/admin/reports").status_code == 403
    assert _reload(db_session, Report, charity_report.id).status == "pending"


def test_terminal_reports_accept_no_transitions(client, authorize, admin_user, charity_report):
    authorize(admin_user)
    assert client.post(
        f"/admin/reports/{charity_report.id}/reject", json={"admin_notes": "Duplicate of an older report"}
    ).status_code == 200

    assert client.post(
        f"/admin/reports/{charity_report.id}/approve", json={"admin_notes": "Changed my mind"}
    ).status_code == 409
    assert client.post(
        f"/admin/reports/{charity_report.id}/reject", json={"admin_notes": "Dismissing once more"}
    ).status_code == 409
    assert client.post(f"/admin/reports/{charity_report.id}/review").status_code == 409


def test_charity_report_suspends_owner_with_explicit_days(
    client, authorize, db_session, admin_user, charity_admin_user, charity_report
):
    authorize(admin_user)

    response = client.post(
        f"/admin/reports/{charity_report.id}/approve",
        json={"admin_notes": "Fake registration papers.", "penalty_days": 30, "severity": "critical"},
    )
    assert response.status_code == 200, response.text
    assert response.json()["report"]["penalty_days"] == 30
    assert response.json()["report"]["severity"] == "critical"

    stored = _reload(db_session, Report, charity_report.id)
    owner = db_session.get(User, charity_admin_user.id)
    assert as_utc(owner.suspended_until) == as_utc(stored.reviewed_at) + timedelta(days=30)


def test_campaign_and_donation_reports_resolve_to_accounts(
    client, authorize, db_session, admin_user, donor_user, charity_admin_user, campaign, donation, make_report
):
    campaign_report = make_report(donor_user, "campaign", campaign.id, reason="misuse_of_funds")
    donation_report = make_report(charity_admin_user, "donation", donation.id, reason="fake_proof")
    authorize(admin_user)

    first = client.post(
        f"/admin/reports/{campaign_report.id}/approve",
        json={"admin_notes": "Funds were diverted.", "severity": "low"},
    )
    assert first.json()["report"]["penalty_days"] == 3
    second = client.post(f"/admin/reports/{donation_report.id}/approve", json={"admin_notes": "Receipt forged."})
    assert second.json()["report"]["penalty_days"] == 7

    db_session.expire_all()
    assert db_session.get(User, charity_admin_user.id).status == "suspended"
    assert db_session.get(User, donor_user.id).status == "suspended"


def test_approve_fails_when_no_account_is_responsible(
    client, authorize, db_session, admin_user, donor_user, charity, make_report
):
    charity.owner_id = None
    db_session.commit()
    report = make_report(donor_user, "charity", charity.id)
    authorize(admin_user)

    response = client.post(f"/admin/reports/{report.id}/approve", json={"admin_notes": "Confirmed scam."})
    assert response.status_code == 404
    assert _reload(db_session, Report, report.id).status == "pending"


def test_admin_cannot_approve_report_against_themselves(
    client, authorize, db_session, admin_user, donor_user, make_report
):
    report = make_report(donor_user, "user", admin_user.id)
    authorize(admin_user)

    response = client.post(
        f"/admin/reports/{report.id}/approve",
        json={"admin_notes": "Confirmed abuse.", "penalty_days": 90},
    )
    assert response.status_code == 400
    assert "own account" in response.json()["detail"]
    reloaded = _reload(db_session, Report, report.id)
    assert reloaded.status == "pending"
    assert reloaded.reviewed_by_id is None
    admin = db_session.get(User, admin_user.id)
    assert admin.status == "active"
    assert admin.suspended_until is None
    assert db_session.query(ActivityLog).filter_by(action_type="user_suspended").count() == 0

def test_delete_removes_report_and_evidence(client, authorize, db_session, admin_user, charity_report):
    evidence_file = Path(settings.EVIDENCE_DIR) / f"report-{charity_report.id}.png"
    evidence_file.parent.mkdir(parents=True, exist_ok=True)
    evidence_file.write_bytes(b"\x89PNG")
    charity_report.evidence_path = evidence_file.name
    db_session.commit()
    authorize(admin_user)

    detail = client.get(f"/admin/reports/{charity_report.id}").json()
    assert detail["report"]["evidence_url"].endswith(f"/static/evidence/{evidence_file.name}")

    response = client.delete(f"/admin/reports/{charity_report.id}")
    assert response.status_code == 204
    assert not evidence_file.exists()
    assert db_session.query(Report).filter_by(id=charity_report.id).first() is None

    entry = db_session.query(ActivityLog).filter_by(action_type="report_deleted").one()
    assert entry.target_id == charity_report.id
    assert client.get(f"/admin/reports/{charity_report.id}").status_code == 404


def test_list_filters_and_search(client, authorize, admin_user, donor_user, charity, campaign, make_report):
    make_report(donor_user, "charity", charity.id, reason="scam", description="Unregistered charity asking for cash.")
    make_report(donor_user, "campaign", campaign.id, reason="spam", description="Campaign posts spam links daily.")
    make_report(donor_user, "campaign", campaign.id, reason="scam", description="Photos were copied from the news.")
    authorize(admin_user)

    everything = client.get("/admin/reports").json()
    assert everything["total"] == 3
    assert everything["items"][0]["description"] == "Photos were copied from the news."

    scams = client.get("/admin/reports", params={"reason": "scam", "entity_type": "campaign"}).json()
    assert scams["total"] == 1
    searched = client.get("/admin/reports", params={"search": "SPAM"}).json()
    assert [item["reason"] for item in searched["items"]] == ["spam"]
    assert client.get("/admin/reports", params={"search": "%"}).json()["total"] == 0
    assert client.get("/admin/reports", params={"search": "_"}).json()["total"] == 0
    paged = client.get("/admin/reports", params={"limit": 1, "offset": 1}).json()
    assert paged["total"] == 3
    assert len(paged["items"]) == 1
    assert client.get("/admin/reports", params={"status": "archived"}).status_code == 422


def test_statistics_match_live_counts(client, authorize, admin_user, donor_user, charity, make_report):
    for _ in range(3):
        make_report(donor_user, "charity", charity.id)
    make_report(donor_user, "charity", charity.id, reason="spam", status="dismissed", admin_notes="Spam submission")
    authorize(admin_user)

    stats = client.get("/admin/reports/statistics").json()
    assert stats["total"] == 4
    assert stats["by_status"] == {"pending": 3, "under_review": 0, "resolved": 0, "dismissed": 1}
    assert sum(stats["by_status"].values()) == stats["total"]
    assert stats["by_reason"] == {"fraud": 3, "spam": 1}
    assert len(stats["recent"]) == 4


def test_detail_includes_review_context(
    client, authorize, db_session, admin_user, donor_user, charity_admin_user, charity, make_report
):
    older = make_report(donor_user, "charity", charity.id)
    authorize(admin_user)
    client.post(f"/admin/reports/{older.id}/approve", json={"admin_notes": "Confirmed.", "penalty_days": 2})
    client.post(f"/admin/users/{charity_admin_user.id}/activate")
    report = make_report(donor_user, "charity", charity.id, reason="scam")

    response = client.get(f"/admin/reports/{report.id}")
    assert response.status_code == 200
    body = response.json()
    assert body["reported_entity"]["label"] == "Hope Foundation"
    assert body["reported_entity"]["account_id"] == charity_admin_user.id
    assert body["context"]["entity_report_count"] == 2
    assert body["context"]["prior_suspensions"] == 1
    assert body["context"]["suggested_penalty_days"] == {"critical": 7, "high": 15, "low": 3, "medium": 7}
