from __future__ import annotations

from sqlalchemy.exc import OperationalError

from charityhub.models.activity_log import ActivityLog
from charityhub.models.donation import Donation
from charityhub.services import activity_log


def test_confirm_records_exactly_one_entry(client, authorize, db_session, charity_admin_user, donation):
    authorize(charity_admin_user)

    response = client.post(f"/donations/{donation.id}/confirm")
    assert response.status_code == 200, response.text
    assert response.json()["status"] == "confirmed"

    entries = db_session.query(ActivityLog).all()
    assert len(entries) == 1
    entry = entries[0]
    assert entry.action_type == "donation_confirmed"
    assert entry.target_type == "Donation"
    assert entry.target_id == donation.id
    assert entry.actor_user_id == charity_admin_user.id
    assert entry.details["amount"] == "1500.00"
    assert entry.user_agent == "testclient"


def test_confirm_succeeds_when_audit_write_fails(client, authorize, db_session, admin_user, donation, monkeypatch):
    def _boom(db, entry):
        raise OperationalError("INSERT INTO user_activity_logs", {}, Exception("disk I/O error"))

    monkeypatch.setattr(activity_log, "_persist", _boom)
    authorize(admin_user)

    response = client.post(f"/donations/{donation.id}/confirm")
    assert response.status_code == 200, response.text

    db_session.expire_all()
    assert db_session.get(Donation, donation.id).status == "confirmed"
    assert db_session.query(ActivityLog).count() == 0


def test_other_charity_cannot_manage_donation(client, authorize, db_session, other_charity_admin, donation):
    authorize(other_charity_admin)

    response = client.post(f"/donations/{donation.id}/confirm")
    assert response.status_code == 403
    db_session.expire_all()
    assert db_session.get(Donation, donation.id).status == "pending"


def test_donor_role_is_refused(client, authorize, donor_user, donation):
    authorize(donor_user)
    assert client.post(f"/donations/{donation.id}/confirm").status_code == 403


def test_reject_records_reason(client, authorize, db_session, charity_admin_user, donation):
    authorize(charity_admin_user)

    response = client.post(f"/donations/{donation.id}/reject", json={"reason": "Receipt is unreadable"})
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "rejected"
    assert body["rejection_reason"] == "Receipt is unreadable"

    entry = db_session.query(ActivityLog).one()
    assert entry.action_type == "donation_rejected"
    assert activity_log.describe(entry) == f"Rejected donation #{donation.id} - Reason: Receipt is unreadable"


def test_decided_donation_cannot_be_decided_again(client, authorize, admin_user, donation):
    authorize(admin_user)
    assert client.post(f"/donations/{donation.id}/confirm").status_code == 200
    assert client.post(f"/donations/{donation.id}/reject", json={}).status_code == 409


def test_unknown_donation_returns_404(client, authorize, admin_user):
    authorize(admin_user)
    assert client.post("/donations/4040/confirm").status_code == 404
