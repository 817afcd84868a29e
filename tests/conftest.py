from __future__ import annotations

import os
import tempfile
from collections.abc import Generator
from decimal import Decimal

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("ENABLE_SCHEDULER", "false")
os.environ.setdefault("EVIDENCE_DIR", tempfile.mkdtemp(prefix="charityhub-evidence-"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from charityhub.auth.deps import get_current_user
from charityhub.auth.security import hash_password
from charityhub.core.db import Base, get_db
from charityhub.main import app
from charityhub.models.campaign import Campaign
from charityhub.models.charity import Charity
from charityhub.models.donation import Donation
from charityhub.models.report import Report
from charityhub.models.user import ADMIN_ROLE, CHARITY_ADMIN_ROLE, DONOR_ROLE, User

SQLALCHEMY_TEST_URL = "sqlite+pysqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_TEST_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)

PASSWORD = "correct-horse-battery"


def override_get_db() -> Generator[Session, None, None]:
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def setup_database() -> Generator[None, None, None]:
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    session = TestingSessionLocal()
    try:
        yield session
        session.commit()
    finally:
        session.close()


@pytest.fixture()
def client(db_session: Session) -> Generator[TestClient, None, None]:
    app.dependency_overrides.clear()
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def authorize(client: TestClient):
    def _apply(user: User):
        app.dependency_overrides[get_current_user] = lambda: user

    yield _apply
    app.dependency_overrides.pop(get_current_user, None)


def _create_user(session: Session, email: str, full_name: str, role: str) -> User:
    user = User(
        email=email,
        full_name=full_name,
        hashed_password=hash_password(PASSWORD),
        role=role,
        is_active=True,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture()
def admin_user(db_session: Session) -> User:
    return _create_user(db_session, "admin@example.com", "Ada Admin", ADMIN_ROLE)


@pytest.fixture()
def donor_user(db_session: Session) -> User:
    return _create_user(db_session, "donor@example.com", "Dana Donor", DONOR_ROLE)


@pytest.fixture()
def charity_admin_user(db_session: Session) -> User:
    return _create_user(db_session, "owner@example.com", "Oscar Owner", CHARITY_ADMIN_ROLE)


@pytest.fixture()
def other_charity_admin(db_session: Session) -> User:
    return _create_user(db_session, "other-owner@example.com", "Olive Other", CHARITY_ADMIN_ROLE)


@pytest.fixture()
def charity(db_session: Session, charity_admin_user: User) -> Charity:
    record = Charity(name="Hope Foundation", owner_id=charity_admin_user.id, verification_status="pending")
    db_session.add(record)
    db_session.commit()
    db_session.refresh(record)
    return record


@pytest.fixture()
def campaign(db_session: Session, charity: Charity) -> Campaign:
    record = Campaign(title="Clean Water Drive", charity_id=charity.id, status="active")
    db_session.add(record)
    db_session.commit()
    db_session.refresh(record)
    return record


@pytest.fixture()
def donation(db_session: Session, donor_user: User, charity: Charity, campaign: Campaign) -> Donation:
    record = Donation(
        donor_id=donor_user.id,
        charity_id=charity.id,
        campaign_id=campaign.id,
        amount=Decimal("1500.00"),
        status="pending",
    )
    db_session.add(record)
    db_session.commit()
    db_session.refresh(record)
    return record


@pytest.fixture()
def make_report(db_session: Session):
    def _make(reporter: User, entity_type: str, entity_id: int, **overrides) -> Report:
        values = {
            "reporter_id": reporter.id,
            "reporter_role": reporter.role,
            "reported_entity_type": entity_type,
            "reported_entity_id": entity_id,
            "reason": "fraud",
            "description": "Collected money for a campaign that never existed.",
        }
        values.update(overrides)
        report = Report(**values)
        db_session.add(report)
        db_session.commit()
        db_session.refresh(report)
        return report

    return _make


@pytest.fixture()
def charity_report(make_report, donor_user: User, charity: Charity) -> Report:
    return make_report(donor_user, "charity", charity.id)


@pytest.fixture()
def password() -> str:
    return PASSWORD


@pytest.fixture()
def session_factory():
    return TestingSessionLocal
