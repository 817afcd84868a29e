from __future__ import annotations

import enum

from sqlalchemy import Boolean, Column, DateTime, Enum, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from charityhub.core.db import Base

ADMIN_ROLE = "admin"
DONOR_ROLE = "donor"
CHARITY_ADMIN_ROLE = "charity_admin"


class RoleName(str, enum.Enum):
    ADMIN = ADMIN_ROLE
    DONOR = DONOR_ROLE
    CHARITY_ADMIN = CHARITY_ADMIN_ROLE


UserRole = Enum(ADMIN_ROLE, DONOR_ROLE, CHARITY_ADMIN_ROLE, name="user_role")
AccountStatus = Enum("active", "suspended", name="account_status")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    full_name = Column(String(255), nullable=True)
    hashed_password = Column(String(255), nullable=False)
    role = Column(UserRole, nullable=False, default=DONOR_ROLE)
    status = Column(AccountStatus, nullable=False, default="active")
    suspended_until = Column(DateTime(timezone=True), nullable=True, index=True)
    suspension_reason = Column(Text, nullable=True)
    suspension_level = Column(String(20), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    last_login_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    charities = relationship("Charity", back_populates="owner")
    donations = relationship("Donation", back_populates="donor")
    activity_logs = relationship("ActivityLog", back_populates="actor", viewonly=True)
    reports_filed = relationship("Report", foreign_keys="Report.reporter_id", back_populates="reporter")

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE

    @property
    def display_name(self) -> str:
        return self.full_name or self.email
