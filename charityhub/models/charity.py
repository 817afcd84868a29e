from __future__ import annotations

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from charityhub.core.db import Base

CharityVerificationStatus = Enum("pending", "approved", "rejected", name="charity_verification_status")


class Charity(Base):
    __tablename__ = "charities"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    verification_status = Column(CharityVerificationStatus, nullable=False, default="pending")
    rejection_reason = Column(String(1000), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    owner = relationship("User", back_populates="charities")
    campaigns = relationship("Campaign", back_populates="charity")
