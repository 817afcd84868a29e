from __future__ import annotations

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from charityhub.core.db import Base

DonationStatus = Enum("pending", "confirmed", "rejected", name="donation_status")


class Donation(Base):
    __tablename__ = "donations"

    id = Column(Integer, primary_key=True)
    donor_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    charity_id = Column(Integer, ForeignKey("charities.id", ondelete="CASCADE"), nullable=False, index=True)
    campaign_id = Column(Integer, ForeignKey("campaigns.id", ondelete="SET NULL"), nullable=True, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    status = Column(DonationStatus, nullable=False, default="pending")
    rejection_reason = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    donor = relationship("User", back_populates="donations")
    charity = relationship("Charity")
    campaign = relationship("Campaign")
