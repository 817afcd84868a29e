from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from charityhub.core.db import Base


class Campaign(Base):
    __tablename__ = "campaigns"

    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False)
    charity_id = Column(Integer, ForeignKey("charities.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default="draft")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    charity = relationship("Charity", back_populates="campaigns")
