from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from charityhub.core.db import Base


class ReportReason(str, enum.Enum):
    FRAUD = "fraud"
    FAKE_PROOF = "fake_proof"
    SCAM = "scam"
    FAKE_CHARITY = "fake_charity"
    MISUSE_OF_FUNDS = "misuse_of_funds"
    SPAM = "spam"
    HARASSMENT = "harassment"
    INAPPROPRIATE_CONTENT = "inappropriate_content"
    OTHER = "other"


class ReportSeverity(str, enum.Enum):
    PENDING = "pending"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ReportStatus(str, enum.Enum):
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"


TERMINAL_STATUSES = frozenset({ReportStatus.RESOLVED.value, ReportStatus.DISMISSED.value})

ReportEntityTypeColumn = Enum("user", "charity", "campaign", "donation", name="report_entity_type")
ReportReasonColumn = Enum(*(reason.value for reason in ReportReason), name="report_reason")
ReportSeverityColumn = Enum(*(severity.value for severity in ReportSeverity), name="report_severity")
ReportStatusColumn = Enum(*(status.value for status in ReportStatus), name="report_status")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Report(Base):
    __tablename__ = "reports"

    id = Column(Integer, primary_key=True)
    reporter_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    reporter_role = Column(String(32), nullable=True)
    reported_entity_type = Column(ReportEntityTypeColumn, nullable=False)
    reported_entity_id = Column(Integer, nullable=False)
    reason = Column(ReportReasonColumn, nullable=False)
    description = Column(Text, nullable=False)
    evidence_path = Column(String(512), nullable=True)
    severity = Column(ReportSeverityColumn, nullable=False, default=ReportSeverity.PENDING.value)
    status = Column(ReportStatusColumn, nullable=False, default=ReportStatus.PENDING.value, index=True)
    penalty_days = Column(Integer, nullable=True)
    admin_notes = Column(Text, nullable=True)
    reviewed_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    action_taken = Column(String(32), nullable=True)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    reporter = relationship("User", foreign_keys=[reporter_id], back_populates="reports_filed")
    reviewer = relationship("User", foreign_keys=[reviewed_by_id])

    __table_args__ = (Index("ix_reports_entity", "reported_entity_type", "reported_entity_id"),)
    __mapper_args__ = {"version_id_col": version}

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES
