from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text, event
from sqlalchemy.orm import relationship

from charityhub.core.db import Base


class ImmutableRecordError(RuntimeError):
    """Raised when code attempts to change or remove an audit entry."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ActivityLog(Base):
    __tablename__ = "user_activity_logs"

    id = Column(Integer, primary_key=True)
    actor_user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    actor_role = Column(String(32), nullable=True)
    action_type = Column(String(64), nullable=False, index=True)
    description = Column(Text, nullable=True)
    target_type = Column(String(32), nullable=True, index=True)
    target_id = Column(Integer, nullable=True)
    details = Column(JSON, nullable=True)
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(String(512), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False, index=True)

    actor = relationship("User", back_populates="activity_logs")


@event.listens_for(ActivityLog, "before_update")
def _reject_update(mapper, connection, target: ActivityLog) -> None:
    raise ImmutableRecordError(f"Activity log entry {target.id} is append-only and cannot be modified")


@event.listens_for(ActivityLog, "before_delete")
def _reject_delete(mapper, connection, target: ActivityLog) -> None:
    raise ImmutableRecordError(f"Activity log entry {target.id} is append-only and cannot be deleted")
