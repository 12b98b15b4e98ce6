"""Audit log model."""

from sqlalchemy import Column, String

from app.db.base import Base, JSONType


class AuditLog(Base):
    """Append-only record of a privileged or state-changing action."""

    __tablename__ = "audit_logs"

    actor_uid = Column(String(64), nullable=False, index=True)
    action = Column(String(50), nullable=False, index=True)
    target_type = Column(String(30), nullable=False)
    target_id = Column(String(64), nullable=False, index=True)
    details = Column(JSONType, default=dict)  # "metadata" is reserved by SQLAlchemy

    def __repr__(self):
        return f"<AuditLog {self.action} {self.target_type}:{self.target_id}>"
