"""
Audit logging models
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from convertia.core.clock import utcnow
from convertia.core.database import Base


class AuditLog(Base):
    """Audit log for tracking console actions"""

    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)

    # User who performed the action (empty for public actions)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), index=True)

    # Action details
    action = Column(String(100), nullable=False, index=True)  # status_change, recruiter_assigned, ...
    resource_type = Column(String(50), nullable=False, index=True)  # application, candidate, ...
    resource_id = Column(Integer, index=True)

    details = Column(JSON)

    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)

    user = relationship("User")
