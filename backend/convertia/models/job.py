"""
Job models
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from convertia.core.clock import utcnow
from convertia.core.database import Base


class Job(Base):
    """Job opening published on the job board"""

    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False, index=True)
    department = Column(String(255))
    location = Column(String(255))

    description = Column(Text)
    requirements = Column(Text)
    responsibilities = Column(Text)

    type = Column(String(50), default="full-time")  # full-time, part-time, contract, internship, temporary
    status = Column(String(20), default="open", index=True)  # open, closed, draft

    campaign_id = Column(Integer, ForeignKey("campaigns.id", ondelete="SET NULL"), index=True)

    created_by = Column(Integer, ForeignKey("users.id"))
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    campaign = relationship("Campaign", back_populates="jobs")
    applications = relationship("Application", back_populates="job")
