"""
Recruiting campaign models
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, Date, ForeignKey
from sqlalchemy.orm import relationship
from convertia.core.clock import utcnow
from convertia.core.database import Base


class Campaign(Base):
    """Recruiting campaign grouping jobs and applications"""

    __tablename__ = "campaigns"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    status = Column(String(20), default="active")  # active, paused, finished
    start_date = Column(Date)
    end_date = Column(Date)

    created_by = Column(Integer, ForeignKey("users.id"))
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    jobs = relationship("Job", back_populates="campaign")
    applications = relationship("Application", back_populates="campaign")
