"""
Candidate and application models
"""
from sqlalchemy import Column, Integer, Float, String, Text, DateTime, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from convertia.core.clock import utcnow
from convertia.core.database import Base


class Candidate(Base):
    """Candidate model"""

    __tablename__ = "candidates"

    id = Column(Integer, primary_key=True, index=True)

    # Personal information
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(50))
    phone_country = Column(String(10))
    location = Column(String(255))
    linkedin_url = Column(String(500))
    portfolio_url = Column(String(500))

    # Resume
    resume_url = Column(String(500))
    resume_text = Column(Text)
    experience_years = Column(Integer)
    skills = Column(JSON)

    # Extra fields captured by the public application form (cedula, fuente, ...)
    application_data = Column(JSON)

    # AI analysis
    analysis_summary = Column(Text)
    analysis_data = Column(JSON)
    compatibility_score = Column(Float)  # 0-100
    analyzed_at = Column(DateTime(timezone=True))

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    applications = relationship(
        "Application",
        back_populates="candidate",
        cascade="all, delete-orphan",
        order_by="Application.created_at",
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Application(Base):
    """Candidate application to a job, carrying the pipeline status"""

    __tablename__ = "applications"
    __table_args__ = (UniqueConstraint("candidate_id", "job_id", name="uq_application_candidate_job"),)

    id = Column(Integer, primary_key=True, index=True)
    candidate_id = Column(Integer, ForeignKey("candidates.id", ondelete="CASCADE"), nullable=False, index=True)
    job_id = Column(Integer, ForeignKey("jobs.id"), nullable=False, index=True)

    status = Column(String(50), default="new", nullable=False, index=True)
    campaign_id = Column(Integer, ForeignKey("campaigns.id", ondelete="SET NULL"), index=True)
    recruiter_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), index=True)
    notes = Column(Text)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    candidate = relationship("Candidate", back_populates="applications")
    job = relationship("Job", back_populates="applications")
    campaign = relationship("Campaign", back_populates="applications")
    recruiter = relationship("User")
