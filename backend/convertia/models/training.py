"""
Training simulation models
"""
import uuid

from sqlalchemy import Column, Integer, Float, String, Text, DateTime, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from convertia.core.clock import utcnow
from convertia.core.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class TrainingCode(Base):
    """Access code gating entry into a roleplay session"""

    __tablename__ = "training_codes"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(32), unique=True, nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    is_used = Column(Boolean, default=False)

    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    created_at = Column(DateTime(timezone=True), default=utcnow)

    sessions = relationship("TrainingSession", back_populates="training_code", cascade="all, delete-orphan")


class TrainingSession(Base):
    """One timed roleplay conversation"""

    __tablename__ = "training_sessions"

    id = Column(String(36), primary_key=True, default=_uuid)
    training_code_id = Column(Integer, ForeignKey("training_codes.id", ondelete="CASCADE"), nullable=False, index=True)
    candidate_name = Column(String(255), nullable=False)

    started_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    ended_at = Column(DateTime(timezone=True))

    # Evaluation
    score = Column(Float)  # 0-100
    feedback = Column(Text)
    average_response_time = Column(Float)  # seconds

    training_code = relationship("TrainingCode", back_populates="sessions")
    messages = relationship(
        "TrainingMessage",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by=lambda: [TrainingMessage.sent_at, TrainingMessage.id],
    )
    evaluation = relationship(
        "TrainingEvaluation",
        back_populates="session",
        uselist=False,
        cascade="all, delete-orphan",
    )


class TrainingMessage(Base):
    """One transcript turn"""

    __tablename__ = "training_messages"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(String(36), ForeignKey("training_sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    sender_type = Column(String(20), nullable=False)  # candidate, ai
    content = Column(Text, nullable=False)
    sent_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    session = relationship("TrainingSession", back_populates="messages")


class TrainingEvaluation(Base):
    """Reviewer notes on a finished session, one row per session"""

    __tablename__ = "training_evaluations"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(
        String(36),
        ForeignKey("training_sessions.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    strengths = Column(Text)
    areas_to_improve = Column(Text)
    recommendations = Column(Text)

    evaluated_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    session = relationship("TrainingSession", back_populates="evaluation")
