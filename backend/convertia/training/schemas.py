"""
Training simulation Pydantic schemas
"""
from typing import Optional, List
from pydantic import BaseModel, Field
from datetime import datetime


class TrainingChatRequest(BaseModel):
    """Body of the training-chat function; fields depend on the action"""
    action: Optional[str] = None
    training_code: Optional[str] = Field(default=None, alias="trainingCode")
    candidate_name: Optional[str] = Field(default=None, alias="candidateName")
    session_id: Optional[str] = Field(default=None, alias="sessionId")
    message: Optional[str] = None

    class Config:
        populate_by_name = True


class EvaluationResult(BaseModel):
    """Score and feedback produced when a session ends"""
    score: float
    text: str
    error: Optional[str] = None


class TrainingCodeCreate(BaseModel):
    """Training code generation schema"""
    expiration_days: Optional[int] = Field(default=None, ge=1, le=365)


class TrainingCodeResponse(BaseModel):
    """Training code response schema"""
    id: int
    code: str
    expires_at: datetime
    is_used: bool
    is_expired: bool
    session_count: int = 0
    created_at: Optional[datetime] = None


class TrainingMessageResponse(BaseModel):
    """Transcript turn"""
    id: int
    sender_type: str
    content: str
    sent_at: datetime

    class Config:
        from_attributes = True


class TrainingSessionResponse(BaseModel):
    """Training session response schema"""
    id: str
    training_code_id: int
    code: Optional[str] = None
    candidate_name: str
    started_at: datetime
    ended_at: Optional[datetime] = None
    score: Optional[float] = None
    feedback: Optional[str] = None
    average_response_time: Optional[float] = None
    message_count: int = 0


class TrainingEvaluationUpdate(BaseModel):
    """Reviewer evaluation of a session; the score overrides the automatic one"""
    score: float = Field(..., ge=0, le=100)
    strengths: Optional[str] = None
    areas_to_improve: Optional[str] = None
    recommendations: Optional[str] = None


class TrainingEvaluationResponse(BaseModel):
    """Stored reviewer evaluation"""
    session_id: str
    strengths: Optional[str] = None
    areas_to_improve: Optional[str] = None
    recommendations: Optional[str] = None
    evaluated_by: Optional[int] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TrainingSessionDetailResponse(TrainingSessionResponse):
    """Session with its transcript and reviewer evaluation"""
    messages: List[TrainingMessageResponse]
    evaluation: Optional[TrainingEvaluationResponse] = None
