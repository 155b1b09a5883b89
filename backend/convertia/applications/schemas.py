"""
Application Pydantic schemas
"""
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field
from datetime import datetime


class ApplicationResponse(BaseModel):
    """Application response schema"""
    id: int
    candidate_id: int
    candidate_name: Optional[str] = None
    job_id: int
    job_title: Optional[str] = None
    job_department: Optional[str] = None
    status: str
    status_label: str
    campaign_id: Optional[int] = None
    recruiter_id: Optional[int] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class StatusUpdate(BaseModel):
    status: str = Field(..., min_length=1)
    notes: Optional[str] = None


class RecruiterAssignment(BaseModel):
    recruiter_id: Optional[int] = None


class CampaignAssignment(BaseModel):
    campaign_id: Optional[int] = None


class StatusDefinition(BaseModel):
    value: str
    label: str
    next: List[str]


class AuditEntryResponse(BaseModel):
    id: int
    action: str
    user_id: Optional[int] = None
    details: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
