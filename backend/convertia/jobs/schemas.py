"""
Job Pydantic schemas
"""
from typing import Optional, Literal
from pydantic import BaseModel, Field
from datetime import datetime

JobType = Literal["full-time", "part-time", "contract", "internship", "temporary"]
JobStatus = Literal["open", "closed", "draft"]


class JobCreate(BaseModel):
    """Job creation schema"""
    title: str = Field(..., min_length=1, max_length=255)
    department: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    requirements: Optional[str] = None
    responsibilities: Optional[str] = None
    type: JobType = "full-time"
    status: JobStatus = "open"
    campaign_id: Optional[int] = None


class JobUpdate(BaseModel):
    """Job update schema"""
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    department: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    requirements: Optional[str] = None
    responsibilities: Optional[str] = None
    type: Optional[JobType] = None
    status: Optional[JobStatus] = None
    campaign_id: Optional[int] = None


class PublicJobResponse(BaseModel):
    """Job as shown on the public board"""
    id: int
    title: str
    department: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    requirements: Optional[str] = None
    responsibilities: Optional[str] = None
    type: str
    type_label: str
    created_at: Optional[datetime] = None


class JobResponse(PublicJobResponse):
    """Job response schema for the console"""
    status: str
    campaign_id: Optional[int] = None
    application_count: int = 0
    updated_at: Optional[datetime] = None
