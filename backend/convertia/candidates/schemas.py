"""
Candidate Pydantic schemas
"""
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, EmailStr, Field
from datetime import date, datetime

from convertia.applications.schemas import ApplicationResponse


class PublicApplicationCreate(BaseModel):
    """Application submitted from the public job board"""
    first_name: str = Field(..., min_length=1, max_length=100, alias="firstName")
    last_name: str = Field(..., min_length=1, max_length=100, alias="lastName")
    email: EmailStr
    phone: Optional[str] = None
    phone_country: Optional[str] = Field(default=None, alias="phoneCountry")
    cedula: Optional[str] = None
    fecha_nacimiento: Optional[date] = Field(default=None, alias="fechaNacimiento")
    fuente: Optional[str] = None
    job_id: int = Field(..., alias="jobId")
    cover_letter: Optional[str] = Field(default=None, alias="coverLetter")
    resume_url: Optional[str] = Field(default=None, alias="resumeUrl")
    resume_text: Optional[str] = Field(default=None, alias="resumeText")

    class Config:
        populate_by_name = True


class PublicApplicationResponse(BaseModel):
    success: bool
    application_id: int
    candidate_id: int


class CandidateUpdate(BaseModel):
    """Candidate update schema"""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    experience_years: Optional[int] = Field(default=None, ge=0)
    skills: Optional[List[str]] = None
    linkedin_url: Optional[str] = None
    portfolio_url: Optional[str] = None
    resume_url: Optional[str] = None
    resume_text: Optional[str] = None


class CandidateResponse(BaseModel):
    """Candidate response schema"""
    id: int
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    location: Optional[str] = None
    experience_years: Optional[int] = None
    skills: Optional[List[str]] = None
    linkedin_url: Optional[str] = None
    portfolio_url: Optional[str] = None
    resume_url: Optional[str] = None
    compatibility_score: Optional[float] = None  # 0-100 from AI analysis
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    applications: List[ApplicationResponse] = []


class CandidateDetailResponse(CandidateResponse):
    """Candidate with resume and AI analysis"""
    resume_text: Optional[str] = None
    application_data: Optional[Dict[str, Any]] = None
    analysis_summary: Optional[str] = None
    analysis_data: Optional[Dict[str, Any]] = None
    analyzed_at: Optional[datetime] = None


class AnalysisQueuedResponse(BaseModel):
    candidate_id: int
    task_id: Optional[str] = None
    status: str = "queued"
