"""
Dashboard Pydantic schemas
"""
from typing import List, Optional
from pydantic import BaseModel
from datetime import datetime


class StatusCount(BaseModel):
    status: str
    label: str
    count: int


class RecentCandidate(BaseModel):
    id: int
    name: str
    email: str
    created_at: Optional[datetime] = None


class PopularJob(BaseModel):
    id: int
    title: str
    applications: int


class DashboardStats(BaseModel):
    total_candidates: int
    open_jobs: int
    scheduled_interviews: int
    hires_this_month: int
    applications_by_status: List[StatusCount]
    recent_candidates: List[RecentCandidate]
    popular_jobs: List[PopularJob]
    generated_at: datetime


class InterviewNotification(BaseModel):
    application_id: int
    candidate_id: int
    status: str
    interview_type: str
    message: str
    updated_at: Optional[datetime] = None
