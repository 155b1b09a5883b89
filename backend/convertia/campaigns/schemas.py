"""
Campaign Pydantic schemas
"""
from typing import Optional, List, Literal
from pydantic import BaseModel, Field, model_validator
from datetime import date, datetime

CampaignStatus = Literal["active", "paused", "finished"]


class CampaignBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    status: CampaignStatus = "active"
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def check_dates(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class CampaignCreate(CampaignBase):
    """Campaign creation schema"""


class CampaignUpdate(BaseModel):
    """Campaign update schema"""
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[CampaignStatus] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class CampaignResponse(BaseModel):
    """Campaign response schema"""
    id: int
    name: str
    description: Optional[str] = None
    status: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class StatusCount(BaseModel):
    status: str
    label: str
    count: int


class CampaignDetailResponse(CampaignResponse):
    """Campaign with pipeline figures"""
    job_count: int
    application_count: int
    applications_by_status: List[StatusCount]
