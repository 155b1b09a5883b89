"""
Campaign routes
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy import func
from sqlalchemy.orm import Session
import structlog

from convertia.applications.workflow import status_label
from convertia.auth.dependencies import get_current_active_user
from convertia.campaigns.schemas import (
    CampaignCreate,
    CampaignUpdate,
    CampaignResponse,
    CampaignDetailResponse,
    StatusCount,
)
from convertia.core.database import get_db
from convertia.core.exceptions import NotFoundError, ValidationError
from convertia.models.campaign import Campaign
from convertia.models.candidate import Application
from convertia.models.job import Job
from convertia.models.user import User

router = APIRouter(prefix="/api/v1/campaigns", tags=["Campaigns"])
logger = structlog.get_logger()


def _get_campaign(db: Session, campaign_id: int) -> Campaign:
    campaign = db.query(Campaign).filter(Campaign.id == campaign_id).first()
    if not campaign:
        raise NotFoundError("Campaign", str(campaign_id))
    return campaign


@router.post("/", response_model=CampaignResponse, status_code=status.HTTP_201_CREATED)
def create_campaign(
    campaign_data: CampaignCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """Create a recruiting campaign"""
    campaign = Campaign(**campaign_data.model_dump(), created_by=current_user.id)
    db.add(campaign)
    db.commit()
    db.refresh(campaign)

    logger.info("campaign_created", campaign_id=campaign.id, name=campaign.name)
    return campaign


@router.get("/", response_model=List[CampaignResponse])
def list_campaigns(
    status: Optional[str] = None,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """List campaigns"""
    query = db.query(Campaign)
    if status:
        query = query.filter(Campaign.status == status)
    return query.order_by(Campaign.created_at.desc(), Campaign.id.desc()).all()


@router.get("/{campaign_id}", response_model=CampaignDetailResponse)
def get_campaign(
    campaign_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """Campaign detail with job and application figures"""
    campaign = _get_campaign(db, campaign_id)

    job_count = db.query(func.count(Job.id)).filter(Job.campaign_id == campaign.id).scalar() or 0
    by_status = (
        db.query(Application.status, func.count(Application.id))
        .filter(Application.campaign_id == campaign.id)
        .group_by(Application.status)
        .all()
    )

    return CampaignDetailResponse(
        **CampaignResponse.model_validate(campaign).model_dump(),
        job_count=job_count,
        application_count=sum(count for _, count in by_status),
        applications_by_status=[
            StatusCount(status=value, label=status_label(value), count=count)
            for value, count in by_status
        ],
    )


@router.put("/{campaign_id}", response_model=CampaignResponse)
def update_campaign(
    campaign_id: int,
    campaign_data: CampaignUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """Update campaign"""
    campaign = _get_campaign(db, campaign_id)

    for field, value in campaign_data.model_dump(exclude_unset=True).items():
        setattr(campaign, field, value)

    if campaign.start_date and campaign.end_date and campaign.end_date < campaign.start_date:
        db.rollback()
        raise ValidationError("end_date must not be before start_date")

    db.commit()
    db.refresh(campaign)

    logger.info("campaign_updated", campaign_id=campaign.id)
    return campaign


@router.delete("/{campaign_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_campaign(
    campaign_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """Delete campaign; jobs and applications lose the tag"""
    campaign = _get_campaign(db, campaign_id)

    db.query(Job).filter(Job.campaign_id == campaign.id).update({Job.campaign_id: None})
    db.query(Application).filter(Application.campaign_id == campaign.id).update({Application.campaign_id: None})
    db.delete(campaign)
    db.commit()

    logger.info("campaign_deleted", campaign_id=campaign_id)
