"""
Application routes
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
import structlog

from convertia.applications import service
from convertia.applications.schemas import (
    ApplicationResponse,
    AuditEntryResponse,
    CampaignAssignment,
    RecruiterAssignment,
    StatusDefinition,
    StatusUpdate,
)
from convertia.applications.workflow import (
    ALLOWED_TRANSITIONS,
    STATUS_LABELS,
    parse_status,
)
from convertia.auth.dependencies import get_current_active_user
from convertia.core.database import get_db
from convertia.dashboard.service import invalidate_stats
from convertia.models.audit import AuditLog
from convertia.models.candidate import Application
from convertia.models.user import User

router = APIRouter(prefix="/api/v1/applications", tags=["Applications"])
logger = structlog.get_logger()


@router.get("/statuses", response_model=List[StatusDefinition])
def list_statuses(current_user: User = Depends(get_current_active_user)):
    """Pipeline statuses with labels and allowed next steps"""
    return [
        StatusDefinition(
            value=status_value.value,
            label=STATUS_LABELS[status_value],
            next=sorted(s.value for s in ALLOWED_TRANSITIONS[status_value]),
        )
        for status_value in ALLOWED_TRANSITIONS
    ]


@router.get("/", response_model=List[ApplicationResponse])
def list_applications(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    status: Optional[str] = None,
    job_id: Optional[int] = None,
    campaign_id: Optional[int] = None,
    recruiter_id: Optional[int] = None,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """List applications"""
    query = db.query(Application)

    if status:
        query = query.filter(Application.status == parse_status(status).value)
    if job_id is not None:
        query = query.filter(Application.job_id == job_id)
    if campaign_id is not None:
        query = query.filter(Application.campaign_id == campaign_id)
    if recruiter_id is not None:
        query = query.filter(Application.recruiter_id == recruiter_id)

    applications = query.order_by(Application.created_at.desc()).offset(skip).limit(limit).all()
    return [service.to_response(a) for a in applications]


@router.get("/{application_id}", response_model=ApplicationResponse)
def get_application(
    application_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """Get application details"""
    return service.to_response(service.get_application(db, application_id))


@router.patch("/{application_id}/status", response_model=ApplicationResponse)
def update_application_status(
    application_id: int,
    update: StatusUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """Move the application to another pipeline status"""
    application = service.get_application(db, application_id)
    application = service.change_status(db, application, update.status, current_user, update.notes)
    return service.to_response(application)


@router.patch("/{application_id}/recruiter", response_model=ApplicationResponse)
def assign_application_recruiter(
    application_id: int,
    assignment: RecruiterAssignment,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """Assign (or clear) the responsible recruiter"""
    application = service.get_application(db, application_id)
    application = service.assign_recruiter(db, application, assignment.recruiter_id, current_user)
    return service.to_response(application)


@router.patch("/{application_id}/campaign", response_model=ApplicationResponse)
def assign_application_campaign(
    application_id: int,
    assignment: CampaignAssignment,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """Tag the application with a campaign"""
    application = service.get_application(db, application_id)
    application = service.assign_campaign(db, application, assignment.campaign_id, current_user)
    return service.to_response(application)


@router.get("/{application_id}/history", response_model=List[AuditEntryResponse])
def get_application_history(
    application_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """Status and assignment changes, oldest first"""
    service.get_application(db, application_id)
    return (
        db.query(AuditLog)
        .filter(AuditLog.resource_type == "application", AuditLog.resource_id == application_id)
        .order_by(AuditLog.created_at.asc(), AuditLog.id.asc())
        .all()
    )


@router.delete("/{application_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_application(
    application_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """Delete application"""
    application = service.get_application(db, application_id)
    db.delete(application)
    db.commit()
    invalidate_stats()

    logger.info("application_deleted", application_id=application_id)
