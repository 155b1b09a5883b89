"""
Application workflow operations
"""
from typing import Optional

from sqlalchemy.orm import Session
import structlog

from convertia.applications.workflow import check_transition, status_label
from convertia.applications.schemas import ApplicationResponse
from convertia.auth.service import ROLE_ADMIN, ROLE_MANAGER, get_user_by_id
from convertia.core.audit import record_action
from convertia.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from convertia.dashboard.service import invalidate_stats
from convertia.models.campaign import Campaign
from convertia.models.candidate import Application
from convertia.models.user import User

logger = structlog.get_logger()


def to_response(application: Application) -> ApplicationResponse:
    return ApplicationResponse(
        id=application.id,
        candidate_id=application.candidate_id,
        candidate_name=application.candidate.full_name if application.candidate else None,
        job_id=application.job_id,
        job_title=application.job.title if application.job else None,
        job_department=application.job.department if application.job else None,
        status=application.status,
        status_label=status_label(application.status),
        campaign_id=application.campaign_id,
        recruiter_id=application.recruiter_id,
        notes=application.notes,
        created_at=application.created_at,
        updated_at=application.updated_at,
    )


def get_application(db: Session, application_id: int) -> Application:
    application = db.query(Application).filter(Application.id == application_id).first()
    if not application:
        raise NotFoundError("Application", str(application_id))
    return application


def change_status(
    db: Session,
    application: Application,
    requested: str,
    user: User,
    notes: Optional[str] = None,
) -> Application:
    """Move an application along the pipeline, recording who did it"""
    previous = application.status
    target = check_transition(previous, requested)

    application.status = target.value
    if notes is not None:
        application.notes = notes

    record_action(
        db,
        user,
        "status_change",
        "application",
        application.id,
        {"from": previous, "to": target.value},
    )
    db.commit()
    db.refresh(application)
    invalidate_stats()

    logger.info(
        "application_status_changed",
        application_id=application.id,
        from_status=previous,
        to_status=target.value,
    )
    return application


def assign_recruiter(
    db: Session,
    application: Application,
    recruiter_id: Optional[int],
    user: User,
) -> Application:
    """Only admins and managers may (re)assign the responsible recruiter"""
    if not any(role in user.role_names for role in (ROLE_ADMIN, ROLE_MANAGER)):
        raise AuthorizationError(
            "Only admins and managers can assign recruiters",
            details={"user_roles": user.role_names},
        )

    if recruiter_id is not None:
        recruiter = get_user_by_id(db, recruiter_id)
        if not recruiter:
            raise NotFoundError("User", str(recruiter_id))
        if not recruiter.is_active:
            raise ValidationError("Recruiter account is inactive")

    previous = application.recruiter_id
    application.recruiter_id = recruiter_id
    record_action(
        db,
        user,
        "recruiter_assigned",
        "application",
        application.id,
        {"from": previous, "to": recruiter_id},
    )
    db.commit()
    db.refresh(application)

    logger.info("application_recruiter_assigned", application_id=application.id, recruiter_id=recruiter_id)
    return application


def assign_campaign(
    db: Session,
    application: Application,
    campaign_id: Optional[int],
    user: User,
) -> Application:
    if campaign_id is not None:
        if not db.query(Campaign).filter(Campaign.id == campaign_id).first():
            raise NotFoundError("Campaign", str(campaign_id))

    previous = application.campaign_id
    application.campaign_id = campaign_id
    record_action(
        db,
        user,
        "campaign_assigned",
        "application",
        application.id,
        {"from": previous, "to": campaign_id},
    )
    db.commit()
    db.refresh(application)
    return application
