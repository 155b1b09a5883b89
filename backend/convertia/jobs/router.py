"""
Job routes: admin console CRUD and the public job board
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func
from sqlalchemy.orm import Session
import structlog

from convertia.auth.dependencies import get_current_active_user
from convertia.candidates.schemas import PublicApplicationCreate, PublicApplicationResponse
from convertia.candidates.service import submit_application
from convertia.core.database import get_db
from convertia.core.exceptions import ConflictError, NotFoundError
from convertia.dashboard.service import invalidate_stats
from convertia.jobs.schemas import JobCreate, JobUpdate, JobResponse, PublicJobResponse
from convertia.models.campaign import Campaign
from convertia.models.candidate import Application
from convertia.models.job import Job
from convertia.models.user import User

router = APIRouter(prefix="/api/v1/jobs", tags=["Jobs"])
public_router = APIRouter(prefix="/api/v1/public", tags=["Public Job Board"])
logger = structlog.get_logger()

JOB_TYPE_LABELS = {
    "full-time": "Tiempo Completo",
    "part-time": "Medio Tiempo",
    "contract": "Contrato",
    "internship": "Pasantía",
    "temporary": "Temporal",
}


def _public_response(job: Job) -> PublicJobResponse:
    return PublicJobResponse(
        id=job.id,
        title=job.title,
        department=job.department,
        location=job.location,
        description=job.description,
        requirements=job.requirements,
        responsibilities=job.responsibilities,
        type=job.type,
        type_label=JOB_TYPE_LABELS.get(job.type, job.type),
        created_at=job.created_at,
    )


def _job_response(job: Job, application_count: int = 0) -> JobResponse:
    return JobResponse(
        **_public_response(job).model_dump(),
        status=job.status,
        campaign_id=job.campaign_id,
        application_count=application_count,
        updated_at=job.updated_at,
    )


def _check_campaign(db: Session, campaign_id: Optional[int]):
    if campaign_id is not None and not db.query(Campaign).filter(Campaign.id == campaign_id).first():
        raise NotFoundError("Campaign", str(campaign_id))


def _get_job(db: Session, job_id: int) -> Job:
    job = db.query(Job).filter(Job.id == job_id).first()
    if not job:
        raise NotFoundError("Job", str(job_id))
    return job


def _application_count(db: Session, job_id: int) -> int:
    return db.query(func.count(Application.id)).filter(Application.job_id == job_id).scalar() or 0


@router.post("/", response_model=JobResponse, status_code=status.HTTP_201_CREATED)
def create_job(
    job_data: JobCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """Create a new job"""
    _check_campaign(db, job_data.campaign_id)

    job = Job(**job_data.model_dump(), created_by=current_user.id)
    db.add(job)
    db.commit()
    db.refresh(job)
    invalidate_stats()

    logger.info("job_created", job_id=job.id, title=job.title)
    return _job_response(job)


@router.get("/", response_model=List[JobResponse])
def list_jobs(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    status: Optional[str] = None,
    campaign_id: Optional[int] = None,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """List jobs with their application counts"""
    query = (
        db.query(Job, func.count(Application.id))
        .outerjoin(Application, Application.job_id == Job.id)
        .group_by(Job.id)
    )
    if status:
        query = query.filter(Job.status == status)
    if campaign_id is not None:
        query = query.filter(Job.campaign_id == campaign_id)

    rows = query.order_by(Job.created_at.desc(), Job.id.desc()).offset(skip).limit(limit).all()
    return [_job_response(job, count) for job, count in rows]


@router.get("/{job_id}", response_model=JobResponse)
def get_job(
    job_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """Get job details"""
    job = _get_job(db, job_id)
    return _job_response(job, _application_count(db, job.id))


@router.put("/{job_id}", response_model=JobResponse)
def update_job(
    job_id: int,
    job_data: JobUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """Update job"""
    job = _get_job(db, job_id)

    changes = job_data.model_dump(exclude_unset=True)
    if "campaign_id" in changes:
        _check_campaign(db, changes["campaign_id"])
    for field, value in changes.items():
        setattr(job, field, value)

    db.commit()
    db.refresh(job)
    invalidate_stats()

    logger.info("job_updated", job_id=job.id, fields=sorted(changes))
    return _job_response(job, _application_count(db, job.id))


@router.delete("/{job_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_job(
    job_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """Delete a job without applications"""
    job = _get_job(db, job_id)

    count = _application_count(db, job.id)
    if count:
        raise ConflictError(
            "Job has applications; close it instead of deleting it",
            details={"applications": count},
        )

    db.delete(job)
    db.commit()
    invalidate_stats()

    logger.info("job_deleted", job_id=job_id)


@public_router.get("/jobs", response_model=List[PublicJobResponse])
def list_open_jobs(
    department: Optional[str] = None,
    type: Optional[str] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """Open jobs for the public board"""
    query = db.query(Job).filter(Job.status == "open")
    if department:
        query = query.filter(Job.department == department)
    if type:
        query = query.filter(Job.type == type)
    if search:
        query = query.filter(Job.title.ilike(f"%{search}%"))

    return [_public_response(job) for job in query.order_by(Job.created_at.desc(), Job.id.desc()).all()]


@public_router.get("/jobs/{job_id}", response_model=PublicJobResponse)
def get_open_job(
    job_id: int,
    db: Session = Depends(get_db),
):
    """Public job detail; only open jobs are visible"""
    job = db.query(Job).filter(Job.id == job_id, Job.status == "open").first()
    if not job:
        raise NotFoundError("Job", str(job_id))
    return _public_response(job)


@public_router.post(
    "/applications",
    response_model=PublicApplicationResponse,
    status_code=status.HTTP_201_CREATED,
)
def apply_to_job(
    application_data: PublicApplicationCreate,
    db: Session = Depends(get_db),
):
    """Submit an application from the public job board"""
    application = submit_application(db, application_data)
    return PublicApplicationResponse(
        success=True,
        application_id=application.id,
        candidate_id=application.candidate_id,
    )
