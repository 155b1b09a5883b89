"""
Candidate routes
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import or_, select
from sqlalchemy.orm import Session
import structlog

from convertia.applications.workflow import parse_status
from convertia.auth.dependencies import get_current_active_user
from convertia.candidates import service
from convertia.candidates.schemas import (
    AnalysisQueuedResponse,
    CandidateDetailResponse,
    CandidateResponse,
    CandidateUpdate,
)
from convertia.core.database import get_db
from convertia.core.exceptions import ConflictError, ValidationError
from convertia.dashboard.service import invalidate_stats
from convertia.models.candidate import Candidate, Application
from convertia.models.user import User
from convertia.tasks.candidate_tasks import analyze_candidate_task

router = APIRouter(prefix="/api/v1/candidates", tags=["Candidates"])
logger = structlog.get_logger()


@router.get("/", response_model=List[CandidateResponse])
def list_candidates(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    status: Optional[str] = None,
    job_id: Optional[int] = None,
    search: Optional[str] = None,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """List candidates with their applications"""
    query = db.query(Candidate)

    if status or job_id is not None:
        matching = select(Application.candidate_id)
        if status:
            matching = matching.where(Application.status == parse_status(status).value)
        if job_id is not None:
            matching = matching.where(Application.job_id == job_id)
        query = query.filter(Candidate.id.in_(matching))

    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(
                Candidate.first_name.ilike(pattern),
                Candidate.last_name.ilike(pattern),
                Candidate.email.ilike(pattern),
            )
        )

    candidates = query.order_by(Candidate.created_at.desc(), Candidate.id.desc()).offset(skip).limit(limit).all()
    return [service.to_response(c) for c in candidates]


@router.get("/{candidate_id}", response_model=CandidateDetailResponse)
def get_candidate(
    candidate_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """Get candidate details"""
    return service.to_detail_response(service.get_candidate(db, candidate_id))


@router.put("/{candidate_id}", response_model=CandidateDetailResponse)
def update_candidate(
    candidate_id: int,
    candidate_data: CandidateUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """Update candidate"""
    candidate = service.get_candidate(db, candidate_id)
    changes = candidate_data.model_dump(exclude_unset=True)

    for field in ("first_name", "last_name", "email"):
        if field in changes and not changes[field]:
            raise ValidationError(f"{field} cannot be empty")

    if changes.get("email") and changes["email"] != candidate.email:
        taken = db.query(Candidate).filter(Candidate.email == changes["email"]).first()
        if taken:
            raise ConflictError("Another candidate already uses this email")

    for field, value in changes.items():
        setattr(candidate, field, value)

    db.commit()
    db.refresh(candidate)

    logger.info("candidate_updated", candidate_id=candidate.id, fields=sorted(changes))
    return service.to_detail_response(candidate)


@router.delete("/{candidate_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_candidate(
    candidate_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """Delete candidate and their applications"""
    candidate = service.get_candidate(db, candidate_id)

    db.delete(candidate)
    db.commit()
    invalidate_stats()

    logger.info("candidate_deleted", candidate_id=candidate_id)


@router.post(
    "/{candidate_id}/analyze",
    response_model=AnalysisQueuedResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
def analyze_candidate(
    candidate_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """Queue the AI resume analysis"""
    candidate = service.get_candidate(db, candidate_id)
    if not candidate.resume_text:
        raise ValidationError("Candidate has no resume text to analyse")

    result = analyze_candidate_task.delay(candidate.id)

    logger.info("candidate_analysis_queued", candidate_id=candidate.id, task_id=result.id)
    return AnalysisQueuedResponse(candidate_id=candidate.id, task_id=result.id)
