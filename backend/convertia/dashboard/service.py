"""
Dashboard aggregation and interview notifications
"""
from typing import Any, Dict, List

from sqlalchemy import func
from sqlalchemy.orm import Session
import structlog

from convertia.applications.workflow import (
    ApplicationStatus,
    INTERVIEW_STATUSES,
    status_label,
)
from convertia.core.clock import utcnow
from convertia.core.config import settings
from convertia.core.redis_client import delete_cache, get_cache_key, get_or_set
from convertia.models.candidate import Candidate, Application
from convertia.models.job import Job
from convertia.models.user import User

logger = structlog.get_logger()

STATS_CACHE_KEY = get_cache_key("dashboard", "stats")
INTERVIEW_TYPE_LABELS = {
    ApplicationStatus.HR_INTERVIEW.value: "Recursos Humanos",
    ApplicationStatus.TECHNICAL_INTERVIEW.value: "Técnica",
}
INTERVIEW_MESSAGE_TYPES = {
    ApplicationStatus.HR_INTERVIEW.value: "de Recursos Humanos",
    ApplicationStatus.TECHNICAL_INTERVIEW.value: "Técnica",
}


def compute_stats(db: Session) -> Dict[str, Any]:
    now = utcnow()
    month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    interview_values = [s.value for s in INTERVIEW_STATUSES]

    by_status = (
        db.query(Application.status, func.count(Application.id))
        .group_by(Application.status)
        .order_by(func.count(Application.id).desc())
        .all()
    )

    recent = db.query(Candidate).order_by(Candidate.created_at.desc(), Candidate.id.desc()).limit(5).all()

    popular = (
        db.query(Job.id, Job.title, func.count(Application.id).label("applications"))
        .outerjoin(Application, Application.job_id == Job.id)
        .group_by(Job.id, Job.title)
        .order_by(func.count(Application.id).desc(), Job.id.asc())
        .limit(5)
        .all()
    )

    return {
        "total_candidates": db.query(func.count(Candidate.id)).scalar() or 0,
        "open_jobs": db.query(func.count(Job.id)).filter(Job.status == "open").scalar() or 0,
        "scheduled_interviews": (
            db.query(func.count(Application.id))
            .filter(Application.status.in_(interview_values))
            .scalar()
            or 0
        ),
        "hires_this_month": (
            db.query(func.count(Application.id))
            .filter(
                Application.status == ApplicationStatus.HIRED.value,
                Application.updated_at >= month_start,
            )
            .scalar()
            or 0
        ),
        "applications_by_status": [
            {"status": value, "label": status_label(value), "count": count}
            for value, count in by_status
        ],
        "recent_candidates": [
            {
                "id": c.id,
                "name": c.full_name,
                "email": c.email,
                "created_at": c.created_at,
            }
            for c in recent
        ],
        "popular_jobs": [
            {"id": job_id, "title": title, "applications": count}
            for job_id, title, count in popular
        ],
        "generated_at": now,
    }


def get_stats(db: Session) -> Dict[str, Any]:
    """Dashboard figures, cached for DASHBOARD_CACHE_TTL seconds"""
    return get_or_set(STATS_CACHE_KEY, lambda: compute_stats(db), ttl=settings.DASHBOARD_CACHE_TTL)


def invalidate_stats():
    delete_cache(STATS_CACHE_KEY)


def interview_notifications(db: Session, user: User) -> List[Dict[str, Any]]:
    """Interview-stage applications assigned to the given recruiter"""
    applications = (
        db.query(Application)
        .filter(
            Application.recruiter_id == user.id,
            Application.status.in_([s.value for s in INTERVIEW_STATUSES]),
        )
        .order_by(Application.updated_at.desc())
        .all()
    )

    notifications = []
    for app in applications:
        interview_type = INTERVIEW_TYPE_LABELS[app.status]
        notifications.append(
            {
                "application_id": app.id,
                "candidate_id": app.candidate_id,
                "status": app.status,
                "interview_type": interview_type,
                "message": (
                    f"Tienes una entrevista {INTERVIEW_MESSAGE_TYPES[app.status]} con "
                    f"{app.candidate.full_name} para la posición {app.job.title}"
                ),
                "updated_at": app.updated_at,
            }
        )
    return notifications
