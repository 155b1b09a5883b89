"""
Candidate operations shared by the console and the public job board
"""
from typing import Optional

from sqlalchemy.orm import Session
import structlog

from convertia.ai_engine.service import AIEngine
from convertia.applications.service import to_response as application_response
from convertia.applications.workflow import ApplicationStatus
from convertia.candidates.schemas import (
    CandidateResponse,
    CandidateDetailResponse,
    PublicApplicationCreate,
)
from convertia.core.clock import utcnow
from convertia.core.exceptions import ConflictError, NotFoundError, ValidationError
from convertia.dashboard.service import invalidate_stats
from convertia.models.candidate import Candidate, Application
from convertia.models.job import Job

logger = structlog.get_logger()


def format_phone(phone: Optional[str], country: Optional[str]) -> Optional[str]:
    """'+<country><number>' when both parts are present"""
    if not phone or not country:
        return None
    digits = "".join(ch for ch in phone if ch.isdigit())
    country_digits = "".join(ch for ch in country if ch.isdigit())
    if not digits or not country_digits:
        return None
    return f"+{country_digits}{digits}"


def get_candidate(db: Session, candidate_id: int) -> Candidate:
    candidate = db.query(Candidate).filter(Candidate.id == candidate_id).first()
    if not candidate:
        raise NotFoundError("Candidate", str(candidate_id))
    return candidate


def to_response(candidate: Candidate) -> CandidateResponse:
    return CandidateResponse(
        id=candidate.id,
        first_name=candidate.first_name,
        last_name=candidate.last_name,
        email=candidate.email,
        phone=candidate.phone,
        location=candidate.location,
        experience_years=candidate.experience_years,
        skills=candidate.skills,
        linkedin_url=candidate.linkedin_url,
        portfolio_url=candidate.portfolio_url,
        resume_url=candidate.resume_url,
        compatibility_score=candidate.compatibility_score,
        created_at=candidate.created_at,
        updated_at=candidate.updated_at,
        applications=[application_response(a) for a in candidate.applications],
    )


def to_detail_response(candidate: Candidate) -> CandidateDetailResponse:
    return CandidateDetailResponse(
        **to_response(candidate).model_dump(),
        resume_text=candidate.resume_text,
        application_data=candidate.application_data,
        analysis_summary=candidate.analysis_summary,
        analysis_data=candidate.analysis_data,
        analyzed_at=candidate.analyzed_at,
    )


def submit_application(db: Session, data: PublicApplicationCreate) -> Application:
    """
    Upsert the candidate by email and open a 'new' application for the job,
    tagged with the job's campaign.
    """
    job = db.query(Job).filter(Job.id == data.job_id).first()
    if not job or job.status != "open":
        raise NotFoundError("Job", str(data.job_id))

    extra = {
        "cedula": data.cedula or "",
        "fechaNacimiento": data.fecha_nacimiento.isoformat() if data.fecha_nacimiento else "",
        "fuente": data.fuente or "",
        "coverLetter": data.cover_letter or "",
        "submittedAt": utcnow().isoformat(),
    }
    phone = format_phone(data.phone, data.phone_country)

    candidate = db.query(Candidate).filter(Candidate.email == data.email).first()
    if candidate:
        existing = (
            db.query(Application)
            .filter(Application.candidate_id == candidate.id, Application.job_id == job.id)
            .first()
        )
        if existing:
            raise ConflictError(
                "Candidate already applied to this job",
                details={"application_id": existing.id},
            )
        candidate.first_name = data.first_name
        candidate.last_name = data.last_name
        candidate.phone = phone
        candidate.phone_country = data.phone_country
        candidate.resume_url = data.resume_url or candidate.resume_url
        candidate.resume_text = data.resume_text or candidate.resume_text
        candidate.application_data = extra
        logger.info("candidate_updated_from_application", candidate_id=candidate.id)
    else:
        candidate = Candidate(
            first_name=data.first_name,
            last_name=data.last_name,
            email=data.email,
            phone=phone,
            phone_country=data.phone_country,
            resume_url=data.resume_url,
            resume_text=data.resume_text,
            application_data=extra,
        )
        db.add(candidate)
        db.flush()
        logger.info("candidate_created_from_application", candidate_id=candidate.id)

    application = Application(
        candidate_id=candidate.id,
        job_id=job.id,
        status=ApplicationStatus.NEW.value,
        campaign_id=job.campaign_id,
    )
    db.add(application)
    db.commit()
    db.refresh(application)
    invalidate_stats()

    logger.info("application_submitted", application_id=application.id, job_id=job.id)
    return application


def analyze_candidate(db: Session, candidate: Candidate, engine: AIEngine) -> Candidate:
    """Run the CV analysis against the requirements of the latest applied job"""
    if not candidate.resume_text:
        raise ValidationError("Candidate has no resume text to analyse")

    requirements = None
    if candidate.applications:
        job = candidate.applications[-1].job
        requirements = "\n".join(
            part for part in (job.title, job.requirements, job.responsibilities) if part
        )

    result = engine.analyze_resume(candidate.resume_text, requirements)

    candidate.analysis_summary = result["text"]
    candidate.analysis_data = {"compatibilidad": {"porcentaje": result["compatibility"]}}
    candidate.compatibility_score = result["compatibility"]
    candidate.analyzed_at = utcnow()
    db.commit()
    db.refresh(candidate)

    logger.info(
        "candidate_analyzed",
        candidate_id=candidate.id,
        compatibility=result["compatibility"],
    )
    return candidate
