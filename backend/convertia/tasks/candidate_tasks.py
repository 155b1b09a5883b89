"""
Candidate analysis tasks
"""
from celery import Task
from sqlalchemy.orm import Session
from convertia.core.celery_app import celery_app
from convertia.core.database import SessionLocal
from convertia.core.exceptions import AIEngineError, ValidationError
from convertia.models.candidate import Candidate
import structlog

logger = structlog.get_logger()


@celery_app.task(bind=True, max_retries=3)
def analyze_candidate_task(self: Task, candidate_id: int):
    """Analyse a candidate's resume with the AI engine"""
    from convertia.ai_engine.service import ai_engine
    from convertia.candidates.service import analyze_candidate

    db: Session = SessionLocal()
    try:
        candidate = db.query(Candidate).filter(Candidate.id == candidate_id).first()
        if not candidate:
            logger.error("candidate_not_found", candidate_id=candidate_id)
            return

        try:
            analyze_candidate(db, candidate, ai_engine)
        except ValidationError as e:
            logger.warning("candidate_analysis_skipped", candidate_id=candidate_id, reason=e.message)
            return
        except AIEngineError as e:
            db.rollback()
            logger.error("candidate_analysis_failed", candidate_id=candidate_id, error=e.message)
            raise self.retry(exc=e, countdown=60)
    finally:
        db.close()
