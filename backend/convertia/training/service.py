"""
Training chat simulation service

Flow of one roleplay: validate code -> start session -> N message turns ->
end session with an LLM evaluation of the transcript.
"""
import secrets
from datetime import timedelta
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import structlog

from convertia.ai_engine.service import AIEngine
from convertia.core.clock import as_utc, utcnow
from convertia.core.config import settings
from convertia.core.exceptions import (
    AIEngineError,
    BadRequestError,
    ConflictError,
    ConvertiaException,
    NotFoundError,
    TrainingCodeError,
)
from convertia.models.training import TrainingCode, TrainingSession, TrainingMessage, TrainingEvaluation
from convertia.training import prompts
from convertia.training.schemas import EvaluationResult, TrainingEvaluationUpdate

logger = structlog.get_logger()

CODE_GENERATION_ATTEMPTS = 10


class TrainingChatService:
    """Orchestrates code validation, session lifecycle and LLM turns"""

    def __init__(self, db: Session, engine: AIEngine):
        self.db = db
        self.engine = engine

    # Codes

    def validate_code(self, code: Optional[str]) -> TrainingCode:
        if not code:
            raise TrainingCodeError("missing", "Training code not provided")

        training_code = self.db.query(TrainingCode).filter(TrainingCode.code == code).first()
        if not training_code:
            logger.info("training_code_not_found", code=code)
            raise TrainingCodeError("not_found", "Training code not found")

        if utcnow() > as_utc(training_code.expires_at):
            logger.info("training_code_expired", code=code)
            raise TrainingCodeError("expired", "This training code has expired")

        return training_code

    def generate_code(self, days: Optional[int] = None, created_by: Optional[int] = None) -> TrainingCode:
        days = days or settings.TRAINING_CODE_DEFAULT_DAYS
        for _ in range(CODE_GENERATION_ATTEMPTS):
            code = "".join(
                secrets.choice(settings.TRAINING_CODE_ALPHABET)
                for _ in range(settings.TRAINING_CODE_LENGTH)
            )
            if not self.db.query(TrainingCode).filter(TrainingCode.code == code).first():
                break
        else:
            raise ConflictError("Could not generate a unique training code")

        training_code = TrainingCode(
            code=code,
            expires_at=utcnow() + timedelta(days=days),
            created_by=created_by,
        )
        self.db.add(training_code)
        self.db.commit()
        self.db.refresh(training_code)

        logger.info("training_code_created", code=code, expires_at=str(training_code.expires_at))
        return training_code

    # Sessions

    def get_session(self, session_id: Optional[str]) -> TrainingSession:
        if not session_id:
            raise BadRequestError("Session id not provided")
        session = self.db.query(TrainingSession).filter(TrainingSession.id == session_id).first()
        if not session:
            raise NotFoundError("Session", session_id)
        return session

    def transcript(self, session_id: str) -> List[TrainingMessage]:
        return (
            self.db.query(TrainingMessage)
            .filter(TrainingMessage.session_id == session_id)
            .order_by(TrainingMessage.sent_at.asc(), TrainingMessage.id.asc())
            .all()
        )

    def start_session(self, code: Optional[str], candidate_name: Optional[str]) -> TrainingSession:
        if not code:
            raise TrainingCodeError("missing", "Training code not provided")
        if not candidate_name or not candidate_name.strip():
            raise BadRequestError("Candidate name not provided")

        training_code = self.validate_code(code)

        # The conversation is opened by the candidate, so no greeting is stored
        session = TrainingSession(
            training_code_id=training_code.id,
            candidate_name=candidate_name.strip(),
            started_at=utcnow(),
        )
        training_code.is_used = True
        self.db.add(session)
        self._commit("Could not create the training session")
        self.db.refresh(session)

        logger.info("training_session_started", session_id=session.id, code=code)
        return session

    def send_message(self, session_id: Optional[str], message: Optional[str]) -> TrainingMessage:
        """
        Store the candidate turn, ask the simulated customer for a reply and
        store it. Both turns are committed together.
        """
        if not session_id:
            raise BadRequestError("Session id not provided")
        if not message or not message.strip():
            raise BadRequestError("Message not provided")
        session = self.get_session(session_id)

        try:
            self.db.add(
                TrainingMessage(
                    session_id=session.id,
                    sender_type=prompts.SENDER_CANDIDATE,
                    content=message,
                    sent_at=utcnow(),
                )
            )
            self.db.flush()

            history = self.transcript(session.id)
            products = prompts.detect_products(history)
            system_prompt = prompts.build_customer_prompt(
                session.candidate_name,
                products,
                is_first_message=len(history) <= 1,
            )

            logger.info(
                "training_turn_requested",
                session_id=session.id,
                turns=len(history),
                products=products,
            )

            reply = self.engine.chat_completion(
                [{"role": "system", "content": system_prompt}] + prompts.to_chat_messages(history),
                temperature=settings.AI_TEMPERATURE,
                max_tokens=settings.TRAINING_CHAT_MAX_TOKENS,
            )

            ai_message = TrainingMessage(
                session_id=session.id,
                sender_type=prompts.SENDER_AI,
                content=reply,
                sent_at=utcnow(),
            )
            self.db.add(ai_message)
            self.db.commit()
        except AIEngineError as e:
            self.db.rollback()
            logger.error("training_reply_failed", session_id=session_id, error=e.message)
            raise ConvertiaException(f"Error generating response: {e.message}", status_code=500)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("training_message_persist_failed", session_id=session_id, error=str(e))
            raise ConvertiaException(f"Error saving message: {e}", status_code=500)

        self.db.refresh(ai_message)
        return ai_message

    def end_session(self, session_id: Optional[str]) -> EvaluationResult:
        """
        Close the session and score the transcript. Calling it again re-marks
        ended_at and evaluates again.
        """
        session = self.get_session(session_id)
        session.ended_at = utcnow()
        self._commit("Could not update the session")

        messages = self.transcript(session.id)
        if not messages:
            logger.info("training_session_ended_empty", session_id=session.id)
            return EvaluationResult(
                score=prompts.EMPTY_TRANSCRIPT_SCORE,
                text=prompts.EMPTY_TRANSCRIPT_TEXT,
            )

        average = prompts.average_response_time(messages)

        try:
            text = self.engine.chat_completion(
                [
                    {"role": "system", "content": prompts.build_evaluation_prompt(average)},
                    {"role": "user", "content": prompts.format_transcript(messages)},
                ],
                temperature=settings.AI_TEMPERATURE,
                max_tokens=settings.TRAINING_EVALUATION_MAX_TOKENS,
            )
        except AIEngineError as e:
            # The candidate still gets a result; operators see the error in logs
            logger.error("training_evaluation_failed", session_id=session.id, error=e.message)
            return EvaluationResult(
                score=prompts.FALLBACK_SCORE,
                text=prompts.FALLBACK_TEXT,
                error=e.message,
            )

        score = prompts.extract_score(text)
        session.score = score
        session.feedback = text
        session.average_response_time = average
        self._commit("Could not store the evaluation")

        logger.info(
            "training_session_evaluated",
            session_id=session.id,
            score=score,
            average_response_time=average,
        )
        return EvaluationResult(score=score, text=text)

    def save_review(
        self,
        session_id: str,
        data: TrainingEvaluationUpdate,
        reviewer_id: Optional[int] = None,
    ) -> TrainingEvaluation:
        """Create or replace the reviewer evaluation and set the session score"""
        session = self.get_session(session_id)

        evaluation = session.evaluation
        if evaluation is None:
            evaluation = TrainingEvaluation(session_id=session.id)
            self.db.add(evaluation)

        evaluation.strengths = data.strengths
        evaluation.areas_to_improve = data.areas_to_improve
        evaluation.recommendations = data.recommendations
        evaluation.evaluated_by = reviewer_id
        evaluation.updated_at = utcnow()
        session.score = data.score
        self._commit("Could not store the evaluation")
        self.db.refresh(evaluation)

        logger.info("training_session_reviewed", session_id=session.id, score=data.score, reviewer_id=reviewer_id)
        return evaluation

    def _commit(self, message: str):
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("training_persist_failed", error=str(e))
            raise ConvertiaException(f"{message}: {e}", status_code=500)
