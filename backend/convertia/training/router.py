"""
Training simulation routes

`function_router` exposes the public action-based training-chat endpoint;
`router` holds the admin console operations over codes and sessions.
"""
import json
from typing import List

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool
import structlog

from convertia.ai_engine.service import AIEngine, get_ai_engine
from convertia.auth.dependencies import get_current_active_user
from convertia.core.clock import as_utc, utcnow
from convertia.core.database import get_db
from convertia.core.exceptions import ConvertiaException, NotFoundError
from convertia.models.training import TrainingCode, TrainingSession, TrainingMessage
from convertia.models.user import User
from convertia.training.schemas import (
    TrainingChatRequest,
    TrainingCodeCreate,
    TrainingCodeResponse,
    TrainingEvaluationResponse,
    TrainingEvaluationUpdate,
    TrainingMessageResponse,
    TrainingSessionResponse,
    TrainingSessionDetailResponse,
)
from convertia.training.service import TrainingChatService

function_router = APIRouter(prefix="/functions/v1", tags=["Training Chat"])
router = APIRouter(prefix="/api/v1/training", tags=["Training"])
logger = structlog.get_logger()

ACTIONS = ("validate-code", "start-session", "send-message", "end-session")


def get_training_service(
    db: Session = Depends(get_db),
    engine: AIEngine = Depends(get_ai_engine),
) -> TrainingChatService:
    return TrainingChatService(db, engine)


def _failure(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message, **extra},
    )


def _session_response(session: TrainingSession, message_count: int = 0) -> TrainingSessionResponse:
    return TrainingSessionResponse(
        id=session.id,
        training_code_id=session.training_code_id,
        code=session.training_code.code if session.training_code else None,
        candidate_name=session.candidate_name,
        started_at=session.started_at,
        ended_at=session.ended_at,
        score=session.score,
        feedback=session.feedback,
        average_response_time=session.average_response_time,
        message_count=message_count,
    )


def _dispatch(service: TrainingChatService, body: TrainingChatRequest) -> dict:
    if body.action == "validate-code":
        code = service.validate_code(body.training_code)
        return {
            "success": True,
            "code": {"id": code.id, "expiresAt": as_utc(code.expires_at).isoformat()},
        }

    if body.action == "start-session":
        session = service.start_session(body.training_code, body.candidate_name)
        return {
            "success": True,
            "sessionId": session.id,
            "session": _session_response(session).model_dump(mode="json"),
        }

    if body.action == "send-message":
        reply = service.send_message(body.session_id, body.message)
        return {
            "success": True,
            "response": reply.content,
            "message": TrainingMessageResponse.model_validate(reply).model_dump(mode="json"),
        }

    evaluation = service.end_session(body.session_id)
    return {
        "success": True,
        "evaluation": {"text": evaluation.text, "score": evaluation.score},
        **({"error": evaluation.error} if evaluation.error else {}),
    }


@function_router.post("/training-chat")
async def training_chat(
    request: Request,
    service: TrainingChatService = Depends(get_training_service),
):
    """
    Public roleplay endpoint. Access is granted by possession of a valid
    training code; no token is required.
    """
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        return _failure(status.HTTP_400_BAD_REQUEST, f"Could not parse request body: {e}")

    if not isinstance(payload, dict):
        return _failure(status.HTTP_400_BAD_REQUEST, "Request body must be a JSON object")

    try:
        body = TrainingChatRequest.model_validate(payload)
    except PydanticValidationError as e:
        return _failure(status.HTTP_400_BAD_REQUEST, f"Invalid request body: {e.error_count()} field error(s)")

    if not body.action:
        return _failure(status.HTTP_400_BAD_REQUEST, "No action specified")
    if body.action not in ACTIONS:
        return _failure(status.HTTP_400_BAD_REQUEST, f"Invalid action: {body.action}")

    logger.info("training_chat_action", action=body.action, session_id=body.session_id)

    try:
        return await run_in_threadpool(_dispatch, service, body)
    except ConvertiaException as e:
        extra = {"reason": e.details["reason"]} if "reason" in e.details else {}
        return _failure(e.status_code, e.message, **extra)


@router.post("/codes", response_model=TrainingCodeResponse, status_code=status.HTTP_201_CREATED)
def create_training_code(
    code_data: TrainingCodeCreate,
    current_user: User = Depends(get_current_active_user),
    service: TrainingChatService = Depends(get_training_service),
):
    """Generate a new training code"""
    code = service.generate_code(code_data.expiration_days, created_by=current_user.id)
    return TrainingCodeResponse(
        id=code.id,
        code=code.code,
        expires_at=code.expires_at,
        is_used=code.is_used,
        is_expired=False,
        created_at=code.created_at,
    )


@router.get("/codes", response_model=List[TrainingCodeResponse])
def list_training_codes(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """List training codes, newest first"""
    rows = (
        db.query(TrainingCode, func.count(TrainingSession.id))
        .outerjoin(TrainingSession, TrainingSession.training_code_id == TrainingCode.id)
        .group_by(TrainingCode.id)
        .order_by(TrainingCode.created_at.desc(), TrainingCode.id.desc())
        .all()
    )
    now = utcnow()
    return [
        TrainingCodeResponse(
            id=code.id,
            code=code.code,
            expires_at=code.expires_at,
            is_used=code.is_used,
            is_expired=now > as_utc(code.expires_at),
            session_count=session_count,
            created_at=code.created_at,
        )
        for code, session_count in rows
    ]


@router.delete("/codes/{code_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_training_code(
    code_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """Delete a training code and its sessions"""
    code = db.query(TrainingCode).filter(TrainingCode.id == code_id).first()
    if not code:
        raise NotFoundError("Training code", str(code_id))

    db.delete(code)
    db.commit()
    logger.info("training_code_deleted", code_id=code_id)


@router.get("/sessions", response_model=List[TrainingSessionResponse])
def list_training_sessions(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """List training sessions, newest first"""
    rows = (
        db.query(TrainingSession, func.count(TrainingMessage.id))
        .outerjoin(TrainingMessage, TrainingMessage.session_id == TrainingSession.id)
        .group_by(TrainingSession.id)
        .order_by(TrainingSession.started_at.desc())
        .all()
    )
    return [_session_response(session, message_count) for session, message_count in rows]


@router.get("/sessions/{session_id}", response_model=TrainingSessionDetailResponse)
def get_training_session(
    session_id: str,
    current_user: User = Depends(get_current_active_user),
    service: TrainingChatService = Depends(get_training_service),
):
    """Session detail with transcript and evaluation"""
    session = service.get_session(session_id)
    messages = service.transcript(session.id)
    summary = _session_response(session, len(messages))
    return TrainingSessionDetailResponse(
        **summary.model_dump(),
        messages=[TrainingMessageResponse.model_validate(m) for m in messages],
        evaluation=(
            TrainingEvaluationResponse.model_validate(session.evaluation)
            if session.evaluation else None
        ),
    )


@router.put("/sessions/{session_id}/evaluation", response_model=TrainingEvaluationResponse)
def review_training_session(
    session_id: str,
    evaluation_data: TrainingEvaluationUpdate,
    current_user: User = Depends(get_current_active_user),
    service: TrainingChatService = Depends(get_training_service),
):
    """Record the reviewer evaluation; replaces any previous one"""
    return service.save_review(session_id, evaluation_data, reviewer_id=current_user.id)


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_training_session(
    session_id: str,
    current_user: User = Depends(get_current_active_user),
    service: TrainingChatService = Depends(get_training_service),
):
    """Delete a session and its transcript"""
    session = service.get_session(session_id)
    service.db.delete(session)
    service.db.commit()
    logger.info("training_session_deleted", session_id=session_id)
