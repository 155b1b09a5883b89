"""
Dashboard and notification routes
"""
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from convertia.auth.dependencies import get_current_active_user
from convertia.core.database import get_db
from convertia.dashboard.schemas import DashboardStats, InterviewNotification
from convertia.dashboard.service import get_stats, interview_notifications
from convertia.models.user import User

router = APIRouter(prefix="/api/v1", tags=["Dashboard"])


@router.get("/dashboard/stats", response_model=DashboardStats)
def dashboard_stats(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """Headline recruiting figures"""
    return get_stats(db)


@router.get("/notifications", response_model=List[InterviewNotification])
def notifications(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """Interviews assigned to the current user"""
    return interview_notifications(db, current_user)
