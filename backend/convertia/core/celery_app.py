"""
Celery application for background AI work
"""
from celery import Celery

from convertia.core.config import settings

ANALYSIS_QUEUE = "analysis"

celery_app = Celery(
    "convertia",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["convertia.tasks.candidate_tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    # Resume analysis makes a single long completion call
    task_soft_time_limit=settings.CELERY_TASK_SOFT_TIME_LIMIT,
    task_time_limit=settings.CELERY_TASK_SOFT_TIME_LIMIT + 30,
    task_routes={"convertia.tasks.candidate_tasks.*": {"queue": ANALYSIS_QUEUE}},
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,
    result_expires=24 * 3600,
    task_always_eager=settings.CELERY_TASK_ALWAYS_EAGER,
)
