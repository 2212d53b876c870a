"""Celery application configuration."""

from celery import Celery
from celery.schedules import crontab

from src.config import get_settings

settings = get_settings()

app = Celery(
    "clip_review",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["src.tasks.review_tasks"],
)

app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    result_expires=3600,  # 1 hour
    beat_schedule={
        # Hourly; each user is notified when it is digest_hour in their timezone
        "send-due-review-digests-hourly": {
            "task": "review_tasks.send_due_review_digests",
            "schedule": crontab(minute=0),
        },
    },
)
