"""Celery tasks for clip-review."""

from src.tasks.review_tasks import send_due_review_digest_for_user, send_due_review_digests

__all__ = [
    "send_due_review_digest_for_user",
    "send_due_review_digests",
]
