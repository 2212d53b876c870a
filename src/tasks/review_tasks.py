"""Celery tasks for the daily due-review digest."""

import asyncio
import logging
from datetime import datetime, timezone

from src.celery_app import app as celery_app
from src.config import get_settings
from src.database import SessionLocal
from src.models.user import User as UserModel
from src.services.digest import is_digest_hour, send_digest

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def run_async(coro):
    """Run an async coroutine in a sync context."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@celery_app.task(name="review_tasks.send_due_review_digests")
def send_due_review_digests() -> dict:
    """Notify users whose local time is the digest hour and who have insights due.

    Runs every hour. Users with nothing due are skipped. A failure for one
    user is logged and does not stop the others.
    """
    logger.info("Starting due-review digest")
    db = SessionLocal()
    try:
        now = _now()
        digest_hour = get_settings().digest_hour
        users = [u for u in db.query(UserModel).all() if is_digest_hour(u, now, digest_hour)]
        logger.info(f"Found {len(users)} users at digest hour {digest_hour}")

        sent = 0
        failed = 0
        for user in users:
            try:
                result = run_async(send_digest(db, user))
            except Exception as e:
                logger.error(f"Failed to send digest for user {user.id}: {e}")
                failed += 1
                continue

            if result.get("sent"):
                sent += 1
            elif not result.get("success"):
                failed += 1

        logger.info(f"Completed due-review digest: {sent} sent, {failed} failed")
        return {"users": len(users), "sent": sent, "failed": failed}

    finally:
        db.close()


@celery_app.task(name="review_tasks.send_due_review_digest_for_user")
def send_due_review_digest_for_user(user_id: int) -> dict:
    """Send the due-review digest to a single user.

    Args:
        user_id: User ID to notify
    """
    db = SessionLocal()
    try:
        user = db.query(UserModel).filter(UserModel.id == user_id).first()
        if not user:
            logger.error(f"User {user_id} not found")
            return {"success": False, "error": "User not found"}

        return run_async(send_digest(db, user))

    finally:
        db.close()
