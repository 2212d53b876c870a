"""Due-review digest for one user."""

import logging
from datetime import datetime, timezone
from typing import Any

import pytz
from sqlalchemy.orm import Session

from src.models.user import User as UserModel
from src.services import scheduler
from src.services.controller import InsightController
from src.services.notifications import NotificationService
from src.services.store import SqlKeyValueStore

logger = logging.getLogger(__name__)


def is_digest_hour(user: UserModel, now: datetime, hour: int) -> bool:
    """Whether ``now`` falls in the digest hour of the user's own timezone."""
    return now.astimezone(pytz.timezone(user.timezone or "UTC")).hour == hour


def count_due(db: Session, user: UserModel, now: datetime | None = None) -> int:
    """Number of insights the user has waiting for review."""
    now = now or datetime.now(timezone.utc)
    controller = InsightController(
        SqlKeyValueStore(db), user.scope, tz=pytz.timezone(user.timezone or "UTC")
    )
    try:
        return sum(1 for insight in controller.insights if scheduler.is_due(insight, now))
    finally:
        controller.close()


async def send_digest(
    db: Session, user: UserModel, service: NotificationService | None = None
) -> dict[str, Any]:
    """Push the due count to the user; nothing is sent when nothing is due."""
    due = count_due(db, user)
    if due == 0:
        logger.debug(f"Nothing due for user {user.id}, skipping digest")
        return {"success": True, "user_id": user.id, "due_count": 0, "sent": False}

    service = service or NotificationService()
    result = await service.send_due_review_digest(user.id, due)
    result["sent"] = result["success"]
    return result
