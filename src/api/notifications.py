"""Notification API endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from src.api.deps import get_user
from src.database import get_db
from src.models.user import User as UserModel
from src.services.digest import send_digest
from src.services.notifications import NotificationService

router = APIRouter(prefix="/api/v1/notifications", tags=["notifications"])


@router.post("/test")
async def send_test_notification() -> dict:
    """Send a test notification to verify ntfy is working."""
    service = NotificationService()
    result = await service.send_test_notification()

    if not result["success"]:
        raise HTTPException(status_code=500, detail=result.get("error", "Failed to send"))

    return {"status": "sent", "message": "Test notification sent successfully"}


@router.post("/digest/{user_id}")
async def send_review_digest(
    user: UserModel = Depends(get_user), db: Session = Depends(get_db)
) -> dict:
    """Manually trigger the due-review digest for a user."""
    result = await send_digest(db, user)

    if not result["success"]:
        raise HTTPException(status_code=500, detail=result.get("error", "Failed to send"))

    return {
        "status": "sent" if result["sent"] else "skipped",
        "user_id": user.id,
        "due_count": result["due_count"],
    }
