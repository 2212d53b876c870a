"""Settings API endpoints."""

from fastapi import APIRouter, Depends

from src.api.deps import get_controller
from src.schemas.exercise import UserSettings
from src.services.controller import InsightController

router = APIRouter(prefix="/api/v1/users/{user_id}/settings", tags=["settings"])


@router.get("", response_model=UserSettings)
def read_settings(controller: InsightController = Depends(get_controller)) -> UserSettings:
    """Get exercise preferences and theme."""
    return controller.load_settings()


@router.put("", response_model=UserSettings)
def update_settings(
    settings: UserSettings, controller: InsightController = Depends(get_controller)
) -> UserSettings:
    """Replace exercise preferences and theme."""
    return controller.save_settings(settings)
