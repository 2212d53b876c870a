"""Statistics API endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException

from src.api.deps import get_controller
from src.schemas.stats import PerformanceStats, ReviewMetrics
from src.services.controller import InsightController
from src.services.errors import InsightNotFoundError
from src.services.stats import performance_stats, review_metrics

router = APIRouter(prefix="/api/v1/users/{user_id}/stats", tags=["stats"])


@router.get("", response_model=ReviewMetrics)
def get_review_metrics(controller: InsightController = Depends(get_controller)) -> ReviewMetrics:
    """Streak, progress and stage distribution for the whole collection."""
    return review_metrics(controller.insights, datetime.now(timezone.utc), controller.tz)


@router.get("/insights/{insight_id}", response_model=PerformanceStats)
def get_insight_performance(
    insight_id: str, controller: InsightController = Depends(get_controller)
) -> PerformanceStats:
    """Practice accuracy of one insight."""
    try:
        return performance_stats(controller.get(insight_id))
    except InsightNotFoundError:
        raise HTTPException(status_code=404, detail="Insight not found")
