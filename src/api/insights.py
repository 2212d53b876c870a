"""Insight API endpoints (dashboard and add form)."""

from fastapi import APIRouter, Depends, HTTPException, Query

from src.api.deps import get_controller
from src.schemas.insight import Insight, InsightCreate, InsightUpdate
from src.schemas.navigation import DashboardFilter
from src.services.controller import InsightController
from src.services.errors import InsightNotFoundError

router = APIRouter(prefix="/api/v1/users/{user_id}/insights", tags=["insights"])


@router.post("/", response_model=Insight, status_code=201)
def create_insight(
    draft: InsightCreate, controller: InsightController = Depends(get_controller)
) -> Insight:
    """Capture a new insight, due for its first review in one day."""
    return controller.add(draft)


@router.get("/", response_model=list[Insight])
def list_insights(
    status_filter: DashboardFilter = Query(DashboardFilter.TODAY, alias="filter"),
    search: str | None = None,
    controller: InsightController = Depends(get_controller),
) -> list[Insight]:
    """List insights for the dashboard, highest review priority first."""
    return controller.list_insights(status_filter, search)


@router.get("/{insight_id}", response_model=Insight)
def get_insight(insight_id: str, controller: InsightController = Depends(get_controller)) -> Insight:
    """Get an insight by ID."""
    try:
        return controller.get(insight_id)
    except InsightNotFoundError:
        raise HTTPException(status_code=404, detail="Insight not found")


@router.patch("/{insight_id}", response_model=Insight)
def update_insight(
    insight_id: str,
    insight_update: InsightUpdate,
    controller: InsightController = Depends(get_controller),
) -> Insight:
    """Edit an insight's content or metadata."""
    try:
        return controller.edit(insight_id, insight_update)
    except InsightNotFoundError:
        raise HTTPException(status_code=404, detail="Insight not found")


@router.delete("/{insight_id}", status_code=204)
def delete_insight(insight_id: str, controller: InsightController = Depends(get_controller)) -> None:
    """Delete an insight permanently."""
    try:
        controller.delete(insight_id)
    except InsightNotFoundError:
        raise HTTPException(status_code=404, detail="Insight not found")
