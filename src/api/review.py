"""Navigation and review API endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from src.api.deps import get_controller
from src.schemas.navigation import (
    NavigateRequest,
    NavigationResponse,
    ReviewRequest,
    ReviewResponse,
)
from src.services.controller import InsightController
from src.services.errors import InsightMasteredError, InsightNotFoundError, NothingToReviewError

router = APIRouter(prefix="/api/v1/users/{user_id}", tags=["review"])


@router.get("/navigation", response_model=NavigationResponse)
def get_navigation(controller: InsightController = Depends(get_controller)) -> NavigationResponse:
    """Get the current screen and the insight under review, if any."""
    return NavigationResponse(view=controller.navigation.view, reviewing=controller.reviewing)


@router.post("/navigation", response_model=NavigationResponse)
def navigate(
    request: NavigateRequest, controller: InsightController = Depends(get_controller)
) -> NavigationResponse:
    """Move to another screen.

    Entering review selects the highest-priority due insight. When nothing is
    due the state is left unchanged and 409 is returned.
    """
    try:
        state = controller.navigate(request.target)
    except NothingToReviewError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return NavigationResponse(view=state.view, reviewing=controller.reviewing)


@router.post("/review/{insight_id}", response_model=ReviewResponse)
def review_insight(
    insight_id: str,
    request: ReviewRequest,
    controller: InsightController = Depends(get_controller),
) -> ReviewResponse:
    """Record a review outcome and move on to the next due insight."""
    try:
        insight = controller.review(insight_id, request.outcome)
    except InsightNotFoundError:
        raise HTTPException(status_code=404, detail="Insight not found")
    except InsightMasteredError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return ReviewResponse(
        insight=insight,
        view=controller.navigation.view,
        reviewing=controller.reviewing,
    )
