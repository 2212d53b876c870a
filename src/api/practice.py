"""Practice API endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from src.api.deps import get_controller
from src.schemas.exercise import AttemptCreate, AttemptResult, Exercise, PracticeSession
from src.services.controller import InsightController
from src.services.errors import InsightNotFoundError

router = APIRouter(prefix="/api/v1/users/{user_id}/practice", tags=["practice"])


@router.get("/", response_model=PracticeSession)
async def get_practice_session(
    controller: InsightController = Depends(get_controller),
) -> PracticeSession:
    """Assemble exercises from the insights eligible for practice today."""
    return await controller.practice_session()


@router.post("/{insight_id}/exercises", response_model=list[Exercise])
async def generate_exercises(
    insight_id: str, controller: InsightController = Depends(get_controller)
) -> list[Exercise]:
    """Generate exercises for a single insight with the user's strategy."""
    try:
        return await controller.generate_exercises(insight_id)
    except InsightNotFoundError:
        raise HTTPException(status_code=404, detail="Insight not found")


@router.post("/{insight_id}/attempts", response_model=AttemptResult, status_code=201)
def record_attempt(
    insight_id: str,
    attempt: AttemptCreate,
    controller: InsightController = Depends(get_controller),
) -> AttemptResult:
    """Grade an answer and record it in the insight's practice history."""
    if attempt.exercise.insight_id != insight_id:
        raise HTTPException(status_code=400, detail="Exercise belongs to another insight")
    try:
        correct, insight = controller.record_exercise(
            insight_id, attempt.exercise, attempt.answer, attempt.correct
        )
    except InsightNotFoundError:
        raise HTTPException(status_code=404, detail="Insight not found")

    return AttemptResult(
        correct=correct,
        correct_answer=attempt.exercise.correct_answer,
        explanation=attempt.exercise.explanation,
        insight=insight,
    )
