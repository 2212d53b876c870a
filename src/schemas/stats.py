"""Statistics schemas."""

from datetime import datetime

from src.schemas.base import CamelModel


class TypeTally(CamelModel):
    """Attempt counts for one exercise type."""

    total: int = 0
    correct: int = 0


class PerformanceStats(CamelModel):
    """Practice performance of a single insight."""

    total_exercises: int
    correct_answers: int
    accuracy: int
    last_exercise_date: datetime | None = None
    exercises_by_type: dict[str, TypeTally]


class ReviewMetrics(CamelModel):
    """Collection-wide review metrics."""

    total_insights: int
    mastered_insights: int
    progress: float
    due_count: int
    exercise_available_count: int
    streak: int
    avg_days_to_first_review: float
    stage_distribution: list[int]
    review_rate: float
