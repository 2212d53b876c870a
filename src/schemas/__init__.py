"""Pydantic schemas for request/response validation."""

from src.schemas.exercise import (
    AttemptCreate,
    AttemptResult,
    Exercise,
    ExerciseSettings,
    PracticeSession,
    Theme,
    UserSettings,
)
from src.schemas.insight import (
    ExerciseAttempt,
    ExerciseType,
    Insight,
    InsightCreate,
    InsightUpdate,
    ReviewAction,
    ReviewEvent,
    ReviewOutcome,
)
from src.schemas.navigation import (
    DashboardFilter,
    NavigateRequest,
    NavigationResponse,
    NavigationState,
    ReviewRequest,
    ReviewResponse,
    View,
)
from src.schemas.stats import PerformanceStats, ReviewMetrics, TypeTally
from src.schemas.user import User, UserCreate, UserUpdate

__all__ = [
    "AttemptCreate",
    "AttemptResult",
    "DashboardFilter",
    "Exercise",
    "ExerciseAttempt",
    "ExerciseSettings",
    "ExerciseType",
    "Insight",
    "InsightCreate",
    "InsightUpdate",
    "NavigateRequest",
    "NavigationResponse",
    "NavigationState",
    "PerformanceStats",
    "PracticeSession",
    "ReviewAction",
    "ReviewEvent",
    "ReviewMetrics",
    "ReviewOutcome",
    "ReviewRequest",
    "ReviewResponse",
    "Theme",
    "TypeTally",
    "User",
    "UserCreate",
    "UserSettings",
    "UserUpdate",
    "View",
]
