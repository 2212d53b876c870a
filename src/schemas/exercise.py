"""Exercise and practice schemas."""

from enum import Enum

from pydantic import Field

from src.schemas.base import CamelModel
from src.schemas.insight import ExerciseType, Insight


class Exercise(CamelModel):
    """A generated practice item. Never persisted."""

    id: str
    insight_id: str
    type: ExerciseType
    prompt: str
    options: list[str] | None = None
    correct_answer: str
    explanation: str


class AttemptCreate(CamelModel):
    """An answer to a previously generated exercise.

    Open-answer exercises are not auto-graded; ``correct`` carries the
    user's own assessment for them and is ignored for the other types.
    """

    exercise: Exercise
    answer: str = ""
    correct: bool | None = None


class AttemptResult(CamelModel):
    """Outcome of a graded attempt."""

    correct: bool
    correct_answer: str
    explanation: str
    insight: Insight


class PracticeSession(CamelModel):
    """Exercises assembled for one practice session."""

    insight_ids: list[str]
    exercises: list[Exercise]


class Theme(str, Enum):
    """Colour theme preference."""

    LIGHT = "light"
    DARK = "dark"


def _all_types_enabled() -> dict[ExerciseType, bool]:
    return {exercise_type: True for exercise_type in ExerciseType}


class ExerciseSettings(CamelModel):
    """Per-user practice preferences."""

    use_ai: bool = False
    max_exercises_per_session: int = Field(default=5, ge=1, le=10)
    enabled_types: dict[ExerciseType, bool] = Field(default_factory=_all_types_enabled)

    def is_enabled(self, exercise_type: ExerciseType) -> bool:
        return self.enabled_types.get(exercise_type, True)


class UserSettings(CamelModel):
    """Everything on the settings screen."""

    exercise: ExerciseSettings = Field(default_factory=ExerciseSettings)
    theme: Theme = Theme.LIGHT
