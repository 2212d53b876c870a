"""Insight schemas."""

from enum import Enum

from pydantic import Field, field_validator

from src.schemas.base import CamelModel, UTCDatetime


class ReviewAction(str, Enum):
    """Kind of entry in an insight's review history."""

    CREATED = "created"
    REVIEWED = "reviewed"
    MASTERED = "mastered"


class ReviewOutcome(str, Enum):
    """What the user answered on the review screen."""

    REMEMBERED = "remembered"
    STRUGGLED = "struggled"
    MASTERED = "mastered"


class ExerciseType(str, Enum):
    """Exercise types produced by the generators."""

    FILL_BLANK = "fill-blank"
    MULTIPLE_CHOICE = "multiple-choice"
    OPEN_ANSWER = "open-answer"


class ReviewEvent(CamelModel):
    """One entry of the review history."""

    timestamp: UTCDatetime
    action: ReviewAction


class ExerciseAttempt(CamelModel):
    """Recorded outcome of a practice attempt."""

    timestamp: UTCDatetime
    type: ExerciseType
    correct: bool | None = None


def _check_content(value: str) -> str:
    value = value.strip()
    if len(value) < 10:
        raise ValueError("Content must be at least 10 characters long")
    return value


class InsightCreate(CamelModel):
    """Draft submitted from the add form."""

    content: str
    note: str | None = Field(default=None, max_length=500)
    source: str | None = None
    tags: list[str] = []
    audio_enabled: bool = False

    @field_validator("content")
    @classmethod
    def check_content(cls, content: str) -> str:
        return _check_content(content)

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, tags: list[str]) -> list[str]:
        return [tag.strip() for tag in tags if tag.strip()]


class InsightUpdate(CamelModel):
    """Editable metadata of an existing insight.

    Only fields present in the request change. ``note`` and ``source`` can be
    cleared with an explicit null; the other fields cannot be null.
    """

    content: str | None = None
    note: str | None = Field(default=None, max_length=500)
    source: str | None = None
    tags: list[str] | None = None
    audio_enabled: bool | None = None

    @field_validator("content")
    @classmethod
    def check_content(cls, content: str | None) -> str:
        if content is None:
            raise ValueError("Content cannot be removed")
        return _check_content(content)

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, tags: list[str] | None) -> list[str]:
        if tags is None:
            raise ValueError("Tags cannot be null; send an empty list instead")
        return [tag.strip() for tag in tags if tag.strip()]

    @field_validator("audio_enabled")
    @classmethod
    def check_audio_enabled(cls, audio_enabled: bool | None) -> bool:
        if audio_enabled is None:
            raise ValueError("audioEnabled cannot be null")
        return audio_enabled


class Insight(CamelModel):
    """A captured note together with its review and practice state."""

    id: str
    content: str = Field(min_length=1)
    note: str | None = None
    source: str | None = None
    tags: list[str] = []
    timestamp: UTCDatetime
    review_stage: int = Field(default=0, ge=0, le=3)
    next_review: UTCDatetime
    is_mastered: bool = False
    review_history: list[ReviewEvent]
    exercise_enabled: bool = False
    last_exercise_date: UTCDatetime | None = None
    exercise_history: list[ExerciseAttempt] = []
    audio_enabled: bool = False

    @field_validator("review_history")
    @classmethod
    def starts_with_created(cls, history: list[ReviewEvent]) -> list[ReviewEvent]:
        if not history or history[0].action != ReviewAction.CREATED:
            raise ValueError("Review history must start with a 'created' entry")
        return history
