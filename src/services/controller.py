"""Application state for one user.

The controller owns the user's insight collection and navigation state,
applies user actions through the scheduler and the exercise generators, and
writes results back to the key-value store. A failed write is logged and the
in-memory state is kept so the user is never blocked.
"""

import json
import logging
import random
from datetime import datetime, timezone, tzinfo
from typing import Any

from pydantic import TypeAdapter, ValidationError

from src.config import get_app_config
from src.schemas.base import UTCDatetime
from src.schemas.exercise import Exercise, ExerciseSettings, PracticeSession, Theme, UserSettings
from src.schemas.insight import (
    ExerciseAttempt,
    ExerciseType,
    Insight,
    InsightCreate,
    InsightUpdate,
    ReviewOutcome,
)
from src.schemas.navigation import DashboardFilter, NavigationState, View
from src.services import scheduler
from src.services.enhanced_exercises import get_exercise_generator
from src.services.errors import (
    ImportFormatError,
    InsightMasteredError,
    InsightNotFoundError,
    NothingToReviewError,
    StoreError,
)
from src.services.exercises import is_correct
from src.services.store import KeyValueStore

logger = logging.getLogger(__name__)

INSIGHTS_KEY = "insights"
NAVIGATION_KEY = "navigation"
EXERCISE_SETTINGS_KEY = "exercise_settings"
THEME_KEY = "theme"

_timestamp = TypeAdapter(UTCDatetime)
_stage = TypeAdapter(int)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _dump(insights: list[Insight]) -> list[dict[str, Any]]:
    return [insight.model_dump(mode="json", by_alias=True) for insight in insights]


def decode_import(raw: bytes) -> Any:
    """Parse the bytes of an uploaded export file."""
    try:
        return json.loads(raw)
    except ValueError as e:
        raise ImportFormatError(f"File is not valid JSON: {e}") from e


def parse_import(payload: Any, now: datetime | None = None) -> list[Insight]:
    """Validate an import payload; all or nothing.

    Every element must be an object with at least ``id`` and ``content``.
    Missing scheduling fields get the values of a freshly created insight.
    """
    now = now or _now()
    if not isinstance(payload, list) or not all(
        isinstance(item, dict) and "id" in item and "content" in item for item in payload
    ):
        raise ImportFormatError("Expected a list of insights each with 'id' and 'content'")

    insights: list[Insight] = []
    seen: set[str] = set()
    for item in payload:
        record = dict(item)
        try:
            created = _timestamp.validate_python(record.setdefault("timestamp", now))
        except ValidationError as e:
            raise ImportFormatError(f"Invalid timestamp for insight {item['id']!r}") from e
        try:
            stage = _stage.validate_python(record.setdefault("reviewStage", 0))
        except ValidationError as e:
            raise ImportFormatError(f"Invalid review stage for insight {item['id']!r}") from e
        record["reviewStage"] = stage
        record.setdefault("nextReview", scheduler.get_next_review_timestamp(stage, created))
        record.setdefault("reviewHistory", [{"timestamp": created, "action": "created"}])
        try:
            insight = Insight.model_validate(record)
        except ValidationError as e:
            raise ImportFormatError(f"Invalid insight {item['id']!r}: {e}") from e
        if insight.id in seen:
            raise ImportFormatError(f"Duplicate insight id {insight.id!r}")
        seen.add(insight.id)
        insights.append(insight)
    return insights


class InsightController:
    """Insight collection and navigation of a single user."""

    def __init__(
        self,
        store: KeyValueStore,
        scope: str,
        tz: tzinfo = timezone.utc,
        rng: random.Random | None = None,
    ) -> None:
        self.store = store
        self.scope = scope
        self.tz = tz
        self.rng = rng
        self.insights: list[Insight] = self._load_insights()
        self.navigation = self._load(NAVIGATION_KEY, NavigationState, NavigationState())
        self._unsubscribe = store.subscribe(scope, INSIGHTS_KEY, self._on_insights_changed)

    def close(self) -> None:
        """Stop listening for pushed changes."""
        self._unsubscribe()

    # Persistence

    def _read(self, key: str) -> Any | None:
        try:
            return self.store.get(self.scope, key)
        except StoreError as e:
            logger.error(f"Failed to load {key} for scope {self.scope}: {e}")
            return None

    def _write(self, key: str, value: Any) -> None:
        try:
            self.store.set(self.scope, key, value)
        except StoreError as e:
            logger.error(f"Failed to save {key} for scope {self.scope}, keeping in-memory value: {e}")

    def _load(self, key: str, model: type, default: Any) -> Any:
        value = self._read(key)
        if value is None:
            return default
        try:
            return model.model_validate(value)
        except ValidationError as e:
            logger.error(f"Discarding invalid {key} for scope {self.scope}: {e}")
            return default

    def _load_insights(self) -> list[Insight]:
        value = self._read(INSIGHTS_KEY)
        if not value:
            return []
        try:
            return [Insight.model_validate(record) for record in value]
        except ValidationError as e:
            logger.error(f"Discarding invalid insight collection for scope {self.scope}: {e}")
            return []

    def _on_insights_changed(self, value: Any) -> None:
        # Last write wins: a pushed collection replaces ours wholesale
        try:
            self.insights = [Insight.model_validate(record) for record in value or []]
        except ValidationError as e:
            logger.error(f"Ignoring invalid pushed collection for scope {self.scope}: {e}")

    def _save_insights(self) -> None:
        self._write(INSIGHTS_KEY, _dump(self.insights))

    def _save_navigation(self) -> None:
        self._write(NAVIGATION_KEY, self.navigation.model_dump(mode="json", by_alias=True))

    def _go_to(self, view: View, reviewing_id: str | None = None) -> None:
        self.navigation = NavigationState(view=view, reviewing_id=reviewing_id)
        self._save_navigation()

    # Collection

    def get(self, insight_id: str) -> Insight:
        for insight in self.insights:
            if insight.id == insight_id:
                return insight
        raise InsightNotFoundError(insight_id)

    def add(self, draft: InsightCreate, now: datetime | None = None) -> Insight:
        insight = scheduler.new_insight(draft, now)
        self.insights = [*self.insights, insight]
        self._save_insights()
        self._go_to(View.DASHBOARD)
        logger.info(f"Added insight {insight.id} for scope {self.scope}")
        return insight

    def update(
        self, insight_id: str, fields: dict[str, Any], now: datetime | None = None
    ) -> Insight:
        """Merge ``fields`` into an insight.

        In review mode the next due insight (other than this one) is
        selected right away, or navigation returns to the dashboard.
        """
        now = now or _now()
        current = self.get(insight_id)
        updated = Insight.model_validate({**current.model_dump(), **fields})

        previous = self.insights
        self.insights = [updated if i.id == insight_id else i for i in previous]
        self._save_insights()

        if self.navigation.view == View.REVIEW:
            remaining = scheduler.due_by_priority(previous, now, exclude_id=insight_id)
            if remaining:
                self._go_to(View.REVIEW, remaining[0].id)
            else:
                self._go_to(View.DASHBOARD)
        return updated

    def edit(self, insight_id: str, patch: InsightUpdate, now: datetime | None = None) -> Insight:
        """Change the user-editable metadata of an insight."""
        return self.update(insight_id, patch.model_dump(exclude_unset=True), now)

    def delete(self, insight_id: str) -> None:
        self.get(insight_id)
        self.insights = [i for i in self.insights if i.id != insight_id]
        self._save_insights()
        if self.navigation.reviewing_id == insight_id:
            self._go_to(View.DASHBOARD)
        logger.info(f"Deleted insight {insight_id} for scope {self.scope}")

    def import_insights(self, payload: Any, now: datetime | None = None) -> list[Insight]:
        """Replace the whole collection; nothing changes if validation fails."""
        self.insights = parse_import(payload, now)
        self._save_insights()
        self._go_to(View.DASHBOARD)
        logger.info(f"Imported {len(self.insights)} insights for scope {self.scope}")
        return self.insights

    def export(self) -> list[dict[str, Any]]:
        return _dump(self.insights)

    def clear(self) -> None:
        self.insights = []
        self._save_insights()
        self._go_to(View.DASHBOARD)
        logger.info(f"Cleared all insights for scope {self.scope}")

    def list_insights(
        self,
        status_filter: DashboardFilter = DashboardFilter.TODAY,
        search: str | None = None,
        now: datetime | None = None,
    ) -> list[Insight]:
        """Dashboard list, highest review priority first."""
        now = now or _now()
        if status_filter == DashboardFilter.TODAY:
            result = [i for i in self.insights if scheduler.is_due(i, now)]
        elif status_filter == DashboardFilter.COMPLETED:
            result = [i for i in self.insights if i.is_mastered]
        else:
            result = list(self.insights)

        if search:
            term = search.lower()
            result = [
                i
                for i in result
                if term in i.content.lower()
                or (i.note and term in i.note.lower())
                or any(term in tag.lower() for tag in i.tags)
            ]

        return sorted(result, key=lambda i: scheduler.calculate_priority(i, now), reverse=True)

    # Navigation and review

    @property
    def reviewing(self) -> Insight | None:
        if self.navigation.view != View.REVIEW or self.navigation.reviewing_id is None:
            return None
        try:
            return self.get(self.navigation.reviewing_id)
        except InsightNotFoundError:
            return None

    def navigate(self, target: View, now: datetime | None = None) -> NavigationState:
        """Switch screens; entering review picks the top-priority due insight."""
        if target == View.REVIEW:
            due = scheduler.due_by_priority(self.insights, now)
            if not due:
                raise NothingToReviewError("You are up to date with your reviews")
            self._go_to(View.REVIEW, due[0].id)
        else:
            self._go_to(target)
        return self.navigation

    def start_review(self, insight_id: str) -> NavigationState:
        """Enter review mode on a specific insight, as from a dashboard card."""
        insight = self.get(insight_id)
        if insight.is_mastered:
            raise InsightMasteredError(f"Insight {insight_id} is already mastered")
        self._go_to(View.REVIEW, insight_id)
        return self.navigation

    def review(
        self, insight_id: str, outcome: ReviewOutcome, now: datetime | None = None
    ) -> Insight:
        """Apply a review outcome, then move on to the next due insight."""
        now = now or _now()
        updates = scheduler.apply_review(self.get(insight_id), outcome, now)
        if self.navigation.view != View.REVIEW or self.navigation.reviewing_id != insight_id:
            self.start_review(insight_id)
        return self.update(insight_id, updates, now)

    # Practice

    def eligible_for_practice(self, now: datetime | None = None) -> list[Insight]:
        """Eligible insights, least recently practised first."""
        now = now or _now()
        limit = get_app_config().exercises.get("max_insights_per_session", 5)
        never = datetime.min.replace(tzinfo=timezone.utc)
        eligible = [i for i in self.insights if scheduler.is_eligible_for_exercise(i, now, self.tz)]
        eligible.sort(key=lambda i: i.last_exercise_date or never)
        return eligible[:limit]

    async def generate_exercises(
        self, insight_id: str, settings: ExerciseSettings | None = None
    ) -> list[Exercise]:
        settings = settings or self.load_settings().exercise
        generator = get_exercise_generator(settings.use_ai, self.rng)
        exercises = await generator.generate(self.get(insight_id))
        return [e for e in exercises if settings.is_enabled(e.type)]

    async def practice_session(
        self, now: datetime | None = None, settings: ExerciseSettings | None = None
    ) -> PracticeSession:
        settings = settings or self.load_settings().exercise
        insights = self.eligible_for_practice(now)

        exercises: list[Exercise] = []
        for insight in insights:
            if len(exercises) >= settings.max_exercises_per_session:
                break
            exercises.extend(await self.generate_exercises(insight.id, settings))

        return PracticeSession(
            insight_ids=[i.id for i in insights],
            exercises=exercises[: settings.max_exercises_per_session],
        )

    def record_exercise(
        self,
        insight_id: str,
        exercise: Exercise,
        answer: str,
        correct: bool | None = None,
        now: datetime | None = None,
    ) -> tuple[bool, Insight]:
        """Grade an attempt and append it to the insight's practice history."""
        now = now or _now()
        insight = self.get(insight_id)
        if exercise.type == ExerciseType.OPEN_ANSWER:
            outcome = bool(correct)
        else:
            outcome = is_correct(exercise, answer)

        attempt = ExerciseAttempt(timestamp=now, type=exercise.type, correct=outcome)
        updated = self.update(
            insight_id,
            {
                "last_exercise_date": now,
                "exercise_history": [*insight.exercise_history, attempt],
                "exercise_enabled": True,
            },
            now,
        )
        return outcome, updated

    # Settings

    def load_settings(self) -> UserSettings:
        defaults = get_app_config().exercises
        exercise = self._load(
            EXERCISE_SETTINGS_KEY,
            ExerciseSettings,
            ExerciseSettings(
                use_ai=defaults.get("use_ai", False),
                max_exercises_per_session=defaults.get("max_per_session", 5),
            ),
        )
        theme = self._read(THEME_KEY)
        return UserSettings(exercise=exercise, theme=theme if theme in ("light", "dark") else Theme.LIGHT)

    def save_settings(self, settings: UserSettings) -> UserSettings:
        self._write(EXERCISE_SETTINGS_KEY, settings.exercise.model_dump(mode="json", by_alias=True))
        self._write(THEME_KEY, settings.theme.value)
        return settings
