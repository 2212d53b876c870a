"""Review scheduling.

Insights move through four stages whose review intervals are 1, 3, 7 and 21
days. Everything here is a pure function of the insight and the current time.
"""

import uuid
from collections.abc import Iterable
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Any

from src.schemas.insight import (
    Insight,
    InsightCreate,
    ReviewAction,
    ReviewEvent,
    ReviewOutcome,
)
from src.services.errors import InsightMasteredError

REVIEW_INTERVALS = [1, 3, 7, 21]
MAX_STAGE = len(REVIEW_INTERVALS) - 1
DAY = timedelta(days=1)

# Priority weights
OVERDUE_WEIGHT = 10
STAGE_WEIGHT = -2
RECENCY_WEIGHT = 5
RECENCY_WINDOW_DAYS = 30


def _now() -> datetime:
    return datetime.now(timezone.utc)


def get_next_review_timestamp(stage: int, now: datetime | None = None) -> datetime:
    """Return when an insight at ``stage`` is next due.

    Stages outside the interval table fall back to a one day interval.
    """
    now = now or _now()
    interval = REVIEW_INTERVALS[stage] if 0 <= stage <= MAX_STAGE else 1
    return now + timedelta(days=interval)


def calculate_priority(insight: Insight, now: datetime | None = None) -> float:
    """Score an insight for review order; higher comes first.

    Overdue days dominate, later stages lose a little, and insights created
    in the last 30 days get a bonus that decays linearly to zero.
    """
    now = now or _now()
    days_overdue = max(0.0, (now - insight.next_review) / DAY)
    days_since_creation = (now - insight.timestamp) / DAY
    recency_bonus = max(0.0, 1 - days_since_creation / RECENCY_WINDOW_DAYS)
    return (
        days_overdue * OVERDUE_WEIGHT
        + insight.review_stage * STAGE_WEIGHT
        + recency_bonus * RECENCY_WEIGHT
    )


def is_due(insight: Insight, now: datetime | None = None) -> bool:
    """An insight is due once its review time has passed, unless mastered."""
    now = now or _now()
    return not insight.is_mastered and insight.next_review <= now


def due_by_priority(
    insights: Iterable[Insight], now: datetime | None = None, exclude_id: str | None = None
) -> list[Insight]:
    """Due insights sorted by descending priority, ties kept in input order."""
    now = now or _now()
    due = [i for i in insights if i.id != exclude_id and is_due(i, now)]
    return sorted(due, key=lambda i: calculate_priority(i, now), reverse=True)


def is_same_local_day(first: datetime, second: datetime, tz: tzinfo = timezone.utc) -> bool:
    """Compare calendar dates in ``tz`` rather than a rolling 24h window."""
    return first.astimezone(tz).date() == second.astimezone(tz).date()


def is_eligible_for_exercise(
    insight: Insight, now: datetime | None = None, tz: tzinfo = timezone.utc
) -> bool:
    """Whether the insight can be practised now.

    Only insights at stage 2 or later (or mastered ones) qualify, and each
    at most once per local calendar day.
    """
    now = now or _now()
    if insight.review_stage < 2 and not insight.is_mastered:
        return False
    if insight.last_exercise_date is None:
        return True
    return not is_same_local_day(insight.last_exercise_date, now, tz)


def apply_review(
    insight: Insight, outcome: ReviewOutcome, now: datetime | None = None
) -> dict[str, Any]:
    """Compute the field updates produced by a review outcome.

    "struggled" keeps the stage and reschedules it from now at the same
    interval. "mastered" leaves stage and due date alone.
    """
    now = now or _now()
    if insight.is_mastered:
        raise InsightMasteredError(f"Insight {insight.id} is already mastered")

    history = list(insight.review_history)
    if outcome == ReviewOutcome.MASTERED:
        history.append(ReviewEvent(timestamp=now, action=ReviewAction.MASTERED))
        return {"is_mastered": True, "review_history": history}

    stage = insight.review_stage
    if outcome == ReviewOutcome.REMEMBERED:
        stage = min(stage + 1, MAX_STAGE)
    history.append(ReviewEvent(timestamp=now, action=ReviewAction.REVIEWED))
    return {
        "review_stage": stage,
        "next_review": get_next_review_timestamp(stage, now),
        "review_history": history,
    }


def new_insight(draft: InsightCreate, now: datetime | None = None) -> Insight:
    """Build a fresh stage 0 insight from a draft."""
    now = now or _now()
    return Insight(
        id=str(uuid.uuid4()),
        content=draft.content,
        note=draft.note,
        source=draft.source,
        tags=draft.tags,
        timestamp=now,
        review_stage=0,
        next_review=get_next_review_timestamp(0, now),
        is_mastered=False,
        review_history=[ReviewEvent(timestamp=now, action=ReviewAction.CREATED)],
        exercise_enabled=False,
        exercise_history=[],
        audio_enabled=draft.audio_enabled,
    )
