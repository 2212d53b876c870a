"""Practice performance and review metrics."""

from datetime import date, datetime, timedelta, timezone, tzinfo

from src.schemas.insight import ExerciseType, Insight, ReviewAction
from src.schemas.stats import PerformanceStats, ReviewMetrics, TypeTally
from src.services import scheduler


def performance_stats(insight: Insight) -> PerformanceStats:
    """Attempts, accuracy and per-type tallies for one insight."""
    by_type = {exercise_type.value: TypeTally() for exercise_type in ExerciseType}
    history = insight.exercise_history
    if not history:
        return PerformanceStats(
            total_exercises=0,
            correct_answers=0,
            accuracy=0,
            last_exercise_date=None,
            exercises_by_type=by_type,
        )

    for attempt in history:
        tally = by_type[attempt.type.value]
        tally.total += 1
        if attempt.correct:
            tally.correct += 1

    correct = sum(1 for attempt in history if attempt.correct)
    return PerformanceStats(
        total_exercises=len(history),
        correct_answers=correct,
        accuracy=round(correct / len(history) * 100),
        last_exercise_date=insight.last_exercise_date,
        exercises_by_type=by_type,
    )


def review_streak(insights: list[Insight], now: datetime, tz: tzinfo = timezone.utc) -> int:
    """Consecutive local days with review activity, ending today or yesterday."""
    days = sorted(
        {event.timestamp.astimezone(tz).date() for i in insights for event in i.review_history},
        reverse=True,
    )
    today = now.astimezone(tz).date()
    if not days or days[0] not in (today, today - timedelta(days=1)):
        return 0

    streak = 1
    previous: date = days[0]
    for day in days[1:]:
        if previous - day != timedelta(days=1):
            break
        streak += 1
        previous = day
    return streak


def review_metrics(
    insights: list[Insight], now: datetime | None = None, tz: tzinfo = timezone.utc
) -> ReviewMetrics:
    """Dashboard and metrics-panel figures for a whole collection."""
    now = now or datetime.now(timezone.utc)
    total = len(insights)
    mastered = sum(1 for i in insights if i.is_mastered)

    first_review_gaps = []
    for insight in insights:
        created = next((e for e in insight.review_history if e.action == ReviewAction.CREATED), None)
        reviewed = next((e for e in insight.review_history if e.action == ReviewAction.REVIEWED), None)
        if created and reviewed:
            first_review_gaps.append((reviewed.timestamp - created.timestamp) / scheduler.DAY)

    stage_distribution = [0] * len(scheduler.REVIEW_INTERVALS)
    for insight in insights:
        if not insight.is_mastered:
            stage_distribution[insight.review_stage] += 1

    overdue = sum(1 for i in insights if not i.is_mastered and i.next_review < now)
    reviews_done = sum(
        1 for i in insights for e in i.review_history if e.action == ReviewAction.REVIEWED
    )
    attempted = overdue + reviews_done

    return ReviewMetrics(
        total_insights=total,
        mastered_insights=mastered,
        progress=mastered / total * 100 if total else 0.0,
        due_count=sum(1 for i in insights if scheduler.is_due(i, now)),
        exercise_available_count=sum(
            1 for i in insights if scheduler.is_eligible_for_exercise(i, now, tz)
        ),
        streak=review_streak(insights, now, tz),
        avg_days_to_first_review=(
            sum(first_review_gaps) / len(first_review_gaps) if first_review_gaps else 0.0
        ),
        stage_distribution=stage_distribution,
        review_rate=reviews_done / attempted * 100 if attempted else 0.0,
    )
