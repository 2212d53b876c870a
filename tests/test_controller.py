"""Tests for the per-user application state controller."""

import random
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from src.schemas.exercise import ExerciseSettings, Theme, UserSettings
from src.schemas.insight import ExerciseType, InsightCreate, InsightUpdate, ReviewOutcome
from src.schemas.navigation import DashboardFilter, View
from src.services.controller import (
    INSIGHTS_KEY,
    NAVIGATION_KEY,
    InsightController,
    decode_import,
    parse_import,
)
from src.services.errors import (
    ImportFormatError,
    InsightMasteredError,
    InsightNotFoundError,
    NothingToReviewError,
    StoreError,
)
from src.services.store import InMemoryKeyValueStore
from tests.conftest import NOW, export_record

SCOPE = "1"


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def controller(store):
    controller = InsightController(store, SCOPE, rng=random.Random(11))
    yield controller
    controller.close()


def seed(store, *insights):
    store.set(SCOPE, INSIGHTS_KEY, [export_record(i) for i in insights])


class TestCollection:
    """Tests for adding, editing and deleting insights."""

    def test_add_creates_stage_zero_insight(self, controller, store):
        controller.navigate(View.ADD, NOW)
        insight = controller.add(InsightCreate(content="Dormir bem consolida a memória."), NOW)

        assert insight.review_stage == 0
        assert insight.next_review == NOW + timedelta(days=1)
        assert insight.review_history[0].action == "created"
        assert controller.navigation.view == View.DASHBOARD
        assert len(store.get(SCOPE, INSIGHTS_KEY)) == 1

    def test_loads_existing_collection(self, store, make_insight):
        seed(store, make_insight(), make_insight())
        controller = InsightController(store, SCOPE)
        assert len(controller.insights) == 2
        controller.close()

    def test_corrupt_collection_falls_back_to_empty(self, store):
        store.set(SCOPE, INSIGHTS_KEY, [{"id": "x"}])
        controller = InsightController(store, SCOPE)
        assert controller.insights == []
        controller.close()

    def test_get_unknown(self, controller):
        with pytest.raises(InsightNotFoundError):
            controller.get("missing")

    def test_edit_changes_only_given_fields(self, controller, store, make_insight):
        original = make_insight(note="nota", tags=["foco"])
        seed(store, original)

        edited = controller.edit(original.id, InsightUpdate(tags=["foco", "prática"]), NOW)

        assert edited.tags == ["foco", "prática"]
        assert edited.note == "nota"
        assert edited.content == original.content
        assert edited.review_stage == original.review_stage

    def test_delete(self, controller, store, make_insight):
        a, b = make_insight(), make_insight()
        seed(store, a, b)

        controller.delete(a.id)

        assert [i.id for i in controller.insights] == [b.id]
        with pytest.raises(InsightNotFoundError):
            controller.delete(a.id)

    def test_pushed_changes_replace_collection(self, store, controller):
        other = InsightController(store, SCOPE)
        other.add(InsightCreate(content="Escrever ajuda a pensar melhor."), NOW)

        assert len(controller.insights) == 1
        other.close()

    def test_closed_controller_stops_listening(self, store):
        controller = InsightController(store, SCOPE)
        controller.close()
        writer = InsightController(store, SCOPE)
        writer.add(InsightCreate(content="Escrever ajuda a pensar melhor."), NOW)

        assert controller.insights == []
        writer.close()

    def test_failed_write_keeps_in_memory_state(self, caplog):
        store = MagicMock()
        store.get.return_value = None
        store.set.side_effect = StoreError("unavailable")
        controller = InsightController(store, SCOPE)

        insight = controller.add(InsightCreate(content="Persistência pode falhar."), NOW)

        assert controller.insights == [insight]
        assert "keeping in-memory value" in caplog.text

    def test_failed_read_starts_empty(self):
        store = MagicMock()
        store.get.side_effect = StoreError("unavailable")
        controller = InsightController(store, SCOPE)

        assert controller.insights == []
        assert controller.navigation.view == View.DASHBOARD


class TestDashboardList:
    """Tests for filtering and searching."""

    def test_today_shows_due_by_priority(self, controller, store, make_insight):
        later = make_insight(next_review=NOW - timedelta(hours=1))
        first = make_insight(next_review=NOW - timedelta(days=3))
        future = make_insight(next_review=NOW + timedelta(days=1))
        seed(store, later, first, future)

        result = controller.list_insights(DashboardFilter.TODAY, now=NOW)

        assert [i.id for i in result] == [first.id, later.id]

    def test_completed(self, controller, store, make_insight):
        mastered = make_insight(is_mastered=True)
        seed(store, make_insight(), mastered)

        assert controller.list_insights(DashboardFilter.COMPLETED, now=NOW) == [mastered]

    def test_search_content_note_and_tags(self, controller, store, make_insight):
        by_content = make_insight(content="Sono profundo ajuda a memória.")
        by_note = make_insight(note="Ler sobre MEMÓRIA de trabalho")
        by_tag = make_insight(tags=["memória"])
        seed(store, by_content, by_note, by_tag, make_insight())

        result = controller.list_insights(DashboardFilter.ALL, search="memória", now=NOW)

        assert {i.id for i in result} == {by_content.id, by_note.id, by_tag.id}


class TestReview:
    """Tests for navigation and reviews."""

    def test_nothing_to_review(self, controller, store, make_insight):
        seed(store, make_insight(next_review=NOW + timedelta(days=1)))

        with pytest.raises(NothingToReviewError):
            controller.navigate(View.REVIEW, NOW)
        assert controller.navigation.view == View.DASHBOARD

    def test_navigate_selects_highest_priority(self, controller, store, make_insight):
        low = make_insight(next_review=NOW - timedelta(hours=1))
        high = make_insight(next_review=NOW - timedelta(days=2))
        seed(store, low, high)

        state = controller.navigate(View.REVIEW, NOW)

        assert state.view == View.REVIEW
        assert controller.reviewing.id == high.id
        assert store.get(SCOPE, NAVIGATION_KEY)["reviewingId"] == high.id

    def test_remembered_then_next_then_dashboard(self, controller, store, make_insight):
        a = make_insight(next_review=NOW - timedelta(days=2))
        b = make_insight(next_review=NOW - timedelta(hours=1))
        seed(store, a, b)
        controller.navigate(View.REVIEW, NOW)

        reviewed = controller.review(a.id, ReviewOutcome.REMEMBERED, NOW)

        assert reviewed.review_stage == 1
        assert reviewed.next_review == NOW + timedelta(days=3)
        assert controller.reviewing.id == b.id

        controller.review(b.id, ReviewOutcome.STRUGGLED, NOW)

        assert controller.navigation.view == View.DASHBOARD
        assert controller.reviewing is None

    def test_review_from_card_enters_review(self, controller, store, make_insight):
        card = make_insight(next_review=NOW + timedelta(days=1))
        seed(store, card)

        reviewed = controller.review(card.id, ReviewOutcome.REMEMBERED, NOW)

        assert reviewed.review_stage == 1
        assert controller.navigation.view == View.DASHBOARD

    def test_mastered_leaves_rotation(self, controller, store, make_insight):
        insight = make_insight(next_review=NOW - timedelta(days=1))
        seed(store, insight)
        controller.navigate(View.REVIEW, NOW)

        controller.review(insight.id, ReviewOutcome.MASTERED, NOW)

        assert controller.get(insight.id).is_mastered
        with pytest.raises(InsightMasteredError):
            controller.start_review(insight.id)
        with pytest.raises(NothingToReviewError):
            controller.navigate(View.REVIEW, NOW)

    def test_deleting_reviewed_insight_returns_to_dashboard(self, controller, store, make_insight):
        insight = make_insight(next_review=NOW - timedelta(days=1))
        seed(store, insight)
        controller.navigate(View.REVIEW, NOW)

        controller.delete(insight.id)

        assert controller.navigation.view == View.DASHBOARD


class TestImportExport:
    """Tests for import, export and clear."""

    def test_export_round_trip(self, controller, store, make_insight):
        seed(store, make_insight(note="n"), make_insight(tags=["t"]))
        exported = controller.export()

        assert controller.import_insights(exported, NOW) == controller.insights
        assert controller.export() == exported

    def test_malformed_import_leaves_collection(self, controller, store, make_insight):
        seed(store, make_insight())
        before = controller.export()

        for payload in ({"id": "x"}, [{"content": "sem id"}], ["texto"], [{"id": "x", "content": ""}]):
            with pytest.raises(ImportFormatError):
                controller.import_insights(payload, NOW)

        assert controller.export() == before
        assert store.get(SCOPE, INSIGHTS_KEY) == before

    def test_import_fills_missing_fields(self):
        [insight] = parse_import([{"id": "a", "content": "Só o essencial."}], NOW)

        assert insight.timestamp == NOW
        assert insight.review_stage == 0
        assert insight.next_review == NOW + timedelta(days=1)
        assert insight.review_history[0].action == "created"

    def test_import_accepts_epoch_milliseconds(self):
        millis = int(NOW.timestamp() * 1000)
        [insight] = parse_import(
            [{"id": "a", "content": "Datas em milissegundos.", "timestamp": millis}], NOW
        )
        assert insight.timestamp == NOW

    def test_import_rejects_duplicate_ids(self):
        payload = [{"id": "a", "content": "Primeiro."}, {"id": "a", "content": "Segundo."}]
        with pytest.raises(ImportFormatError):
            parse_import(payload, NOW)

    def test_import_empty_list_clears(self, controller, store, make_insight):
        seed(store, make_insight())
        assert controller.import_insights([], NOW) == []

    def test_clear(self, controller, store, make_insight):
        seed(store, make_insight())
        controller.clear()
        assert controller.insights == []
        assert store.get(SCOPE, INSIGHTS_KEY) == []


class TestPractice:
    """Tests for practice sessions and attempts."""

    def test_eligible_for_practice(self, controller, store, make_insight):
        stage_two = make_insight(review_stage=2)
        never = make_insight(review_stage=3)
        practised_yesterday = make_insight(
            review_stage=2, last_exercise_date=NOW - timedelta(days=1)
        )
        practised_today = make_insight(review_stage=2, last_exercise_date=NOW - timedelta(hours=1))
        seed(store, make_insight(review_stage=1), practised_yesterday, stage_two, never, practised_today)

        eligible = controller.eligible_for_practice(NOW)

        assert [i.id for i in eligible] == [stage_two.id, never.id, practised_yesterday.id]

    @pytest.mark.asyncio
    async def test_session_respects_limit_and_types(self, controller, store, make_insight):
        seed(store, *[make_insight(review_stage=2) for _ in range(4)])
        settings = ExerciseSettings(
            max_exercises_per_session=4,
            enabled_types={ExerciseType.OPEN_ANSWER: False},
        )

        session = await controller.practice_session(NOW, settings)

        assert len(session.exercises) == 4
        assert all(e.type != ExerciseType.OPEN_ANSWER for e in session.exercises)
        assert len(session.insight_ids) == 4

    @pytest.mark.asyncio
    async def test_record_attempt_blocks_same_day(self, controller, store, make_insight):
        insight = make_insight(review_stage=2)
        seed(store, insight)
        [exercise] = [
            e
            for e in await controller.generate_exercises(insight.id, ExerciseSettings())
            if e.type == ExerciseType.FILL_BLANK
        ]

        correct, updated = controller.record_exercise(
            insight.id, exercise, exercise.correct_answer.upper(), now=NOW
        )

        assert correct is True
        assert updated.last_exercise_date == NOW
        assert updated.exercise_enabled is True
        assert len(updated.exercise_history) == 1
        assert controller.eligible_for_practice(NOW + timedelta(hours=1)) == []

    @pytest.mark.asyncio
    async def test_open_answer_is_self_assessed(self, controller, store, make_insight):
        insight = make_insight(review_stage=2)
        seed(store, insight)
        exercises = await controller.generate_exercises(insight.id, ExerciseSettings())
        open_answer = next(e for e in exercises if e.type == ExerciseType.OPEN_ANSWER)

        correct, updated = controller.record_exercise(
            insight.id, open_answer, "qualquer coisa", correct=True, now=NOW
        )

        assert correct is True
        assert updated.exercise_history[-1].type == ExerciseType.OPEN_ANSWER


class TestSettings:
    """Tests for settings persistence."""

    def test_defaults(self, controller):
        settings = controller.load_settings()
        assert settings.exercise.use_ai is False
        assert settings.exercise.max_exercises_per_session == 5
        assert settings.theme == Theme.LIGHT

    def test_save_and_load(self, controller):
        settings = UserSettings(
            exercise=ExerciseSettings(use_ai=True, max_exercises_per_session=3),
            theme=Theme.DARK,
        )
        controller.save_settings(settings)

        assert controller.load_settings() == settings


def test_created_then_remembered_scenario(controller):
    """A new insight is due in one day, and in three more after one good review."""
    insight = controller.add(InsightCreate(content="Revisar espaçado vence a curva do esquecimento."), NOW)
    assert insight.next_review == NOW + timedelta(days=1)

    review_time = NOW + timedelta(days=1)
    reviewed = controller.review(insight.id, ReviewOutcome.REMEMBERED, review_time)

    assert reviewed.review_stage == 1
    assert reviewed.next_review == review_time + timedelta(days=3)


def test_import_missing_content_on_one_element(controller, store, make_insight):
    """One bad record rejects the whole file."""
    seed(store, make_insight())
    before = controller.export()
    payload = [{"id": "ok", "content": "Registro válido."}, {"id": "bad"}]

    with pytest.raises(ImportFormatError):
        controller.import_insights(payload, NOW)

    assert controller.export() == before


def test_import_schedules_from_coerced_stage():
    """A stage given as text still drives the next review date."""
    [insight] = parse_import(
        [
            {
                "id": "a",
                "content": "Estágio como texto.",
                "reviewStage": "2",
                "timestamp": "2024-01-01T00:00:00Z",
            }
        ],
        NOW,
    )

    assert insight.review_stage == 2
    assert insight.next_review == datetime(2024, 1, 8, tzinfo=timezone.utc)


def test_import_rejects_non_numeric_stage():
    with pytest.raises(ImportFormatError):
        parse_import([{"id": "a", "content": "Estágio inválido.", "reviewStage": "dois"}], NOW)


def test_decode_import_rejects_invalid_json():
    with pytest.raises(ImportFormatError):
        decode_import(b"[{bad json")
    assert decode_import(b'[{"id": "a"}]') == [{"id": "a"}]
