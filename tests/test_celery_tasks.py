"""Tests for Celery tasks."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

from sqlalchemy.orm import Session

from src.models.user import User as UserModel
from src.services.digest import is_digest_hour
from src.tasks.review_tasks import send_due_review_digest_for_user, send_due_review_digests


EIGHT_UTC = datetime(2024, 3, 10, 8, 0, tzinfo=timezone.utc)


def make_users(db_session: Session, *names: str, tz: str = "UTC") -> list[UserModel]:
    users = [UserModel(name=name, timezone=tz) for name in names]
    db_session.add_all(users)
    db_session.commit()
    return users


class TestDigestTasks:
    """Tests for the due-review digest tasks."""

    def test_digest_for_all_users(self, db_session: Session):
        """Users are counted by outcome; a failing user does not stop the run."""
        ana, bia, caio = make_users(db_session, "Ana", "Bia", "Caio")

        async def fake_send_digest(db, user):
            if user.id == bia.id:
                raise RuntimeError("ntfy down")
            if user.id == caio.id:
                return {"success": True, "user_id": user.id, "due_count": 0, "sent": False}
            return {"success": True, "user_id": user.id, "due_count": 2, "sent": True}

        with (
            patch("src.tasks.review_tasks.SessionLocal", return_value=db_session),
            patch("src.tasks.review_tasks._now", return_value=EIGHT_UTC),
            patch("src.tasks.review_tasks.send_digest", side_effect=fake_send_digest),
        ):
            result = send_due_review_digests()

        assert result == {"users": 3, "sent": 1, "failed": 1}

    def test_digest_only_at_local_digest_hour(self, db_session: Session):
        """Users are notified at the digest hour of their own timezone."""
        [london] = make_users(db_session, "Ana", tz="Europe/London")
        make_users(db_session, "Bia", tz="America/Sao_Paulo")
        notified = []

        async def fake_send_digest(db, user):
            notified.append(user.id)
            return {"success": True, "user_id": user.id, "due_count": 1, "sent": True}

        with (
            patch("src.tasks.review_tasks.SessionLocal", return_value=db_session),
            patch("src.tasks.review_tasks._now", return_value=EIGHT_UTC),
            patch("src.tasks.review_tasks.send_digest", side_effect=fake_send_digest),
        ):
            result = send_due_review_digests()

        # 08:00 in London, 05:00 in Sao Paulo
        assert notified == [london.id]
        assert result == {"users": 1, "sent": 1, "failed": 0}

    def test_digest_for_unknown_user(self, db_session: Session):
        with patch("src.tasks.review_tasks.SessionLocal", return_value=db_session):
            result = send_due_review_digest_for_user(99999)

        assert result == {"success": False, "error": "User not found"}

    def test_digest_for_user(self, db_session: Session):
        [user] = make_users(db_session, "Ana")

        with (
            patch("src.tasks.review_tasks.SessionLocal", return_value=db_session),
            patch(
                "src.tasks.review_tasks.send_digest",
                new_callable=AsyncMock,
                return_value={"success": True, "user_id": user.id, "due_count": 0, "sent": False},
            ) as mock_digest,
        ):
            result = send_due_review_digest_for_user(user.id)

        assert result["sent"] is False
        mock_digest.assert_awaited_once()


class TestCeleryTaskImports:
    """Test that Celery tasks can be imported."""

    def test_import_review_tasks(self):
        from src.tasks import send_due_review_digest_for_user, send_due_review_digests

        assert send_due_review_digests is not None
        assert send_due_review_digest_for_user is not None

    def test_celery_app_configuration(self):
        """Test Celery app is configured correctly."""
        from src.celery_app import app

        assert app.conf.task_serializer == "json"
        assert app.conf.result_serializer == "json"
        schedule = app.conf.beat_schedule["send-due-review-digests-hourly"]
        assert schedule["task"] == "review_tasks.send_due_review_digests"
        assert schedule["schedule"].hour == set(range(24))
        assert schedule["schedule"].minute == {0}


def test_is_digest_hour():
    user = UserModel(name="Ana", timezone="America/Sao_Paulo")

    assert is_digest_hour(user, datetime(2024, 3, 10, 11, 0, tzinfo=timezone.utc), 8)
    assert not is_digest_hour(user, EIGHT_UTC, 8)
