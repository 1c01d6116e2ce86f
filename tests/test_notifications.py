"""Tests for the notification feed, its admin endpoints and the nightly purge."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from httpx import ASGITransport, AsyncClient

from blogdesk.core.deps import get_db
from blogdesk.core.errors import NotFoundError
from blogdesk.core.security import get_current_user
from blogdesk.main import app
from blogdesk.models.notification import Notification
from blogdesk.models.user import Role, User
from blogdesk.services import notification as notification_svc
from blogdesk.workers.notifications import purge_read_notifications

NOW = datetime(2026, 6, 15, 0, 0, tzinfo=timezone.utc)


def _make_admin() -> User:
    user = User(name="Admin", email="admin@example.com", role=Role.ADMIN)
    object.__setattr__(user, "id", 1)
    return user


def _make_notification(notification_id: int = 5, user: User | None = None) -> Notification:
    n = Notification(title="Author request", message="You have a new author request by Ada", is_read=False)
    object.__setattr__(n, "id", notification_id)
    object.__setattr__(n, "created_at", NOW)
    object.__setattr__(n, "updated_at", NOW)
    n.user = user
    return n


@pytest.fixture
async def client():
    db = AsyncMock()
    app.dependency_overrides[get_current_user] = _make_admin
    app.dependency_overrides[get_db] = lambda: db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
    app.dependency_overrides.clear()


class TestNotificationService:
    @pytest.mark.asyncio
    async def test_create_stages_without_commit(self):
        db = AsyncMock()
        db.add = MagicMock()

        n = await notification_svc.create_notification(db, title="Author request", message="m", user_id=2)

        db.add.assert_called_once_with(n)
        db.flush.assert_awaited_once()
        db.commit.assert_not_awaited()
        assert n.user_id == 2

    @pytest.mark.asyncio
    async def test_mark_read(self):
        n = _make_notification()
        db = AsyncMock()
        result = MagicMock()
        result.scalar_one_or_none.return_value = n
        db.execute = AsyncMock(return_value=result)

        await notification_svc.mark_read(db, 5)

        assert n.is_read is True
        db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_mark_read_missing(self):
        db = AsyncMock()
        result = MagicMock()
        result.scalar_one_or_none.return_value = None
        db.execute = AsyncMock(return_value=result)

        with pytest.raises(NotFoundError):
            await notification_svc.mark_read(db, 404)
        db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_has_unread_for_user(self):
        db = AsyncMock()
        result = MagicMock()
        result.scalar_one_or_none.return_value = 9
        db.execute = AsyncMock(return_value=result)

        assert await notification_svc.has_unread_for_user(db, 2, "Author request") is True

        stmt = db.execute.await_args.args[0]
        assert "notifications.title" in str(stmt)
        assert "Author request" in stmt.compile().params.values()

    @pytest.mark.asyncio
    async def test_purge_deletes_old_read_rows(self):
        db = AsyncMock()
        db.execute = AsyncMock(return_value=MagicMock(rowcount=3))

        deleted = await notification_svc.purge_read_notifications(db, 30, now=NOW)

        assert deleted == 3
        stmt = db.execute.await_args.args[0]
        sql = str(stmt)
        assert sql.startswith("DELETE FROM notifications")
        assert "is_read" in sql and "updated_at" in sql
        cutoff = stmt.compile().params["updated_at_1"]
        assert cutoff == datetime(2026, 5, 16, 0, 0, tzinfo=timezone.utc)
        db.commit.assert_awaited_once()


class TestNotificationApi:
    @pytest.mark.asyncio
    @patch("blogdesk.api.notifications.notification_svc.list_notifications")
    async def test_list(self, mock_list, client):
        requester = User(name="Ada", email="ada@example.com", role=Role.USER)
        object.__setattr__(requester, "id", 2)
        mock_list.return_value = [_make_notification(5, requester), _make_notification(4)]

        resp = await client.get("/api/v1/get-notification")

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert [n["id"] for n in body["notifications"]] == [5, 4]
        assert body["notifications"][0]["user"] == {"id": 2, "name": "Ada", "email": "ada@example.com"}
        assert body["notifications"][1]["user"] is None

    @pytest.mark.asyncio
    @patch("blogdesk.api.notifications.notification_svc.mark_read")
    async def test_update(self, mock_mark, client):
        mock_mark.return_value = _make_notification()
        resp = await client.put("/api/v1/update-notification/5")
        assert resp.status_code == 200
        assert resp.json() == {"success": True, "message": "Marked as Read."}

    @pytest.mark.asyncio
    @patch("blogdesk.api.notifications.notification_svc.mark_read")
    async def test_update_missing(self, mock_mark, client):
        mock_mark.side_effect = NotFoundError("Notification not found")
        resp = await client.put("/api/v1/update-notification/404")
        assert resp.status_code == 404
        assert resp.json() == {"success": False, "message": "Notification not found"}

    @pytest.mark.asyncio
    @patch("blogdesk.api.notifications.notification_svc.mark_all_read")
    async def test_read_all(self, mock_mark_all, client):
        mock_mark_all.return_value = 4
        resp = await client.put("/api/v1/read-all-notifications")
        assert resp.status_code == 200
        mock_mark_all.assert_awaited_once()


class TestPurgeTask:
    def _session_factory(self, db):
        factory = MagicMock()
        factory.return_value.__aenter__.return_value = db
        return factory

    @patch("blogdesk.workers.notifications.notification_svc.purge_read_notifications", new_callable=AsyncMock)
    def test_runs_purge_with_retention(self, mock_purge):
        db = AsyncMock()
        mock_purge.return_value = 7
        factory = self._session_factory(db)
        with patch("blogdesk.workers.notifications.async_session_factory", factory):
            assert purge_read_notifications() == 7
        mock_purge.assert_awaited_once_with(db, 30)
        factory.return_value.__aexit__.assert_awaited_once()

    @patch("blogdesk.workers.notifications.notification_svc.purge_read_notifications", new_callable=AsyncMock)
    def test_failure_is_logged_not_raised(self, mock_purge, caplog):
        mock_purge.side_effect = RuntimeError("db down")
        with patch("blogdesk.workers.notifications.async_session_factory", self._session_factory(AsyncMock())):
            assert purge_read_notifications() == 0
        assert "purge_read_notifications failed" in caplog.text

    def test_scheduled_daily_at_midnight(self):
        from blogdesk.workers import celery_app

        entry = celery_app.conf.beat_schedule["purge-read-notifications-daily"]
        assert entry["task"] == "purge_read_notifications"
        assert entry["schedule"].hour == {0}
        assert entry["schedule"].minute == {0}
