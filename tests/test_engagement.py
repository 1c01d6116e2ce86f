"""Tests for post views, likes, the author-request flow and role changes."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from httpx import ASGITransport, AsyncClient

from blogdesk.core.config import settings
from blogdesk.core.deps import get_db
from blogdesk.core.errors import NotFoundError, ValidationError
from blogdesk.core.security import get_current_user
from blogdesk.main import app
from blogdesk.models.engagement import Like
from blogdesk.models.notification import Notification
from blogdesk.models.post import Post
from blogdesk.models.user import Role, User
from blogdesk.services import engagement as engagement_svc
from blogdesk.services.user import request_author_role, update_role


def _make_user(role: Role = Role.USER, user_id: int = 2) -> User:
    user = User(name="Ada", email="ada@example.com", role=role)
    object.__setattr__(user, "id", user_id)
    return user


def _make_post(author_id: int = 9) -> Post:
    post = Post(title="Async IO", slug="async-io", content="...", published=True, author_id=author_id, views=10)
    object.__setattr__(post, "id", 1)
    return post


def _result(**attrs) -> MagicMock:
    result = MagicMock()
    for name, value in attrs.items():
        getattr(result, name).return_value = value
    return result


@pytest.fixture
async def client():
    db = AsyncMock()
    app.dependency_overrides[get_current_user] = lambda: _make_user()
    app.dependency_overrides[get_db] = lambda: db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
    app.dependency_overrides.clear()


class TestRecordView:
    @pytest.mark.asyncio
    async def test_increments_in_database(self):
        db = AsyncMock()
        db.execute = AsyncMock(return_value=_result(scalar_one_or_none=11))

        assert await engagement_svc.record_view(db, "async-io") == 11

        sql = str(db.execute.await_args.args[0])
        assert sql.startswith("UPDATE posts SET views=")
        assert "posts.views +" in sql
        assert "RETURNING posts.views" in sql
        db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unknown_or_unpublished(self):
        db = AsyncMock()
        db.execute = AsyncMock(return_value=_result(scalar_one_or_none=None))

        with pytest.raises(NotFoundError):
            await engagement_svc.record_view(db, "draft")
        db.commit.assert_not_awaited()


class TestToggleLike:
    @pytest.mark.asyncio
    @patch("blogdesk.services.realtime.push_like_count", new_callable=AsyncMock)
    async def test_like_adds_and_pushes(self, mock_push):
        db = AsyncMock()
        db.add = MagicMock()
        db.execute = AsyncMock(
            side_effect=[
                _result(scalar_one_or_none=_make_post()),
                _result(scalar_one_or_none=None),
                _result(scalar=1),
            ]
        )

        liked, count = await engagement_svc.toggle_like(db, _make_user(), 1)

        assert (liked, count) == (True, 1)
        added = [call.args[0] for call in db.add.call_args_list]
        assert len(added) == 1
        assert isinstance(added[0], Like)
        assert (added[0].post_id, added[0].user_id) == (1, 2)
        db.commit.assert_awaited_once()
        mock_push.assert_awaited_once_with(1, 1)

    @pytest.mark.asyncio
    @patch("blogdesk.services.mailer.send_email", new_callable=AsyncMock)
    @patch("blogdesk.services.user.get_site_settings", new_callable=AsyncMock)
    @patch("blogdesk.services.realtime.push_like_count", new_callable=AsyncMock)
    async def test_like_does_not_block_author_request(self, mock_push, mock_site, mock_send):
        mock_site.return_value = None
        db = AsyncMock()
        db.add = MagicMock()
        db.execute = AsyncMock(
            side_effect=[
                _result(scalar_one_or_none=_make_post()),
                _result(scalar_one_or_none=None),
                _result(scalar=1),
                _result(scalar_one_or_none=None),
            ]
        )
        user = _make_user()

        await engagement_svc.toggle_like(db, user, 1)
        await request_author_role(db, user)

        added = [call.args[0] for call in db.add.call_args_list]
        assert isinstance(added[0], Like)
        assert [n.title for n in added[1:] if isinstance(n, Notification)] == ["Author request"]
        pending_check = db.execute.await_args_list[3].args[0]
        assert "Author request" in pending_check.compile().params.values()
        mock_send.assert_awaited_once()

    @pytest.mark.asyncio
    @patch("blogdesk.services.realtime.push_like_count", new_callable=AsyncMock)
    async def test_second_like_removes(self, mock_push):
        existing = Like(post_id=1, user_id=2)
        db = AsyncMock()
        db.add = MagicMock()
        db.execute = AsyncMock(
            side_effect=[
                _result(scalar_one_or_none=_make_post()),
                _result(scalar_one_or_none=existing),
                _result(scalar=0),
            ]
        )

        liked, count = await engagement_svc.toggle_like(db, _make_user(), 1)

        assert (liked, count) == (False, 0)
        db.delete.assert_awaited_once_with(existing)
        db.add.assert_not_called()
        mock_push.assert_awaited_once_with(1, 0)

    @pytest.mark.asyncio
    async def test_unpublished_post(self):
        db = AsyncMock()
        db.execute = AsyncMock(return_value=_result(scalar_one_or_none=None))

        with pytest.raises(ValidationError):
            await engagement_svc.toggle_like(db, _make_user(), 1)


class TestAuthorRequest:
    @pytest.mark.asyncio
    async def test_existing_author_is_turned_away(self):
        with pytest.raises(ValidationError, match="already have author access"):
            await request_author_role(AsyncMock(), _make_user(Role.AUTHOR))

    @pytest.mark.asyncio
    @patch("blogdesk.services.user.has_unread_for_user", new_callable=AsyncMock)
    async def test_pending_request(self, mock_unread):
        mock_unread.return_value = True
        with pytest.raises(ValidationError, match="Already requested"):
            await request_author_role(AsyncMock(), _make_user())

    @pytest.mark.asyncio
    @patch("blogdesk.services.mailer.send_email", new_callable=AsyncMock)
    @patch("blogdesk.services.user.get_site_settings", new_callable=AsyncMock)
    @patch("blogdesk.services.user.create_notification", new_callable=AsyncMock)
    @patch("blogdesk.services.user.has_unread_for_user", new_callable=AsyncMock)
    async def test_records_and_emails(self, mock_unread, mock_create, mock_site, mock_send):
        mock_unread.return_value = False
        mock_site.return_value = {"site_name": "Dev Notes"}
        db = AsyncMock()

        await request_author_role(db, _make_user())

        assert mock_create.await_args.kwargs["title"] == "Author request"
        assert mock_create.await_args.kwargs["user_id"] == 2
        db.commit.assert_awaited_once()
        args, kwargs = mock_send.await_args
        assert args[1] == "author-request"
        assert kwargs["site_name"] == "Dev Notes"
        assert kwargs["email"] == "ada@example.com"


class TestUpdateRole:
    @pytest.mark.asyncio
    @patch("blogdesk.services.mailer.send_email", new_callable=AsyncMock)
    @patch("blogdesk.services.user.get_site_settings", new_callable=AsyncMock)
    async def test_promotion_emails_the_user(self, mock_site, mock_send):
        mock_site.return_value = {"site_name": "Dev Notes"}
        user = _make_user()
        db = AsyncMock()
        db.execute = AsyncMock(return_value=_result(scalar_one_or_none=user))

        await update_role(db, 2, Role.AUTHOR)

        assert user.role == Role.AUTHOR
        db.commit.assert_awaited_once()
        args, kwargs = mock_send.await_args
        assert args == ("ada@example.com", "author-approved")
        assert kwargs["site_name"] == "Dev Notes"

    @pytest.mark.asyncio
    @patch("blogdesk.services.mailer.send_email", new_callable=AsyncMock)
    async def test_demotion_sends_nothing(self, mock_send):
        user = _make_user(Role.AUTHOR)
        db = AsyncMock()
        db.execute = AsyncMock(return_value=_result(scalar_one_or_none=user))

        await update_role(db, 2, Role.USER)

        assert user.role == Role.USER
        mock_send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_user(self):
        db = AsyncMock()
        db.execute = AsyncMock(return_value=_result(scalar_one_or_none=None))

        with pytest.raises(NotFoundError, match="User not found"):
            await update_role(db, 404, Role.AUTHOR)
        db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    @patch("blogdesk.api.users.update_role")
    async def test_admin_route(self, mock_update, client):
        app.dependency_overrides[get_current_user] = lambda: _make_user(Role.ADMIN, user_id=1)

        resp = await client.put("/api/v1/update-role/2", json={"role": "AUTHOR"})

        assert resp.status_code == 200
        assert resp.json() == {"success": True, "message": "Role updated successfully"}
        assert mock_update.await_args.args[1:] == (2, Role.AUTHOR)

    @pytest.mark.asyncio
    @patch("blogdesk.api.users.update_role")
    async def test_route_is_admin_only(self, mock_update, client):
        resp = await client.put("/api/v1/update-role/2", json={"role": "AUTHOR"})
        assert resp.status_code == 400
        mock_update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_role_rejected(self, client):
        app.dependency_overrides[get_current_user] = lambda: _make_user(Role.ADMIN, user_id=1)
        resp = await client.put("/api/v1/update-role/2", json={"role": "OWNER"})
        assert resp.status_code == 400
        assert "role" in resp.json()["message"]


class TestEngagementApi:
    @pytest.mark.asyncio
    @patch("blogdesk.api.posts.engagement_svc.record_view")
    async def test_post_view(self, mock_view, client):
        mock_view.return_value = 42
        resp = await client.post("/api/v1/post-view/async-io")
        assert resp.status_code == 200
        assert resp.json()["views"] == 42

    @pytest.mark.asyncio
    @patch("blogdesk.api.posts.engagement_svc.toggle_like")
    async def test_like_post(self, mock_toggle, client):
        mock_toggle.return_value = (True, 3)
        resp = await client.post("/api/v1/like-post", json={"post_id": 1})
        assert resp.status_code == 200
        assert resp.json() == {"success": True, "message": "Post liked successfully", "like_count": 3}

    @pytest.mark.asyncio
    async def test_like_post_requires_post_id(self, client):
        resp = await client.post("/api/v1/like-post", json={})
        assert resp.status_code == 400
        assert resp.json()["success"] is False

    @pytest.mark.asyncio
    @patch("blogdesk.api.users.request_author_role")
    async def test_author_request(self, mock_request, client):
        resp = await client.post("/api/v1/author-request")
        assert resp.status_code == 200
        assert resp.json()["message"] == "You will get the mail within 24 hours."

    @pytest.mark.asyncio
    @patch("blogdesk.api.users.request_author_role")
    async def test_author_request_is_rate_limited(self, mock_request, client):
        for _ in range(3):
            assert (await client.post("/api/v1/author-request")).status_code == 200

        resp = await client.post("/api/v1/author-request")

        assert resp.status_code == 429
        assert resp.json() == {
            "success": False,
            "message": "Too many requests, please try again later.",
        }
        assert mock_request.await_count == 3

    @pytest.mark.asyncio
    @patch("blogdesk.api.posts.engagement_svc.record_view")
    async def test_post_view_is_rate_limited(self, mock_view, client):
        mock_view.return_value = 1
        limit = int(settings.rate_limit_views.split("/")[0])
        for _ in range(limit):
            assert (await client.post("/api/v1/post-view/async-io")).status_code == 200

        resp = await client.post("/api/v1/post-view/async-io")

        assert resp.status_code == 429
        assert mock_view.await_count == limit
