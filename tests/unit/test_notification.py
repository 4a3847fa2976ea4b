"""Tests for ct_notification — inbox service and post-commit publisher."""

import json
import logging
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from src.ct_common.datetime_utils import utc_now
from src.ct_common.errors import ForbiddenError, NotificationNotFoundError
from src.ct_notification.application.publisher import NotificationPublisher, channel_for
from src.ct_notification.application.service import NotificationApplicationService, notify
from src.ct_notification.domain.models import Notification, NotificationDraft


def _make_notification(user_id: str = "user-1", nid: str = "n-1") -> Notification:
    return Notification(
        id=nid,
        user_id=user_id,
        type="ORDER_CREATED",
        title="New Order Created",
        body="Order #4821 has been created.",
        created_at=utc_now(),
    )


@pytest.fixture
def inbox(coordinator, repos) -> NotificationApplicationService:
    return NotificationApplicationService(coordinator, repo=repos.notifications)


class TestPublisher:
    async def test_publishes_to_user_channel(self) -> None:
        redis = AsyncMock()
        sent = await NotificationPublisher(redis).publish([_make_notification()])
        assert sent == 1
        channel, payload = redis.publish.await_args.args
        assert channel == "notifications:user-1"
        assert json.loads(payload)["type"] == "ORDER_CREATED"

    async def test_without_redis_is_noop(self) -> None:
        assert await NotificationPublisher().publish([_make_notification()]) == 0

    async def test_redis_failure_is_logged_not_raised(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        redis = AsyncMock()
        redis.publish.side_effect = [RedisConnectionError("down"), 1]
        with caplog.at_level(logging.WARNING):
            sent = await NotificationPublisher(redis).publish(
                [_make_notification(nid="n-1"), _make_notification(nid="n-2")]
            )
        assert sent == 1
        assert "n-1" in caplog.text

    def test_channel_name(self) -> None:
        assert channel_for("abc") == "notifications:abc"


class TestNotify:
    async def test_inserts_every_draft(self, repos, state) -> None:
        drafts = [
            NotificationDraft("a", "HIRE_REQUESTED", "t"),
            NotificationDraft("b", "HIRE_ACCEPTED", "t"),
        ]
        rows = await notify(None, repos.notifications, drafts)  # type: ignore[arg-type]
        assert [n.user_id for n in rows] == ["a", "b"]
        assert len(state.notifications) == 2


class TestInbox:
    async def _seed(self, repos, user_id: str, count: int) -> list[Notification]:
        drafts = [NotificationDraft(user_id, "ORDER_CREATED", f"n{i}") for i in range(count)]
        return await notify(None, repos.notifications, drafts)  # type: ignore[arg-type]

    async def test_list_reports_unread(self, inbox, repos) -> None:
        await self._seed(repos, "user-1", 3)
        resp = await inbox.list_notifications("user-1", None, 2)
        assert len(resp.items) == 2
        assert resp.unread_count == 3
        assert resp.has_more

    async def test_mark_read(self, inbox, repos) -> None:
        (n,) = await self._seed(repos, "user-1", 1)
        await inbox.mark_read(n.id, "user-1")
        assert (await inbox.unread_count("user-1")).unread_count == 0

    async def test_cannot_mark_someone_elses(self, inbox, repos) -> None:
        (n,) = await self._seed(repos, "user-1", 1)
        with pytest.raises(ForbiddenError):
            await inbox.mark_read(n.id, "user-2")

    async def test_mark_missing(self, inbox) -> None:
        with pytest.raises(NotificationNotFoundError):
            await inbox.mark_read("missing", "user-1")

    async def test_mark_all_read(self, inbox, repos) -> None:
        await self._seed(repos, "user-1", 3)
        await self._seed(repos, "user-2", 1)
        assert (await inbox.mark_all_read("user-1")).updated == 3
        assert (await inbox.unread_count("user-2")).unread_count == 1
