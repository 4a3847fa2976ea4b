"""NotificationApplicationService — inbox reads and read-state updates.

``notify`` is the in-transaction primitive lifecycle services call with their
own session; the returned rows are handed to NotificationPublisher only after
the surrounding transaction committed.
"""

import logging
from collections.abc import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from src.ct_common.errors import ForbiddenError, NotificationNotFoundError
from src.ct_common.pagination import cursor_decode, cursor_encode
from src.ct_common.transaction import TransactionCoordinator
from src.ct_notification.application.schemas import (
    MarkAllReadResponse,
    NotificationItem,
    NotificationListResponse,
    UnreadCountResponse,
)
from src.ct_notification.domain.models import Notification, NotificationDraft
from src.ct_notification.domain.repository import NotificationRepositoryProtocol
from src.ct_notification.infrastructure.persistence import NotificationRepository

logger = logging.getLogger(__name__)


async def notify(
    db: AsyncSession,
    repo: NotificationRepositoryProtocol,
    drafts: Iterable[NotificationDraft],
) -> list[Notification]:
    return [await repo.insert(db, draft) for draft in drafts]


class NotificationApplicationService:
    def __init__(
        self,
        coordinator: TransactionCoordinator,
        repo: NotificationRepositoryProtocol | None = None,
    ) -> None:
        self._coordinator = coordinator
        self._repo: NotificationRepositoryProtocol = repo or NotificationRepository()

    async def list_notifications(
        self, user_id: str, cursor: str | None, limit: int
    ) -> NotificationListResponse:
        cursor_id = cursor_decode(cursor)
        if cursor_id is not None and not isinstance(cursor_id, str):
            cursor_id = None

        async def work(db: AsyncSession) -> tuple[list[Notification], int]:
            rows = await self._repo.list_for_user(db, user_id, cursor_id, limit + 1)
            unread = await self._repo.count_unread(db, user_id)
            return rows, unread

        rows, unread = await self._coordinator.run_atomic(work)
        has_more = len(rows) > limit
        page = rows[:limit]
        return NotificationListResponse(
            items=[NotificationItem.from_domain(n) for n in page],
            unread_count=unread,
            next_cursor=cursor_encode(page[-1].id) if has_more and page else None,
            has_more=has_more,
        )

    async def unread_count(self, user_id: str) -> UnreadCountResponse:
        async def work(db: AsyncSession) -> int:
            return await self._repo.count_unread(db, user_id)

        return UnreadCountResponse(unread_count=await self._coordinator.run_atomic(work))

    async def mark_read(self, notification_id: str, user_id: str) -> None:
        async def work(db: AsyncSession) -> None:
            notification = await self._repo.get_by_id(db, notification_id)
            if notification is None:
                raise NotificationNotFoundError(notification_id)
            if notification.user_id != user_id:
                raise ForbiddenError()
            await self._repo.mark_read(db, notification_id, user_id)

        await self._coordinator.run_atomic(work)

    async def mark_all_read(self, user_id: str) -> MarkAllReadResponse:
        async def work(db: AsyncSession) -> int:
            return await self._repo.mark_all_read(db, user_id)

        updated = await self._coordinator.run_atomic(work)
        logger.debug("Marked %d notifications read for %s", updated, user_id)
        return MarkAllReadResponse(updated=updated)
