"""NotificationRepository Protocol."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.ct_notification.domain.models import Notification, NotificationDraft


class NotificationRepositoryProtocol(Protocol):
    async def insert(self, db: AsyncSession, draft: NotificationDraft) -> Notification: ...

    async def get_by_id(self, db: AsyncSession, notification_id: str) -> Notification | None: ...

    async def list_for_user(
        self, db: AsyncSession, user_id: str, cursor_id: str | None, limit: int
    ) -> list[Notification]: ...

    async def count_unread(self, db: AsyncSession, user_id: str) -> int: ...

    async def mark_read(self, db: AsyncSession, notification_id: str, user_id: str) -> None: ...

    async def mark_all_read(self, db: AsyncSession, user_id: str) -> int: ...
