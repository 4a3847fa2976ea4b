"""NotificationRepository — raw SQL persistence implementation."""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.ct_common.errors import InternalError
from src.ct_common.id_generator import generate_id
from src.ct_notification.domain.models import Notification, NotificationDraft

_COLUMNS = "id, user_id, type, title, body, is_read, created_at"

_INSERT_SQL = text(f"""
    INSERT INTO notifications (id, user_id, type, title, body, is_read)
    VALUES (:id, :user_id, :type, :title, :body, FALSE)
    RETURNING {_COLUMNS}
""")

_GET_BY_ID_SQL = text(f"SELECT {_COLUMNS} FROM notifications WHERE id = :id")

_LIST_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM notifications
    WHERE user_id = :user_id
      AND (CAST(:cursor_id AS TEXT) IS NULL OR id < :cursor_id)
    ORDER BY id DESC
    LIMIT :limit
""")

_COUNT_UNREAD_SQL = text(
    "SELECT COUNT(*) FROM notifications WHERE user_id = :user_id AND is_read = FALSE"
)

_MARK_READ_SQL = text(
    "UPDATE notifications SET is_read = TRUE WHERE id = :id AND user_id = :user_id"
)

_MARK_ALL_READ_SQL = text(
    "UPDATE notifications SET is_read = TRUE WHERE user_id = :user_id AND is_read = FALSE"
)


def _row_to_notification(row: Any) -> Notification:
    return Notification(
        id=row.id,
        user_id=row.user_id,
        type=row.type,
        title=row.title,
        body=row.body,
        is_read=row.is_read,
        created_at=row.created_at,
    )


class NotificationRepository:
    async def insert(self, db: AsyncSession, draft: NotificationDraft) -> Notification:
        result = await db.execute(
            _INSERT_SQL,
            {
                "id": generate_id(),
                "user_id": draft.user_id,
                "type": draft.type,
                "title": draft.title,
                "body": draft.body,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Notification insert returned no rows")
        return _row_to_notification(row)

    async def get_by_id(self, db: AsyncSession, notification_id: str) -> Notification | None:
        result = await db.execute(_GET_BY_ID_SQL, {"id": notification_id})
        row = result.fetchone()
        return _row_to_notification(row) if row else None

    async def list_for_user(
        self, db: AsyncSession, user_id: str, cursor_id: str | None, limit: int
    ) -> list[Notification]:
        result = await db.execute(
            _LIST_SQL, {"user_id": user_id, "cursor_id": cursor_id, "limit": limit}
        )
        return [_row_to_notification(row) for row in result.fetchall()]

    async def count_unread(self, db: AsyncSession, user_id: str) -> int:
        result = await db.execute(_COUNT_UNREAD_SQL, {"user_id": user_id})
        return int(result.scalar_one())

    async def mark_read(self, db: AsyncSession, notification_id: str, user_id: str) -> None:
        await db.execute(_MARK_READ_SQL, {"id": notification_id, "user_id": user_id})

    async def mark_all_read(self, db: AsyncSession, user_id: str) -> int:
        result = await db.execute(_MARK_ALL_READ_SQL, {"user_id": user_id})
        return int(result.rowcount or 0)
