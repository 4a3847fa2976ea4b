"""Pydantic schemas for the ct_notification API."""

from pydantic import BaseModel

from src.ct_common.datetime_utils import iso_or_none
from src.ct_notification.domain.models import Notification


class NotificationItem(BaseModel):
    id: str
    type: str
    title: str
    body: str | None
    is_read: bool
    created_at: str | None

    @classmethod
    def from_domain(cls, n: Notification) -> "NotificationItem":
        return cls(
            id=n.id,
            type=n.type,
            title=n.title,
            body=n.body,
            is_read=n.is_read,
            created_at=iso_or_none(n.created_at),
        )


class NotificationListResponse(BaseModel):
    items: list[NotificationItem]
    unread_count: int
    next_cursor: str | None
    has_more: bool


class UnreadCountResponse(BaseModel):
    unread_count: int


class MarkAllReadResponse(BaseModel):
    updated: int
