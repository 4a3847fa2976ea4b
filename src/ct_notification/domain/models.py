"""Domain models for ct_notification — pure dataclasses."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class NotificationDraft:
    user_id: str
    type: str   # NotificationType value
    title: str
    body: str | None = None


@dataclass
class Notification:
    id: str
    user_id: str
    type: str
    title: str
    body: str | None
    is_read: bool = False
    created_at: datetime | None = None
