"""Post-commit fan-out of notification rows to Redis pub/sub.

The socket layer subscribes to ``notifications:{user_id}``. Publishing only
happens after the lifecycle transaction committed; a Redis outage costs the
live push, never the stored notification.
"""

import json
import logging
from collections.abc import Iterable

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from src.ct_common.datetime_utils import iso_or_none
from src.ct_notification.domain.models import Notification

logger = logging.getLogger(__name__)


def channel_for(user_id: str) -> str:
    return f"notifications:{user_id}"


class NotificationPublisher:
    def __init__(self, redis: aioredis.Redis | None = None) -> None:
        self._redis = redis

    async def publish(self, notifications: Iterable[Notification]) -> int:
        """Publish each notification; returns how many were delivered to Redis."""
        if self._redis is None:
            return 0
        sent = 0
        for n in notifications:
            payload = json.dumps(
                {
                    "id": n.id,
                    "type": n.type,
                    "title": n.title,
                    "body": n.body,
                    "created_at": iso_or_none(n.created_at),
                }
            )
            try:
                await self._redis.publish(channel_for(n.user_id), payload)
            except (RedisError, OSError) as exc:
                logger.warning("Notification %s not pushed to %s: %s", n.id, n.user_id, exc)
                continue
            sent += 1
        return sent
