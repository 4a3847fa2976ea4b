"""Redis client factory — used only to fan notifications out to the socket layer.

The client is built by the application factory and handed to
NotificationPublisher; there is no module-level pool.
"""

import redis.asyncio as aioredis

from config.settings import Settings


def build_redis(settings: Settings) -> aioredis.Redis:
    return aioredis.from_url(settings.REDIS_URL, decode_responses=True)


async def close_redis(client: aioredis.Redis) -> None:
    await client.aclose()
