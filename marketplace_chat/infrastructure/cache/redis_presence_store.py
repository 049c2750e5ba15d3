"""
RedisPresenceStore - last reported delivery context per user.

Key "presence:{user_id}" holds "foreground" or "background" with a TTL of
PRESENCE_TTL_SECONDS. Clients re-report while foregrounded; when the key
expires the user counts as background, so a crashed client still gets
pushes.
"""

import logging

from redis.asyncio import Redis

from marketplace_chat.config.settings import Config
from marketplace_chat.domain.ports.presence import DeliveryContext, PresenceStore
from marketplace_chat.domain.value_objects.user_id import UserId

logger = logging.getLogger(__name__)


class RedisPresenceStore(PresenceStore):
    def __init__(self, redis: Redis, ttl_seconds: int = Config.PRESENCE_TTL_SECONDS):
        self._redis = redis
        self._ttl = ttl_seconds

    @staticmethod
    def _key(user_id: UserId) -> str:
        return f"presence:{user_id.value}"

    async def report(self, user_id: UserId, context: DeliveryContext) -> None:
        await self._redis.set(self._key(user_id), context.value, ex=self._ttl)

    async def get(self, user_id: UserId) -> DeliveryContext:
        value = await self._redis.get(self._key(user_id))
        if value == DeliveryContext.FOREGROUND.value:
            return DeliveryContext.FOREGROUND
        return DeliveryContext.BACKGROUND
