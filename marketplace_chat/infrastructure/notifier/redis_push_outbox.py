"""
RedisPushOutbox - Notifier implementation backed by a Redis outbox.

The push transport is an external worker; this adapter only hands work to
it and retracts it.

Redis Data Structures:
- "push:queue"                         LIST of JSON payloads, RPUSH here, the
                                       worker pops from the left
- "push:thread:{user_id}:{thread_id}"  SET of push ids in that thread
- "push:dismissed"                     SET of retracted push ids; the worker
                                       skips queued payloads found here
- "push:dismiss"                       PUB/SUB channel announcing retractions,
                                       so already-delivered pushes can be
                                       cleared from the device

Index keys expire after PUSH_OUTBOX_TTL_SECONDS.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

from redis.asyncio import Redis

from marketplace_chat.config.settings import Config
from marketplace_chat.domain.ports.notifier import Notifier
from marketplace_chat.domain.value_objects.user_id import UserId

logger = logging.getLogger(__name__)

QUEUE_KEY = "push:queue"
DISMISSED_KEY = "push:dismissed"
DISMISS_CHANNEL = "push:dismiss"


class RedisPushOutbox(Notifier):
    def __init__(self, redis: Redis, ttl_seconds: int = Config.PUSH_OUTBOX_TTL_SECONDS):
        self._redis = redis
        self._ttl = ttl_seconds

    @staticmethod
    def _thread_key(user_id: UserId, thread_id: str) -> str:
        return f"push:thread:{user_id.value}:{thread_id}"

    async def schedule(
        self,
        user_id: UserId,
        title: str,
        body: str,
        data: dict[str, Any],
        thread_id: Optional[str] = None,
    ) -> str:
        push_id = str(uuid4())
        payload = {
            "id": push_id,
            "user_id": user_id.value,
            "title": title,
            "body": body,
            "data": data,
            "thread_id": thread_id,
            "scheduled_at": datetime.now(timezone.utc).isoformat(),
        }

        async with self._redis.pipeline(transaction=True) as pipe:
            pipe.rpush(QUEUE_KEY, json.dumps(payload, default=str))
            if thread_id:
                key = self._thread_key(user_id, thread_id)
                pipe.sadd(key, push_id)
                pipe.expire(key, self._ttl)
            await pipe.execute()

        logger.debug(f"[PushOutbox] Queued {push_id} (thread={thread_id})")
        return push_id

    async def dismiss_thread(self, user_id: UserId, thread_id: str) -> int:
        key = self._thread_key(user_id, thread_id)
        push_ids = await self._redis.smembers(key)
        if not push_ids:
            return 0

        async with self._redis.pipeline(transaction=True) as pipe:
            pipe.sadd(DISMISSED_KEY, *push_ids)
            pipe.expire(DISMISSED_KEY, self._ttl)
            pipe.delete(key)
            pipe.publish(
                DISMISS_CHANNEL,
                json.dumps(
                    {
                        "user_id": user_id.value,
                        "thread_id": thread_id,
                        "push_ids": sorted(push_ids),
                    }
                ),
            )
            await pipe.execute()

        logger.debug(f"[PushOutbox] Dismissed {len(push_ids)} push(es) in {thread_id}")
        return len(push_ids)
