"""
Cache Layer - Redis-backed implementations.

Contains the async Redis client factory and the presence store.
"""

from marketplace_chat.infrastructure.cache.redis_client import (
    close_redis_client,
    create_redis_client,
)
from marketplace_chat.infrastructure.cache.redis_presence_store import (
    RedisPresenceStore,
)

__all__ = [
    "create_redis_client",
    "close_redis_client",
    "RedisPresenceStore",
]
