"""
Async Redis Client Factory.

One pooled redis.asyncio client per process, shared by the presence store
and the push outbox. Responses are decoded to str.
"""

import logging
from urllib.parse import urlsplit

import redis.asyncio as redis
from redis.asyncio import Redis

from marketplace_chat.config.settings import Config

logger = logging.getLogger(__name__)


def _safe_location(url: str) -> str:
    """host:port/db without credentials, for logs."""
    parts = urlsplit(url)
    return f"{parts.hostname}:{parts.port or 6379}{parts.path or '/0'}"


async def create_redis_client(url: str = Config.REDIS_URL) -> Redis:
    """
    Raises:
        redis.ConnectionError: If Redis is not reachable
    """
    client = redis.from_url(
        url,
        encoding="utf-8",
        decode_responses=True,
        socket_timeout=5.0,
        socket_connect_timeout=5.0,
        health_check_interval=30,
    )
    await client.ping()
    logger.info(f"[Redis] Connected to {_safe_location(url)}")
    return client


async def close_redis_client(client: Redis) -> None:
    await client.aclose()
    logger.info("[Redis] Connection closed")
