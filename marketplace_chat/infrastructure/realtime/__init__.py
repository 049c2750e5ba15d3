"""Change feed adapters."""

from marketplace_chat.infrastructure.realtime.postgres_change_feed import (
    PostgresChangeFeed,
)

__all__ = ["PostgresChangeFeed"]
