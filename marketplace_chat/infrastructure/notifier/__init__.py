"""Push scheduling adapters."""

from marketplace_chat.infrastructure.notifier.redis_push_outbox import RedisPushOutbox

__all__ = ["RedisPushOutbox"]
