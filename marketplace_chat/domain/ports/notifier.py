"""
Notifier Port - background/local push scheduling.
Implementation: marketplace_chat/infrastructure/notifier/redis_push_outbox.py

The push transport itself is external; this port only schedules and
retracts pushes, grouped by an optional thread id.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from marketplace_chat.domain.value_objects.user_id import UserId


class Notifier(ABC):
    @abstractmethod
    async def schedule(
        self,
        user_id: UserId,
        title: str,
        body: str,
        data: dict[str, Any],
        thread_id: Optional[str] = None,
    ) -> str:
        """Schedule an immediate push. Returns the push identifier."""
        ...

    @abstractmethod
    async def dismiss_thread(self, user_id: UserId, thread_id: str) -> int:
        """Retract every pending/delivered push of `thread_id`. Returns how many."""
        ...
