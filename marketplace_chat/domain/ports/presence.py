"""
Presence Port - where the platform shell reports the client delivery context.
Implementation: marketplace_chat/infrastructure/cache/redis_presence_store.py
"""

from abc import ABC, abstractmethod
from enum import Enum

from marketplace_chat.domain.value_objects.user_id import UserId


class DeliveryContext(str, Enum):
    FOREGROUND = "foreground"
    BACKGROUND = "background"


class PresenceStore(ABC):
    @abstractmethod
    async def report(self, user_id: UserId, context: DeliveryContext) -> None: ...

    @abstractmethod
    async def get(self, user_id: UserId) -> DeliveryContext:
        """Current context; BACKGROUND when nothing was reported recently."""
        ...
