"""
Notification Repository Port - Interface for notification persistence.
Implementation: marketplace_chat/infrastructure/persistence/prisma_notification_repository.py

Every mutating method is scoped to the owning user.
"""

from abc import ABC, abstractmethod

from marketplace_chat.domain.entities.notification import Notification
from marketplace_chat.domain.value_objects.notification_id import NotificationId
from marketplace_chat.domain.value_objects.user_id import UserId


class NotificationRepository(ABC):
    @abstractmethod
    async def add(self, notification: Notification) -> None: ...

    @abstractmethod
    async def list_for_user(self, user_id: UserId, limit: int) -> list[Notification]:
        """Newest first."""
        ...

    @abstractmethod
    async def count_unread(self, user_id: UserId) -> int: ...

    @abstractmethod
    async def mark_read(self, notification_id: NotificationId, user_id: UserId) -> bool:
        """False if no notification with that id belongs to the user."""
        ...

    @abstractmethod
    async def mark_all_read(self, user_id: UserId) -> int: ...

    @abstractmethod
    async def delete(self, notification_id: NotificationId, user_id: UserId) -> bool: ...
