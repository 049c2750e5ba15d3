"""
Prisma Notification Repository Implementation.

`metadata` is a JSON column; it is written through prisma.Json and read back
as a plain dict. Every mutation filters on user_id as well as id, so a user
can never touch another user's notification by guessing its id.
"""

from prisma import Json, Prisma
from prisma.models import Notification as PrismaNotification

from marketplace_chat.domain.entities.notification import (
    Notification,
    NotificationType,
)
from marketplace_chat.domain.ports.repositories.notification_repository import (
    NotificationRepository,
)
from marketplace_chat.domain.value_objects.notification_id import NotificationId
from marketplace_chat.domain.value_objects.user_id import UserId
from marketplace_chat.infrastructure.persistence.errors import storage_errors
from marketplace_chat.infrastructure.retry import read_retry


class PrismaNotificationRepository(NotificationRepository):
    _prisma: Prisma

    def __init__(self, prisma: Prisma):
        self._prisma = prisma

    def _to_entity(self, record: PrismaNotification) -> Notification:
        metadata = record.metadata if isinstance(record.metadata, dict) else {}
        return Notification(
            id=NotificationId(record.id),
            user_id=UserId(record.user_id),
            type=NotificationType(record.type),
            title=record.title,
            message=record.message,
            is_read=record.is_read,
            created_at=record.created_at,
            metadata=metadata,
        )

    @storage_errors
    async def add(self, notification: Notification) -> None:
        await self._prisma.notification.create(
            data={
                "id": notification.id.value,
                "user_id": notification.user_id.value,
                "type": notification.type.value,
                "title": notification.title,
                "message": notification.message,
                "metadata": Json(notification.metadata),
                "is_read": notification.is_read,
                "created_at": notification.created_at,
            }
        )

    @read_retry
    @storage_errors
    async def list_for_user(self, user_id: UserId, limit: int) -> list[Notification]:
        records = await self._prisma.notification.find_many(
            where={"user_id": user_id.value},
            order={"created_at": "desc"},
            take=limit,
        )
        return [self._to_entity(record) for record in records]

    @read_retry
    @storage_errors
    async def count_unread(self, user_id: UserId) -> int:
        return await self._prisma.notification.count(
            where={"user_id": user_id.value, "is_read": False}
        )

    @storage_errors
    async def mark_read(self, notification_id: NotificationId, user_id: UserId) -> bool:
        updated = await self._prisma.notification.update_many(
            where={"id": notification_id.value, "user_id": user_id.value},
            data={"is_read": True},
        )
        return updated > 0

    @storage_errors
    async def mark_all_read(self, user_id: UserId) -> int:
        return await self._prisma.notification.update_many(
            where={"user_id": user_id.value, "is_read": False},
            data={"is_read": True},
        )

    @storage_errors
    async def delete(self, notification_id: NotificationId, user_id: UserId) -> bool:
        deleted = await self._prisma.notification.delete_many(
            where={"id": notification_id.value, "user_id": user_id.value}
        )
        return deleted > 0
