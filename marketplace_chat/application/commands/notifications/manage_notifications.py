"""Mark-read, mark-all-read, delete and thread dismissal for notifications."""

from dataclasses import dataclass

from marketplace_chat.application.common.interfaces import Command, CommandHandler
from marketplace_chat.application.services.notification_dispatcher import (
    NotificationDispatcher,
)
from marketplace_chat.domain.exceptions import EntityNotFoundError
from marketplace_chat.domain.ports.repositories import NotificationRepository
from marketplace_chat.domain.value_objects.notification_id import NotificationId
from marketplace_chat.domain.value_objects.user_id import UserId


@dataclass(frozen=True)
class MarkNotificationReadCommand(Command[None]):
    notification_id: NotificationId
    user_id: UserId


class MarkNotificationReadHandler(CommandHandler[None]):
    def __init__(self, notification_repo: NotificationRepository):
        self._notification_repo = notification_repo

    async def execute(self, command: MarkNotificationReadCommand) -> None:
        found = await self._notification_repo.mark_read(
            command.notification_id, command.user_id
        )
        if not found:
            raise EntityNotFoundError(
                f"Notification {command.notification_id.value} not found"
            )


@dataclass(frozen=True)
class MarkAllNotificationsReadCommand(Command[int]):
    user_id: UserId


class MarkAllNotificationsReadHandler(CommandHandler[int]):
    def __init__(self, notification_repo: NotificationRepository):
        self._notification_repo = notification_repo

    async def execute(self, command: MarkAllNotificationsReadCommand) -> int:
        return await self._notification_repo.mark_all_read(command.user_id)


@dataclass(frozen=True)
class DeleteNotificationCommand(Command[None]):
    notification_id: NotificationId
    user_id: UserId


class DeleteNotificationHandler(CommandHandler[None]):
    def __init__(self, notification_repo: NotificationRepository):
        self._notification_repo = notification_repo

    async def execute(self, command: DeleteNotificationCommand) -> None:
        deleted = await self._notification_repo.delete(
            command.notification_id, command.user_id
        )
        if not deleted:
            raise EntityNotFoundError(
                f"Notification {command.notification_id.value} not found"
            )


@dataclass(frozen=True)
class DismissThreadCommand(Command[int]):
    user_id: UserId
    thread_id: str


class DismissThreadHandler(CommandHandler[int]):
    """Retract pending pushes of one thread, e.g. when the user opens it in-app."""

    def __init__(self, dispatcher: NotificationDispatcher):
        self._dispatcher = dispatcher

    async def execute(self, command: DismissThreadCommand) -> int:
        return await self._dispatcher.dismiss_thread(command.user_id, command.thread_id)
