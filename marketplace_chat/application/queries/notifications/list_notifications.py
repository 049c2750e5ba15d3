"""List Notifications / Unread Notification Count queries."""

from dataclasses import dataclass

from marketplace_chat.application.common.interfaces import Query, QueryHandler
from marketplace_chat.config.settings import Config
from marketplace_chat.domain.entities.notification import Notification
from marketplace_chat.domain.ports.repositories import NotificationRepository
from marketplace_chat.domain.value_objects.user_id import UserId


@dataclass(frozen=True)
class ListNotificationsQuery(Query[list[Notification]]):
    user_id: UserId
    limit: int = Config.NOTIFICATION_LIST_LIMIT


class ListNotificationsHandler(QueryHandler[list[Notification]]):
    def __init__(
        self,
        notification_repo: NotificationRepository,
        max_limit: int = Config.NOTIFICATION_LIST_MAX,
    ):
        self._notification_repo = notification_repo
        self._max_limit = max_limit

    async def execute(self, query: ListNotificationsQuery) -> list[Notification]:
        limit = max(1, min(query.limit, self._max_limit))
        return await self._notification_repo.list_for_user(query.user_id, limit)


@dataclass(frozen=True)
class GetUnreadNotificationCountQuery(Query[int]):
    user_id: UserId


class GetUnreadNotificationCountHandler(QueryHandler[int]):
    def __init__(self, notification_repo: NotificationRepository):
        self._notification_repo = notification_repo

    async def execute(self, query: GetUnreadNotificationCountQuery) -> int:
        return await self._notification_repo.count_unread(query.user_id)
