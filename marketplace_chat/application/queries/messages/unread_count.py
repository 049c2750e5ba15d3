"""GetUnreadMessageCount Query - unread messages addressed to the user, all listings."""

from dataclasses import dataclass

from marketplace_chat.application.common.interfaces import Query, QueryHandler
from marketplace_chat.domain.ports.repositories import MessageRepository
from marketplace_chat.domain.value_objects.user_id import UserId


@dataclass(frozen=True)
class GetUnreadMessageCountQuery(Query[int]):
    user_id: UserId


class GetUnreadMessageCountHandler(QueryHandler[int]):
    def __init__(self, message_repo: MessageRepository):
        self._message_repo = message_repo

    async def execute(self, query: GetUnreadMessageCountQuery) -> int:
        return await self._message_repo.count_unread(query.user_id)
