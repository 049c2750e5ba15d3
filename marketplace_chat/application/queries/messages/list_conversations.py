"""ListConversations Query - the user's inbox, most recent conversation first."""

from dataclasses import dataclass

from marketplace_chat.application.common.interfaces import Query, QueryHandler
from marketplace_chat.domain.entities.conversation import ConversationSummary
from marketplace_chat.domain.ports.repositories import MessageRepository
from marketplace_chat.domain.value_objects.user_id import UserId


@dataclass(frozen=True)
class ListConversationsQuery(Query[list[ConversationSummary]]):
    user_id: UserId


class ListConversationsHandler(QueryHandler[list[ConversationSummary]]):
    def __init__(self, message_repo: MessageRepository):
        self._message_repo = message_repo

    async def execute(self, query: ListConversationsQuery) -> list[ConversationSummary]:
        summaries = await self._message_repo.get_conversation_summaries(query.user_id)
        return sorted(summaries, key=lambda s: s.last_message_at, reverse=True)
