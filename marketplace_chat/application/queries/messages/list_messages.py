"""
ListMessages Query - full message history between two participants on a listing.

Both directions, ascending by (created_at, id). The access policy is checked
on every call; an interest can be revoked between two page loads.
"""

from dataclasses import dataclass

from marketplace_chat.application.common.interfaces import Query, QueryHandler
from marketplace_chat.domain.entities.message import Message
from marketplace_chat.domain.exceptions import AccessDeniedError
from marketplace_chat.domain.ports.repositories import MessageRepository
from marketplace_chat.domain.services.access_policy import AccessPolicy
from marketplace_chat.domain.value_objects.listing_id import ListingId
from marketplace_chat.domain.value_objects.user_id import UserId
from marketplace_chat.observability.metrics import MetricsErrorType, increment_error


@dataclass(frozen=True)
class ListMessagesQuery(Query[list[Message]]):
    listing_id: ListingId
    user_id: UserId
    other_user_id: UserId


class ListMessagesHandler(QueryHandler[list[Message]]):
    def __init__(self, message_repo: MessageRepository, access_policy: AccessPolicy):
        self._message_repo = message_repo
        self._access_policy = access_policy

    async def execute(self, query: ListMessagesQuery) -> list[Message]:
        allowed = await self._access_policy.can_message(
            query.listing_id, query.user_id, query.other_user_id
        )
        if not allowed:
            increment_error(MetricsErrorType.ACCESS_DENIED)
            raise AccessDeniedError()

        messages = await self._message_repo.get_conversation(
            query.listing_id, query.user_id, query.other_user_id
        )
        return sorted(messages, key=lambda m: m.sort_key)
