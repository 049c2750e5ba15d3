"""CanMessage Query - lets a client decide whether to show the message composer."""

from dataclasses import dataclass

from marketplace_chat.application.common.interfaces import Query, QueryHandler
from marketplace_chat.domain.services.access_policy import AccessPolicy
from marketplace_chat.domain.value_objects.listing_id import ListingId
from marketplace_chat.domain.value_objects.user_id import UserId


@dataclass(frozen=True)
class CanMessageQuery(Query[bool]):
    listing_id: ListingId
    acting_user_id: UserId
    other_user_id: UserId


class CanMessageHandler(QueryHandler[bool]):
    def __init__(self, access_policy: AccessPolicy):
        self._access_policy = access_policy

    async def execute(self, query: CanMessageQuery) -> bool:
        return await self._access_policy.can_message(
            query.listing_id, query.acting_user_id, query.other_user_id
        )
