"""
Message Repository Port - Interface for message persistence.
Implementation: marketplace_chat/infrastructure/persistence/prisma_message_repository.py
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from marketplace_chat.domain.entities.conversation import ConversationSummary
from marketplace_chat.domain.entities.message import Message
from marketplace_chat.domain.value_objects.listing_id import ListingId
from marketplace_chat.domain.value_objects.message_id import MessageId
from marketplace_chat.domain.value_objects.user_id import UserId


class MessageRepository(ABC):
    @abstractmethod
    async def get_by_id(self, message_id: MessageId) -> Optional[Message]: ...

    @abstractmethod
    async def add(self, message: Message) -> Message:
        """Insert a new message and return the stored row."""
        ...

    @abstractmethod
    async def get_conversation(
        self, listing_id: ListingId, user_id: UserId, other_user_id: UserId
    ) -> list[Message]:
        """Messages between the two users on the listing, ascending (created_at, id)."""
        ...

    @abstractmethod
    async def mark_read(
        self,
        listing_id: ListingId,
        receiver_id: UserId,
        sender_id: UserId,
        read_at: datetime,
    ) -> int:
        """Flip unread messages sender→receiver on the listing. Returns rows changed."""
        ...

    @abstractmethod
    async def count_unread(self, receiver_id: UserId) -> int: ...

    @abstractmethod
    async def get_conversation_summaries(
        self, user_id: UserId
    ) -> list[ConversationSummary]: ...
