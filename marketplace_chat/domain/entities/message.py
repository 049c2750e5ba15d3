"""
Message Entity - A single message in a listing conversation.

Immutable after creation except for the one-way is_read transition.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Optional

from marketplace_chat.domain.entities.attachment import Attachment
from marketplace_chat.domain.value_objects.listing_id import ListingId
from marketplace_chat.domain.value_objects.message_id import MessageId
from marketplace_chat.domain.value_objects.user_id import UserId

ATTACHMENT_ONLY_CONTENT = "Sent a file: {name}"


@dataclass(frozen=True)
class Message:
    id: MessageId
    listing_id: ListingId
    sender_id: UserId
    receiver_id: UserId
    content: str
    is_read: bool
    created_at: datetime
    attachment: Optional[Attachment] = None
    read_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.content.strip() and self.attachment is None:
            raise ValueError("Message must have content or an attachment")

    @classmethod
    def create(
        cls,
        listing_id: ListingId,
        sender_id: UserId,
        receiver_id: UserId,
        content: str,
        attachment: Optional[Attachment] = None,
    ) -> Message:
        """Factory method to create a new unread Message with a generated ID and timestamp."""
        body = content.strip()
        if not body and attachment is not None:
            body = ATTACHMENT_ONLY_CONTENT.format(name=attachment.display_name)
        return cls(
            id=MessageId.generate(),
            listing_id=listing_id,
            sender_id=sender_id,
            receiver_id=receiver_id,
            content=body,
            is_read=False,
            created_at=datetime.now(timezone.utc),
            attachment=attachment,
        )

    @property
    def sort_key(self) -> tuple[datetime, str]:
        return (self.created_at, self.id.value)

    def belongs_to(self, user_id: UserId, other_user_id: UserId) -> bool:
        """True if this message is between the two users, in either direction."""
        return (self.sender_id == user_id and self.receiver_id == other_user_id) or (
            self.sender_id == other_user_id and self.receiver_id == user_id
        )

    def mark_read(self, at: Optional[datetime] = None) -> Message:
        """Return a read copy. Already-read messages are returned unchanged."""
        if self.is_read:
            return self
        return replace(self, is_read=True, read_at=at or datetime.now(timezone.utc))
