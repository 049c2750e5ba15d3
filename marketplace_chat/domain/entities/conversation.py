"""
ConversationSummary - One row of a user's inbox.

Conversations are not persisted; a summary is derived from the messages
between the user and one participant about one listing.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from marketplace_chat.domain.value_objects.listing_id import ListingId
from marketplace_chat.domain.value_objects.user_id import UserId


@dataclass(frozen=True)
class ConversationSummary:
    listing_id: ListingId
    participant_id: UserId
    last_message: str
    last_message_at: datetime
    unread_count: int
    listing_title: Optional[str] = None
