"""Conversation DTOs for API request/response."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from marketplace_chat.domain.entities.conversation import ConversationSummary


class ConversationSummaryDTO(BaseModel):
    listing_id: str
    listing_title: Optional[str] = None
    participant_id: str
    last_message: str
    last_message_at: datetime
    unread_count: int

    @classmethod
    def from_entity(cls, summary: ConversationSummary) -> "ConversationSummaryDTO":
        return cls(
            listing_id=summary.listing_id.value,
            listing_title=summary.listing_title,
            participant_id=summary.participant_id.value,
            last_message=summary.last_message,
            last_message_at=summary.last_message_at,
            unread_count=summary.unread_count,
        )
