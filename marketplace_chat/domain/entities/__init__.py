"""
ENTITIES - Business objects with identity

Each entity:
- Has a unique identifier
- Pure Python dataclasses (no ORM, no Pydantic)
- State changes return new instances (messages and interests are frozen)
"""

from marketplace_chat.domain.entities.attachment import Attachment
from marketplace_chat.domain.entities.message import Message, ATTACHMENT_ONLY_CONTENT
from marketplace_chat.domain.entities.interest import Interest, InterestStatus
from marketplace_chat.domain.entities.listing import (
    Listing,
    ListingStatus,
    UserProfile,
    UserRole,
)
from marketplace_chat.domain.entities.notification import (
    Notification,
    NotificationType,
)
from marketplace_chat.domain.entities.conversation import ConversationSummary
from marketplace_chat.domain.entities.events import (
    DomainEvent,
    NewMessage,
    InterestCreated,
    InterestApproved,
    InterestRejected,
)

__all__ = [
    "Attachment",
    "Message",
    "ATTACHMENT_ONLY_CONTENT",
    "Interest",
    "InterestStatus",
    "Listing",
    "ListingStatus",
    "UserProfile",
    "UserRole",
    "Notification",
    "NotificationType",
    "ConversationSummary",
    "DomainEvent",
    "NewMessage",
    "InterestCreated",
    "InterestApproved",
    "InterestRejected",
]
