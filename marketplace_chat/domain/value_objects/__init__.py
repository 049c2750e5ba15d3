"""
VALUE OBJECTS - Immutable domain types

Each value object:
- Has no identity (compared by value, not by ID)
- Is immutable (frozen dataclass)
- Validates itself on creation
- Pure Python (no framework dependencies)
"""

from marketplace_chat.domain.value_objects.user_id import UserId
from marketplace_chat.domain.value_objects.listing_id import ListingId
from marketplace_chat.domain.value_objects.interest_id import InterestId
from marketplace_chat.domain.value_objects.message_id import MessageId
from marketplace_chat.domain.value_objects.notification_id import NotificationId
from marketplace_chat.domain.value_objects.attachment_path import AttachmentPath

__all__ = [
    "UserId",
    "ListingId",
    "InterestId",
    "MessageId",
    "NotificationId",
    "AttachmentPath",
]
