"""
Row → entity mapping for change feed payloads.

Feed records carry raw column names of the `messages` and `notifications`
tables (see prisma/schema.prisma). Timestamps arrive as ISO-8601 strings;
the columns are `timestamp(3)` without time zone, so `to_jsonb` emits them
with no offset. They hold UTC, and are returned as aware datetimes so they
order against rows loaded through Prisma.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from marketplace_chat.domain.entities.attachment import Attachment
from marketplace_chat.domain.entities.message import Message
from marketplace_chat.domain.entities.notification import (
    Notification,
    NotificationType,
)
from marketplace_chat.domain.value_objects.attachment_path import AttachmentPath
from marketplace_chat.domain.value_objects.listing_id import ListingId
from marketplace_chat.domain.value_objects.message_id import MessageId
from marketplace_chat.domain.value_objects.notification_id import NotificationId
from marketplace_chat.domain.value_objects.user_id import UserId

logger = logging.getLogger(__name__)

MESSAGES_TABLE = "messages"
NOTIFICATIONS_TABLE = "notifications"
MESSAGE_LISTING_COLUMN = "issue_id"
NOTIFICATION_USER_COLUMN = "user_id"


def parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if not isinstance(value, datetime):
        value = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def message_from_record(record: Mapping[str, Any]) -> Optional[Message]:
    """Build a Message from a feed record, or None when the row is malformed."""
    try:
        attachment = None
        if record.get("attachment_url"):
            attachment = Attachment(
                storage_path=AttachmentPath(record["attachment_url"]),
                display_name=record.get("attachment_name") or "file",
                mime_type=record.get("attachment_type") or "application/octet-stream",
                byte_size=int(record.get("attachment_size") or 0),
            )
        return Message(
            id=MessageId(str(record["id"])),
            listing_id=ListingId(str(record[MESSAGE_LISTING_COLUMN])),
            sender_id=UserId(str(record["sender_id"])),
            receiver_id=UserId(str(record["receiver_id"])),
            content=record.get("content") or "",
            is_read=bool(record.get("is_read")),
            created_at=parse_timestamp(record["created_at"]),
            attachment=attachment,
            read_at=parse_timestamp(record.get("read_at")),
        )
    except (KeyError, TypeError, ValueError) as e:
        logger.warning(f"[Realtime] Skipping malformed message record: {e}")
        return None


def notification_from_record(record: Mapping[str, Any]) -> Optional[Notification]:
    try:
        return Notification(
            id=NotificationId(str(record["id"])),
            user_id=UserId(str(record["user_id"])),
            type=NotificationType(record["type"]),
            title=record.get("title") or "",
            message=record.get("message") or "",
            is_read=bool(record.get("is_read")),
            created_at=parse_timestamp(record["created_at"]),
            metadata=dict(record.get("metadata") or {}),
        )
    except (KeyError, TypeError, ValueError) as e:
        logger.warning(f"[Realtime] Skipping malformed notification record: {e}")
        return None
