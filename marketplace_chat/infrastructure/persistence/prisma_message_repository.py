"""
Prisma Message Repository Implementation.

Prisma Message Model (from prisma/schema.prisma, table "messages"):
    model Message {
        id              String    @id
        issue_id        String
        sender_id       String
        receiver_id     String
        content         String
        is_read         Boolean   @default(false)
        read_at         DateTime?
        attachment_url  String?
        attachment_name String?
        attachment_type String?
        attachment_size Int?
        created_at      DateTime  @default(now())
    }

Mapping:
- Prisma: issue_id ←→ Domain: listing_id (ListingId)
- Prisma: attachment_* columns ←→ Domain: attachment (Attachment, all or nothing)
- attachment_url holds the bare object key; older rows may hold a full URL,
  which the signed-URL query normalizes.
"""

import logging
from datetime import datetime
from typing import Optional

from prisma import Prisma
from prisma.models import Message as PrismaMessage

from marketplace_chat.domain.entities.attachment import Attachment
from marketplace_chat.domain.entities.conversation import ConversationSummary
from marketplace_chat.domain.entities.message import Message
from marketplace_chat.domain.ports.repositories.message_repository import (
    MessageRepository,
)
from marketplace_chat.domain.value_objects.attachment_path import AttachmentPath
from marketplace_chat.domain.value_objects.listing_id import ListingId
from marketplace_chat.domain.value_objects.message_id import MessageId
from marketplace_chat.domain.value_objects.user_id import UserId
from marketplace_chat.infrastructure.persistence.errors import storage_errors
from marketplace_chat.infrastructure.retry import read_retry

logger = logging.getLogger(__name__)

# Latest message per (listing, other participant) plus the unread count
# addressed to the user in that conversation.
_CONVERSATION_SUMMARIES_SQL = """
WITH mine AS (
    SELECT m.*,
           CASE WHEN m.sender_id = $1 THEN m.receiver_id ELSE m.sender_id END
               AS participant_id
    FROM messages m
    WHERE m.sender_id = $1 OR m.receiver_id = $1
)
SELECT DISTINCT ON (mine.issue_id, mine.participant_id)
       mine.issue_id        AS listing_id,
       mine.participant_id  AS participant_id,
       mine.content         AS last_message,
       mine.created_at      AS last_message_at,
       i.title              AS listing_title,
       (SELECT COUNT(*)::int
          FROM messages u
         WHERE u.issue_id = mine.issue_id
           AND u.sender_id = mine.participant_id
           AND u.receiver_id = $1
           AND u.is_read = false) AS unread_count
FROM mine
LEFT JOIN issues i ON i.id = mine.issue_id
ORDER BY mine.issue_id, mine.participant_id, mine.created_at DESC, mine.id DESC
"""


def _as_datetime(value) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


class PrismaMessageRepository(MessageRepository):
    """
    Prisma implementation of MessageRepository.

    Handles persistence of Message entities to PostgreSQL via Prisma.
    """

    _prisma: Prisma

    def __init__(self, prisma: Prisma):
        self._prisma = prisma

    def _to_entity(self, record: PrismaMessage) -> Message:
        attachment = None
        if record.attachment_url:
            attachment = Attachment(
                storage_path=AttachmentPath(record.attachment_url),
                display_name=record.attachment_name or "file",
                mime_type=record.attachment_type or "application/octet-stream",
                byte_size=record.attachment_size or 0,
            )
        return Message(
            id=MessageId(record.id),
            listing_id=ListingId(record.issue_id),
            sender_id=UserId(record.sender_id),
            receiver_id=UserId(record.receiver_id),
            content=record.content,
            is_read=record.is_read,
            created_at=record.created_at,
            attachment=attachment,
            read_at=record.read_at,
        )

    @storage_errors
    async def get_by_id(self, message_id: MessageId) -> Optional[Message]:
        record = await self._prisma.message.find_unique(where={"id": message_id.value})
        return self._to_entity(record) if record else None

    @storage_errors
    async def add(self, message: Message) -> Message:
        data = {
            "id": message.id.value,
            "issue_id": message.listing_id.value,
            "sender_id": message.sender_id.value,
            "receiver_id": message.receiver_id.value,
            "content": message.content,
            "is_read": message.is_read,
            "created_at": message.created_at,
        }
        if message.attachment is not None:
            data.update(
                {
                    "attachment_url": message.attachment.storage_path.value,
                    "attachment_name": message.attachment.display_name,
                    "attachment_type": message.attachment.mime_type,
                    "attachment_size": message.attachment.byte_size,
                }
            )
        record = await self._prisma.message.create(data=data)
        return self._to_entity(record)

    @read_retry
    @storage_errors
    async def get_conversation(
        self, listing_id: ListingId, user_id: UserId, other_user_id: UserId
    ) -> list[Message]:
        records = await self._prisma.message.find_many(
            where={
                "issue_id": listing_id.value,
                "OR": [
                    {"sender_id": user_id.value, "receiver_id": other_user_id.value},
                    {"sender_id": other_user_id.value, "receiver_id": user_id.value},
                ],
            },
            order=[{"created_at": "asc"}, {"id": "asc"}],
        )
        return [self._to_entity(record) for record in records]

    @storage_errors
    async def mark_read(
        self,
        listing_id: ListingId,
        receiver_id: UserId,
        sender_id: UserId,
        read_at: datetime,
    ) -> int:
        return await self._prisma.message.update_many(
            where={
                "issue_id": listing_id.value,
                "receiver_id": receiver_id.value,
                "sender_id": sender_id.value,
                "is_read": False,
            },
            data={"is_read": True, "read_at": read_at},
        )

    @read_retry
    @storage_errors
    async def count_unread(self, receiver_id: UserId) -> int:
        return await self._prisma.message.count(
            where={"receiver_id": receiver_id.value, "is_read": False}
        )

    @read_retry
    @storage_errors
    async def get_conversation_summaries(
        self, user_id: UserId
    ) -> list[ConversationSummary]:
        rows = await self._prisma.query_raw(_CONVERSATION_SUMMARIES_SQL, user_id.value)
        return [
            ConversationSummary(
                listing_id=ListingId(row["listing_id"]),
                participant_id=UserId(row["participant_id"]),
                last_message=row["last_message"],
                last_message_at=_as_datetime(row["last_message_at"]),
                unread_count=int(row["unread_count"] or 0),
                listing_title=row.get("listing_title"),
            )
            for row in rows
        ]
