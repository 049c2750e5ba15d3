"""Message DTOs for API request/response."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from marketplace_chat.domain.entities.message import Message


class AttachmentDTO(BaseModel):
    """Attachment metadata. `path` is the bare object key, never a public URL."""

    path: str
    name: str
    type: str
    size: int


class MessageDTO(BaseModel):
    """DTO for message data returned to clients."""

    id: str
    listing_id: str
    sender_id: str
    receiver_id: str
    content: str
    is_read: bool
    created_at: datetime
    read_at: Optional[datetime] = None
    attachment: Optional[AttachmentDTO] = None

    @classmethod
    def from_entity(cls, message: Message) -> "MessageDTO":
        attachment = None
        if message.attachment is not None:
            attachment = AttachmentDTO(
                path=message.attachment.storage_path.value,
                name=message.attachment.display_name,
                type=message.attachment.mime_type,
                size=message.attachment.byte_size,
            )
        return cls(
            id=message.id.value,
            listing_id=message.listing_id.value,
            sender_id=message.sender_id.value,
            receiver_id=message.receiver_id.value,
            content=message.content,
            is_read=message.is_read,
            created_at=message.created_at,
            read_at=message.read_at,
            attachment=attachment,
        )
