"""Data Transfer Objects shared by the HTTP and WebSocket surfaces."""

from marketplace_chat.application.dto.message import AttachmentDTO, MessageDTO
from marketplace_chat.application.dto.conversation import ConversationSummaryDTO
from marketplace_chat.application.dto.notification import NotificationDTO
from marketplace_chat.application.dto.attachment import (
    AttachmentUploadDTO,
    SignedUrlDTO,
)

__all__ = [
    "AttachmentDTO",
    "MessageDTO",
    "ConversationSummaryDTO",
    "NotificationDTO",
    "AttachmentUploadDTO",
    "SignedUrlDTO",
]
