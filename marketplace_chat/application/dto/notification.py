"""Notification DTOs for API request/response."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel

from marketplace_chat.domain.entities.notification import Notification


class NotificationDTO(BaseModel):
    id: str
    type: str
    title: str
    message: str
    is_read: bool
    created_at: datetime
    metadata: dict[str, Any] = {}

    @classmethod
    def from_entity(cls, notification: Notification) -> "NotificationDTO":
        return cls(
            id=notification.id.value,
            type=notification.type.value,
            title=notification.title,
            message=notification.message,
            is_read=notification.is_read,
            created_at=notification.created_at,
            metadata=dict(notification.metadata),
        )
