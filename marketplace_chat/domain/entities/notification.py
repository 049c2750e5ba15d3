"""
Notification Entity - An in-app notification for one recipient.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4

from marketplace_chat.domain.value_objects.notification_id import NotificationId
from marketplace_chat.domain.value_objects.user_id import UserId


class NotificationType(str, Enum):
    NEW_MESSAGE = "new_message"
    NEW_INTEREST = "new_interest"
    INTEREST_APPROVED = "interest_approved"
    INTEREST_REJECTED = "interest_rejected"


@dataclass(frozen=True)
class Notification:
    id: NotificationId
    user_id: UserId
    type: NotificationType
    title: str
    message: str
    is_read: bool
    created_at: datetime
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        user_id: UserId,
        type: NotificationType,
        title: str,
        message: str,
        metadata: dict[str, Any],
    ) -> Notification:
        return cls(
            id=NotificationId(str(uuid4())),
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            is_read=False,
            created_at=datetime.now(timezone.utc),
            metadata=dict(metadata),
        )
