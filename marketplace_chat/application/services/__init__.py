"""Application services shared by several handlers."""

from marketplace_chat.application.services.notification_dispatcher import (
    NotificationDispatcher,
    build_notification,
)

__all__ = ["NotificationDispatcher", "build_notification"]
