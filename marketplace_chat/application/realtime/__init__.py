"""Realtime views driven by the change feed."""

from marketplace_chat.application.realtime.conversation_sync import (
    ConversationSyncEngine,
    SyncState,
)
from marketplace_chat.application.realtime.notification_feed import NotificationFeed

__all__ = ["ConversationSyncEngine", "SyncState", "NotificationFeed"]
