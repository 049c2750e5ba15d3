"""
Notification Feed - live in-app notifications for one user.

Forwards INSERT and UPDATE rows of the user's notifications to a listener.
Unlike the conversation view there is no local state to reconcile: the
client refreshes its unread badge from the events themselves.
"""

import logging
from typing import Awaitable, Callable, Optional

from marketplace_chat.application.realtime.records import (
    NOTIFICATION_USER_COLUMN,
    NOTIFICATIONS_TABLE,
    notification_from_record,
)
from marketplace_chat.domain.entities.notification import Notification
from marketplace_chat.domain.ports.change_feed import (
    ChangeEvent,
    ChangeFeed,
    ChangeType,
    Subscription,
)
from marketplace_chat.domain.value_objects.user_id import UserId

logger = logging.getLogger(__name__)

NotificationListener = Callable[[ChangeType, Notification], Awaitable[None]]


class NotificationFeed:
    def __init__(self, user_id: UserId, change_feed: ChangeFeed):
        self.user_id = user_id
        self._change_feed = change_feed
        self._subscription: Optional[Subscription] = None
        self._listener: Optional[NotificationListener] = None

    async def start(self, listener: NotificationListener) -> None:
        if self._subscription is not None:
            raise RuntimeError("Notification feed already started")
        self._listener = listener
        self._subscription = await self._change_feed.subscribe(
            NOTIFICATIONS_TABLE,
            NOTIFICATION_USER_COLUMN,
            self.user_id.value,
            self._on_event,
        )

    async def stop(self) -> None:
        self._listener = None
        subscription, self._subscription = self._subscription, None
        if subscription is not None:
            await subscription.unsubscribe()

    async def _on_event(self, event: ChangeEvent) -> None:
        if self._listener is None or event.type is ChangeType.DELETE:
            return
        notification = notification_from_record(event.record)
        if notification is None or notification.user_id != self.user_id:
            return
        try:
            await self._listener(event.type, notification)
        except Exception as e:
            logger.warning(f"[NotificationFeed] Listener failed: {e}")
