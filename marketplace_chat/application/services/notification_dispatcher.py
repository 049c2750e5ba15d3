"""
Notification Dispatcher - domain events → notifications.

For each committed domain event:
1. Persist one in-app Notification for the affected recipient, with the
   metadata needed to derive its thread id.
2. Schedule a push through the Notifier only when the recipient's delivery
   context is BACKGROUND. A foreground client already shows the in-app feed,
   so pushing as well would alert twice.
3. dismiss_thread() retracts pending pushes once the user has opened the
   thread in-app.

Dispatch never raises: a failed notification must not undo or block the
action that produced it (a message is sent even if its notification is not).
Callers invoke it exactly once per committed event; nothing here
deduplicates retried writes.
"""

import logging
from typing import Optional

from marketplace_chat.config.settings import Config
from marketplace_chat.domain.entities.events import (
    DomainEvent,
    InterestApproved,
    InterestCreated,
    InterestRejected,
    NewMessage,
)
from marketplace_chat.domain.entities.notification import (
    Notification,
    NotificationType,
)
from marketplace_chat.domain.ports.notifier import Notifier
from marketplace_chat.domain.ports.presence import DeliveryContext, PresenceStore
from marketplace_chat.domain.ports.repositories import NotificationRepository
from marketplace_chat.domain.services.thread_ids import thread_id_for
from marketplace_chat.domain.value_objects.user_id import UserId
from marketplace_chat.observability.metrics import (
    NotificationChannel,
    increment_notification,
    increment_notification_failure,
)

logger = logging.getLogger(__name__)


def _preview(text: str, limit: int = Config.NOTIFICATION_PREVIEW_LENGTH) -> str:
    return text[:limit] + ("..." if len(text) > limit else "")


def build_notification(event: DomainEvent) -> Optional[Notification]:
    """Map a domain event to the notification its recipient should get."""
    if isinstance(event, NewMessage):
        msg = event.message
        if msg.receiver_id == msg.sender_id:
            return None
        return Notification.create(
            user_id=msg.receiver_id,
            type=NotificationType.NEW_MESSAGE,
            title=f"New message from {event.sender_name}",
            message=_preview(msg.content),
            metadata={
                "listing_id": msg.listing_id.value,
                "participant_id": msg.sender_id.value,
                "message_id": msg.id.value,
            },
        )

    if isinstance(event, InterestCreated):
        return Notification.create(
            user_id=event.listing.owner_user_id,
            type=NotificationType.NEW_INTEREST,
            title="New application",
            message=f'{event.student_name} applied to "{event.listing.title}"',
            metadata={
                "listing_id": event.listing.id.value,
                "interest_id": event.interest.id.value,
                "participant_id": event.interest.student_id.value,
            },
        )

    if isinstance(event, InterestApproved):
        return Notification.create(
            user_id=event.interest.student_id,
            type=NotificationType.INTEREST_APPROVED,
            title="Application approved",
            message=(
                f'Your application for "{event.listing.title}" was approved. '
                "You can now message the business."
            ),
            metadata={
                "listing_id": event.listing.id.value,
                "interest_id": event.interest.id.value,
                "participant_id": event.listing.owner_user_id.value,
            },
        )

    if isinstance(event, InterestRejected):
        return Notification.create(
            user_id=event.interest.student_id,
            type=NotificationType.INTEREST_REJECTED,
            title="Application update",
            message=f'Your application for "{event.listing.title}" was not selected.',
            metadata={
                "listing_id": event.listing.id.value,
                "interest_id": event.interest.id.value,
            },
        )

    raise TypeError(f"Unsupported domain event: {type(event).__name__}")


class NotificationDispatcher:
    def __init__(
        self,
        notification_repo: NotificationRepository,
        notifier: Notifier,
        presence: Optional[PresenceStore] = None,
    ):
        self._notification_repo = notification_repo
        self._notifier = notifier
        self._presence = presence

    async def notify(self, event: DomainEvent) -> Optional[Notification]:
        """Dispatch using the recipient's reported delivery context."""
        notification = self._build(event)
        if notification is None:
            return None
        context = await self._context_for(notification.user_id)
        return await self._deliver(notification, context)

    async def dispatch(
        self, event: DomainEvent, context: DeliveryContext
    ) -> Optional[Notification]:
        """Dispatch with an explicit delivery context."""
        notification = self._build(event)
        if notification is None:
            return None
        return await self._deliver(notification, context)

    @staticmethod
    def _build(event: DomainEvent) -> Optional[Notification]:
        try:
            return build_notification(event)
        except Exception as e:
            logger.error(f"[Notifications] Could not build notification: {e}")
            increment_notification_failure("unknown")
            return None

    async def dismiss_thread(self, user_id: UserId, thread_id: str) -> int:
        try:
            dismissed = await self._notifier.dismiss_thread(user_id, thread_id)
            if dismissed:
                logger.debug(
                    f"[Notifications] Dismissed {dismissed} push(es) in {thread_id}"
                )
            return dismissed
        except Exception as e:
            logger.warning(f"[Notifications] Failed to dismiss thread {thread_id}: {e}")
            return 0

    async def _context_for(self, user_id: UserId) -> DeliveryContext:
        if self._presence is None:
            return DeliveryContext.BACKGROUND
        try:
            return await self._presence.get(user_id)
        except Exception as e:
            logger.warning(
                f"[Notifications] Presence lookup failed for {user_id.value}, "
                f"assuming background: {e}"
            )
            return DeliveryContext.BACKGROUND

    async def _deliver(
        self, notification: Notification, context: DeliveryContext
    ) -> Optional[Notification]:
        type_label = notification.type.value
        try:
            await self._notification_repo.add(notification)
        except Exception as e:
            logger.error(
                f"[Notifications] Failed to create {type_label} notification "
                f"for {notification.user_id.value}: {e}"
            )
            increment_notification_failure(type_label)
            return None
        increment_notification(type_label, NotificationChannel.IN_APP)

        if context is DeliveryContext.FOREGROUND:
            return notification

        try:
            await self._notifier.schedule(
                notification.user_id,
                notification.title,
                notification.message,
                {
                    "type": type_label,
                    "notification_id": notification.id.value,
                    **notification.metadata,
                },
                thread_id=thread_id_for(notification.type, notification.metadata),
            )
            increment_notification(type_label, NotificationChannel.PUSH)
        except Exception as e:
            logger.warning(f"[Notifications] Push scheduling failed ({type_label}): {e}")
            increment_notification_failure(type_label)
        return notification
