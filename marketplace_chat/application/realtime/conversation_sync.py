"""
Conversation Sync Engine - one client's live view of one conversation.

State machine:

    IDLE ──start()──► LOADING ──fetch + subscribe──► LIVE ──detach()──► DETACHED

- LOADING: the feed subscription is opened first and its events are
  buffered, then one authoritative ListMessages fetch seeds the state and
  the buffer is replayed. Nothing inserted between fetch and subscribe is
  lost.
- LIVE: feed events are merged as they arrive.
- DETACHED: the subscription is released; later events and in-flight
  awaits never touch the state or call listeners again.

Merge rules:
- Messages are keyed by id, so a duplicate or echoed INSERT is a no-op.
- An INSERT addressed to the local user is marked read in the store
  before it is merged as read.
- UPDATE events patch only is_read, and only false → true.
- A truncated payload (row too large for one notification) triggers an
  authoritative re-fetch instead of a partial merge.
- The view is kept sorted by (created_at, id) whatever the arrival order.

Listeners registered with on_change() get a snapshot after every merge.
"""

import logging
from dataclasses import replace
from enum import Enum
from typing import Awaitable, Callable, Optional

from marketplace_chat.application.commands.messages.mark_read import (
    MarkConversationReadCommand,
    MarkConversationReadHandler,
)
from marketplace_chat.application.commands.messages.send_message import (
    SendMessageCommand,
    SendMessageHandler,
)
from marketplace_chat.application.queries.messages.list_messages import (
    ListMessagesHandler,
    ListMessagesQuery,
)
from marketplace_chat.application.realtime.records import (
    MESSAGE_LISTING_COLUMN,
    MESSAGES_TABLE,
    message_from_record,
)
from marketplace_chat.domain.entities.attachment import Attachment
from marketplace_chat.domain.entities.message import Message
from marketplace_chat.domain.exceptions import DomainValidationError
from marketplace_chat.domain.ports.change_feed import (
    ChangeEvent,
    ChangeFeed,
    ChangeType,
    Subscription,
)
from marketplace_chat.domain.value_objects.listing_id import ListingId
from marketplace_chat.domain.value_objects.user_id import UserId

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[list[Message]], Awaitable[None]]


class SyncState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LIVE = "live"
    DETACHED = "detached"


class ConversationSyncEngine:
    def __init__(
        self,
        listing_id: ListingId,
        local_user_id: UserId,
        other_user_id: UserId,
        change_feed: ChangeFeed,
        list_messages: ListMessagesHandler,
        mark_read: MarkConversationReadHandler,
        send_message: Optional[SendMessageHandler] = None,
    ):
        self.listing_id = listing_id
        self.local_user_id = local_user_id
        self.other_user_id = other_user_id
        self._change_feed = change_feed
        self._list_messages = list_messages
        self._mark_read = mark_read
        self._send_message = send_message

        self._state = SyncState.IDLE
        self._by_id: dict[str, Message] = {}
        self._ordered: list[Message] = []
        self._buffered: list[ChangeEvent] = []
        self._listeners: list[SnapshotListener] = []
        self._subscription: Optional[Subscription] = None
        self._sending = False

    # ==================== PUBLIC API ====================

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def messages(self) -> list[Message]:
        return list(self._ordered)

    def on_change(self, listener: SnapshotListener) -> None:
        self._listeners.append(listener)

    async def start(self) -> list[Message]:
        """Load history and go LIVE. Raises AccessDeniedError if the pair may not talk."""
        if self._state is not SyncState.IDLE:
            raise RuntimeError(f"Cannot start a sync engine in state {self._state.value}")
        self._state = SyncState.LOADING

        try:
            self._subscription = await self._change_feed.subscribe(
                MESSAGES_TABLE,
                MESSAGE_LISTING_COLUMN,
                self.listing_id.value,
                self._on_event,
            )
            fetched = await self._list_messages.execute(self._list_query())
        except Exception:
            await self.detach()
            raise

        if self._detached:
            return []

        for message in fetched:
            self._merge(message)
        await self._mark_unread_as_read()
        if self._detached:
            return []

        self._state = SyncState.LIVE
        buffered, self._buffered = self._buffered, []
        for event in buffered:
            await self._apply(event, notify=False)
            if self._detached:
                return []

        logger.debug(
            f"[Sync] Live on listing {self.listing_id.value} "
            f"with {len(self._ordered)} message(s)"
        )
        await self._emit()
        return self.messages

    async def send(self, content: str, attachment: Optional[Attachment] = None) -> Message:
        """Send from the local user. Only one send may be in flight at a time."""
        if self._send_message is None:
            raise RuntimeError("Sync engine was created without a send handler")
        if self._state is not SyncState.LIVE:
            raise DomainValidationError("Conversation is not connected")
        if self._sending:
            raise DomainValidationError("A message is already being sent")

        self._sending = True
        try:
            message = await self._send_message.execute(
                SendMessageCommand(
                    listing_id=self.listing_id,
                    sender_id=self.local_user_id,
                    receiver_id=self.other_user_id,
                    content=content,
                    attachment=attachment,
                )
            )
        finally:
            self._sending = False

        # The feed usually delivers the INSERT first, making this merge a no-op
        if not self._detached and self._merge(message):
            await self._emit()
        return message

    async def detach(self) -> None:
        """Release the feed subscription. Idempotent."""
        if self._state is SyncState.DETACHED:
            return
        self._state = SyncState.DETACHED
        self._listeners.clear()
        self._buffered.clear()
        subscription, self._subscription = self._subscription, None
        if subscription is not None:
            await subscription.unsubscribe()
        logger.debug(f"[Sync] Detached from listing {self.listing_id.value}")

    # ==================== FEED HANDLING ====================

    @property
    def _detached(self) -> bool:
        return self._state is SyncState.DETACHED

    async def _on_event(self, event: ChangeEvent) -> None:
        if self._detached:
            return
        if self._state is SyncState.LOADING:
            self._buffered.append(event)
            return
        await self._apply(event)

    async def _apply(self, event: ChangeEvent, notify: bool = True) -> None:
        if event.table != MESSAGES_TABLE:
            return
        if event.truncated:
            await self._refetch()
            return

        if event.type is ChangeType.INSERT:
            changed = await self._apply_insert(event)
        elif event.type is ChangeType.UPDATE:
            changed = self._apply_update(event)
        else:
            changed = False

        if changed and notify and not self._detached:
            await self._emit()

    async def _apply_insert(self, event: ChangeEvent) -> bool:
        message = message_from_record(event.record)
        if message is None or not message.belongs_to(
            self.local_user_id, self.other_user_id
        ):
            return False
        if message.id.value in self._by_id:
            return self._merge(message)

        if self._is_unread_for_me(message):
            if await self._mark_conversation_read():
                message = message.mark_read()
        if self._detached:
            return False
        return self._merge(message)

    def _apply_update(self, event: ChangeEvent) -> bool:
        message_id = str(event.record.get("id", ""))
        current = self._by_id.get(message_id)
        if current is None or current.is_read or not event.record.get("is_read"):
            return False
        return self._merge(current.mark_read())

    async def _refetch(self) -> None:
        try:
            fetched = await self._list_messages.execute(self._list_query())
        except Exception as e:
            logger.warning(f"[Sync] Re-fetch after truncated event failed: {e}")
            return
        if self._detached:
            return
        changed = False
        for message in fetched:
            changed = self._merge(message) or changed
        changed = await self._mark_unread_as_read() or changed
        if changed and not self._detached:
            await self._emit()

    # ==================== STATE ====================

    def _merge(self, message: Message) -> bool:
        """Insert by id or advance is_read. Returns True if the view changed."""
        existing = self._by_id.get(message.id.value)
        if existing is None:
            merged = message
        elif message.is_read and not existing.is_read:
            merged = replace(
                existing, is_read=True, read_at=message.read_at or existing.read_at
            )
        else:
            return False
        by_id = {**self._by_id, message.id.value: merged}
        # Sort before committing so a failed comparison leaves the view intact
        self._ordered = sorted(by_id.values(), key=lambda m: m.sort_key)
        self._by_id = by_id
        return True

    def _is_unread_for_me(self, message: Message) -> bool:
        return message.receiver_id == self.local_user_id and not message.is_read

    async def _mark_unread_as_read(self) -> bool:
        unread = [m for m in self._ordered if self._is_unread_for_me(m)]
        if not unread or not await self._mark_conversation_read():
            return False
        for message in unread:
            self._merge(message.mark_read())
        return True

    async def _mark_conversation_read(self) -> bool:
        try:
            await self._mark_read.execute(
                MarkConversationReadCommand(
                    listing_id=self.listing_id,
                    reader_id=self.local_user_id,
                    other_user_id=self.other_user_id,
                )
            )
            return True
        except Exception as e:
            logger.warning(f"[Sync] Mark-read failed on {self.listing_id.value}: {e}")
            return False

    def _list_query(self) -> ListMessagesQuery:
        return ListMessagesQuery(
            listing_id=self.listing_id,
            user_id=self.local_user_id,
            other_user_id=self.other_user_id,
        )

    async def _emit(self) -> None:
        snapshot = self.messages
        for listener in list(self._listeners):
            try:
                await listener(snapshot)
            except Exception as e:
                logger.warning(f"[Sync] Listener failed: {e}")
