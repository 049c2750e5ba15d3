"""
MarkConversationRead Command - flip the reader's unread messages to read.

Only messages addressed to the reader, sent by the other participant, on the
listing, with is_read = False are touched. Running it twice changes nothing
the second time, so concurrent sessions of the same user converge.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from marketplace_chat.application.common.interfaces import Command, CommandHandler
from marketplace_chat.application.services.notification_dispatcher import (
    NotificationDispatcher,
)
from marketplace_chat.domain.exceptions import AccessDeniedError
from marketplace_chat.domain.ports.repositories import MessageRepository
from marketplace_chat.domain.services.access_policy import AccessPolicy
from marketplace_chat.domain.services.thread_ids import chat_thread_id
from marketplace_chat.domain.value_objects.listing_id import ListingId
from marketplace_chat.domain.value_objects.user_id import UserId
from marketplace_chat.observability.metrics import (
    MetricsErrorType,
    increment_error,
    increment_messages_marked_read,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarkConversationReadCommand(Command[int]):
    listing_id: ListingId
    reader_id: UserId
    other_user_id: UserId


class MarkConversationReadHandler(CommandHandler[int]):
    def __init__(
        self,
        message_repo: MessageRepository,
        access_policy: AccessPolicy,
        dispatcher: NotificationDispatcher,
    ):
        self.message_repo = message_repo
        self.access_policy = access_policy
        self.dispatcher = dispatcher

    async def execute(self, command: MarkConversationReadCommand) -> int:
        allowed = await self.access_policy.can_message(
            command.listing_id, command.reader_id, command.other_user_id
        )
        if not allowed:
            increment_error(MetricsErrorType.ACCESS_DENIED)
            raise AccessDeniedError()

        updated = await self.message_repo.mark_read(
            listing_id=command.listing_id,
            receiver_id=command.reader_id,
            sender_id=command.other_user_id,
            read_at=datetime.now(timezone.utc),
        )
        increment_messages_marked_read(updated)
        if updated:
            logger.debug(
                f"[Messages] Marked {updated} message(s) read on listing "
                f"{command.listing_id.value}"
            )

        # Opening the thread in-app retracts its pending pushes
        await self.dispatcher.dismiss_thread(
            command.reader_id,
            chat_thread_id(command.listing_id.value, command.other_user_id.value),
        )
        return updated
