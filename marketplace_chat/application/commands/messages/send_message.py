"""
SendMessage Command - persist a message between two conversation participants.

Handler:
1. Re-check the access policy (never trusted from an earlier check)
2. Validate content: trimmed, non-empty unless an attachment is present,
   at most MESSAGE_MAX_LENGTH characters
3. Persist with is_read = False
4. Notify the receiver (failure isolated inside the dispatcher)

Never retried automatically: a retried insert would duplicate the message.
Other clients learn about the message through the change feed, not from
this handler.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from marketplace_chat.application.common.interfaces import Command, CommandHandler
from marketplace_chat.application.services.notification_dispatcher import (
    NotificationDispatcher,
)
from marketplace_chat.config.settings import Config
from marketplace_chat.domain.entities.attachment import Attachment
from marketplace_chat.domain.entities.events import NewMessage
from marketplace_chat.domain.entities.message import Message
from marketplace_chat.domain.exceptions import AccessDeniedError, DomainValidationError
from marketplace_chat.domain.ports.repositories import (
    MessageRepository,
    UserRepository,
)
from marketplace_chat.domain.services.access_policy import AccessPolicy
from marketplace_chat.domain.value_objects.listing_id import ListingId
from marketplace_chat.domain.value_objects.user_id import UserId
from marketplace_chat.observability.metrics import (
    MetricsErrorType,
    increment_error,
    increment_messages_sent,
)

logger = logging.getLogger(__name__)

UNKNOWN_SENDER_NAME = "Someone"


@dataclass(frozen=True)
class SendMessageCommand(Command[Message]):
    listing_id: ListingId
    sender_id: UserId
    receiver_id: UserId
    content: str
    attachment: Optional[Attachment] = None


class SendMessageHandler(CommandHandler[Message]):
    def __init__(
        self,
        message_repo: MessageRepository,
        user_repo: UserRepository,
        access_policy: AccessPolicy,
        dispatcher: NotificationDispatcher,
        max_length: int = Config.MESSAGE_MAX_LENGTH,
    ):
        self.message_repo = message_repo
        self.user_repo = user_repo
        self.access_policy = access_policy
        self.dispatcher = dispatcher
        self.max_length = max_length

    async def execute(self, command: SendMessageCommand) -> Message:
        allowed = await self.access_policy.can_message(
            command.listing_id, command.sender_id, command.receiver_id
        )
        if not allowed:
            increment_error(MetricsErrorType.ACCESS_DENIED)
            raise AccessDeniedError()

        content = command.content.strip()
        if not content and command.attachment is None:
            increment_error(MetricsErrorType.VALIDATION_FAILED)
            raise DomainValidationError("Message content cannot be empty")
        if len(content) > self.max_length:
            increment_error(MetricsErrorType.VALIDATION_FAILED)
            raise DomainValidationError(
                f"Message is too long (max {self.max_length} characters)"
            )

        message = Message.create(
            listing_id=command.listing_id,
            sender_id=command.sender_id,
            receiver_id=command.receiver_id,
            content=content,
            attachment=command.attachment,
        )
        stored = await self.message_repo.add(message)
        increment_messages_sent(with_attachment=stored.attachment is not None)
        logger.info(
            f"[Messages] {stored.id.value} sent on listing {stored.listing_id.value}"
        )

        sender_name = await self._sender_name(command.sender_id)
        await self.dispatcher.notify(NewMessage(message=stored, sender_name=sender_name))
        return stored

    async def _sender_name(self, sender_id: UserId) -> str:
        try:
            profile = await self.user_repo.get_profile(sender_id)
        except Exception as e:
            logger.warning(f"[Messages] Sender profile lookup failed: {e}")
            return UNKNOWN_SENDER_NAME
        return profile.name_or_default if profile else UNKNOWN_SENDER_NAME
