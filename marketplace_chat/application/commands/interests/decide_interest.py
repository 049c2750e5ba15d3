"""
DecideInterest Command - the listing owner approves or rejects an application.

Approval is what unlocks messaging for the pair. On approval:
- an `open` listing moves to `in_progress_accepting`
- a welcome message is sent from the owner to the student

Neither side effect undoes the approval when it fails; both are logged.

The status write is conditional on the application still being pending,
so of two racing decisions exactly one wins and the other gets a
DomainValidationError. A caller who does not own the listing sees the same
EntityNotFoundError as for an unknown id.
"""

import logging
from dataclasses import dataclass

from marketplace_chat.application.commands.messages.send_message import (
    SendMessageCommand,
    SendMessageHandler,
)
from marketplace_chat.application.common.interfaces import Command, CommandHandler
from marketplace_chat.application.services.notification_dispatcher import (
    NotificationDispatcher,
)
from marketplace_chat.domain.entities.events import InterestApproved, InterestRejected
from marketplace_chat.domain.entities.interest import Interest, InterestStatus
from marketplace_chat.domain.entities.listing import Listing, ListingStatus
from marketplace_chat.domain.exceptions import DomainValidationError, EntityNotFoundError
from marketplace_chat.domain.ports.repositories import (
    InterestRepository,
    ListingRepository,
)
from marketplace_chat.domain.value_objects.interest_id import InterestId
from marketplace_chat.domain.value_objects.user_id import UserId

logger = logging.getLogger(__name__)

WELCOME_MESSAGE = (
    'Welcome! You\'ve been approved to work on "{title}". '
    "I'm excited to collaborate with you. "
    "Feel free to ask any questions about the project!"
)


@dataclass(frozen=True)
class DecideInterestCommand(Command[Interest]):
    interest_id: InterestId
    business_user_id: UserId
    status: InterestStatus


class DecideInterestHandler(CommandHandler[Interest]):
    def __init__(
        self,
        interest_repo: InterestRepository,
        listing_repo: ListingRepository,
        dispatcher: NotificationDispatcher,
        send_message: SendMessageHandler,
    ):
        self.interest_repo = interest_repo
        self.listing_repo = listing_repo
        self.dispatcher = dispatcher
        self.send_message = send_message

    async def execute(self, command: DecideInterestCommand) -> Interest:
        interest = await self.interest_repo.get_by_id(command.interest_id)
        if interest is None:
            raise EntityNotFoundError(f"Interest {command.interest_id.value} not found")

        listing = await self.listing_repo.get_by_id(interest.listing_id)
        if listing is None:
            raise EntityNotFoundError(f"Listing {interest.listing_id.value} not found")
        if listing.owner_user_id != command.business_user_id:
            # Indistinguishable from an unknown id
            raise EntityNotFoundError(f"Interest {command.interest_id.value} not found")

        try:
            decided = interest.decide(command.status)
        except ValueError as e:
            raise DomainValidationError(str(e)) from e

        if not await self.interest_repo.update_status(decided, expected=interest.status):
            raise DomainValidationError("Application has already been decided")
        logger.info(f"[Interests] {decided.id.value} → {decided.status.value}")

        if decided.is_approved:
            await self._open_listing_for_work(listing)
            await self._send_welcome(listing, decided)
            await self.dispatcher.notify(InterestApproved(interest=decided, listing=listing))
        else:
            await self.dispatcher.notify(InterestRejected(interest=decided, listing=listing))
        return decided

    async def _open_listing_for_work(self, listing: Listing) -> None:
        if listing.status is not ListingStatus.OPEN:
            return
        try:
            await self.listing_repo.update_status(
                listing.id, ListingStatus.IN_PROGRESS_ACCEPTING
            )
        except Exception as e:
            logger.error(
                f"[Interests] Failed to move listing {listing.id.value} "
                f"to in_progress_accepting: {e}"
            )

    async def _send_welcome(self, listing: Listing, interest: Interest) -> None:
        try:
            await self.send_message.execute(
                SendMessageCommand(
                    listing_id=listing.id,
                    sender_id=listing.owner_user_id,
                    receiver_id=interest.student_id,
                    content=WELCOME_MESSAGE.format(title=listing.title),
                )
            )
        except Exception as e:
            logger.warning(
                f"[Interests] Welcome message for {interest.id.value} failed: {e}"
            )
