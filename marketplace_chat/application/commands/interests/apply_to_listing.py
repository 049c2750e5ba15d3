"""
ApplyToListing Command - a student registers interest in a listing.

Handler:
1. Listing must exist and accept applications (open / in_progress_accepting)
2. Applicant must be a student
3. One interest per (student, listing)
4. Persist as PENDING and notify the listing owner
"""

import logging
from dataclasses import dataclass
from typing import Optional

from marketplace_chat.application.common.interfaces import Command, CommandHandler
from marketplace_chat.application.services.notification_dispatcher import (
    NotificationDispatcher,
)
from marketplace_chat.config.settings import Config
from marketplace_chat.domain.entities.events import InterestCreated
from marketplace_chat.domain.entities.interest import Interest
from marketplace_chat.domain.entities.listing import UserRole
from marketplace_chat.domain.exceptions import (
    AccessDeniedError,
    DomainValidationError,
    EntityNotFoundError,
)
from marketplace_chat.domain.ports.repositories import (
    InterestRepository,
    ListingRepository,
    UserRepository,
)
from marketplace_chat.domain.value_objects.listing_id import ListingId
from marketplace_chat.domain.value_objects.user_id import UserId

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ApplyToListingCommand(Command[Interest]):
    listing_id: ListingId
    student_id: UserId
    cover_message: Optional[str] = None


class ApplyToListingHandler(CommandHandler[Interest]):
    def __init__(
        self,
        listing_repo: ListingRepository,
        user_repo: UserRepository,
        interest_repo: InterestRepository,
        dispatcher: NotificationDispatcher,
        cover_max_length: int = Config.COVER_MESSAGE_MAX_LENGTH,
    ):
        self.listing_repo = listing_repo
        self.user_repo = user_repo
        self.interest_repo = interest_repo
        self.dispatcher = dispatcher
        self.cover_max_length = cover_max_length

    async def execute(self, command: ApplyToListingCommand) -> Interest:
        listing = await self.listing_repo.get_by_id(command.listing_id)
        if listing is None:
            raise EntityNotFoundError(f"Listing {command.listing_id.value} not found")
        if not listing.accepts_applications:
            raise DomainValidationError("This listing is not accepting applications")

        profile = await self.user_repo.get_profile(command.student_id)
        if profile is None or profile.role is not UserRole.STUDENT:
            raise AccessDeniedError("Only students can apply to listings")

        cover = (command.cover_message or "").strip()
        if len(cover) > self.cover_max_length:
            raise DomainValidationError(
                f"Cover message is too long (max {self.cover_max_length} characters)"
            )

        existing = await self.interest_repo.get_for_student(
            command.listing_id, command.student_id
        )
        if existing is not None:
            raise DomainValidationError("You have already applied to this listing")

        interest = Interest.create(
            listing_id=command.listing_id,
            student_id=command.student_id,
            cover_message=cover,
        )
        await self.interest_repo.add(interest)
        logger.info(
            f"[Interests] {interest.id.value} created for listing {listing.id.value}"
        )

        await self.dispatcher.notify(
            InterestCreated(
                interest=interest,
                listing=listing,
                student_name=profile.name_or_default,
            )
        )
        return interest
