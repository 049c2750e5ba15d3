"""
Access Policy - who may exchange messages with whom about a listing.

The rule is derived from live data on every call and never cached:
an interest can be approved, rejected or auto-rejected (listing closed)
between two messages.

    business owner → other must be a student with an APPROVED interest
    student        → must hold an APPROVED interest AND other must be the owner
    anything else  → denied

Lookup failures deny. They are logged, never raised, so callers cannot
tell "listing does not exist" from "not allowed".
"""

import logging
from typing import Optional

from marketplace_chat.domain.entities.listing import UserRole
from marketplace_chat.domain.ports.repositories import (
    InterestRepository,
    ListingRepository,
    UserRepository,
)
from marketplace_chat.domain.value_objects.listing_id import ListingId
from marketplace_chat.domain.value_objects.user_id import UserId

logger = logging.getLogger(__name__)


def decide_access(
    owner_id: Optional[UserId],
    acting_user_id: UserId,
    other_user_id: UserId,
    acting_is_approved_student: bool,
    other_is_approved_student: bool,
) -> bool:
    """Pure pairing rule once the three lookups are resolved."""
    if owner_id is None or acting_user_id == other_user_id:
        return False
    if acting_user_id == owner_id:
        return other_is_approved_student
    return acting_is_approved_student and other_user_id == owner_id


class AccessPolicy:
    def __init__(
        self,
        listing_repo: ListingRepository,
        user_repo: UserRepository,
        interest_repo: InterestRepository,
    ):
        self._listing_repo = listing_repo
        self._user_repo = user_repo
        self._interest_repo = interest_repo

    async def can_message(
        self,
        listing_id: ListingId,
        acting_user_id: UserId,
        other_user_id: UserId,
    ) -> bool:
        try:
            listing = await self._listing_repo.get_by_id(listing_id)
            if listing is None:
                return False
            owner_id = listing.owner_user_id

            if acting_user_id == owner_id:
                other_ok = await self._is_approved_student(listing_id, other_user_id)
                return decide_access(
                    owner_id, acting_user_id, other_user_id, False, other_ok
                )

            acting_ok = await self._is_approved_student(listing_id, acting_user_id)
            return decide_access(
                owner_id, acting_user_id, other_user_id, acting_ok, False
            )
        except Exception as e:
            logger.warning(
                f"[AccessPolicy] Lookup failed for listing {listing_id.value}, denying: {e}"
            )
            return False

    async def _is_approved_student(self, listing_id: ListingId, user_id: UserId) -> bool:
        profile = await self._user_repo.get_profile(user_id)
        if profile is None or profile.role is not UserRole.STUDENT:
            return False
        interest = await self._interest_repo.get_for_student(listing_id, user_id)
        return interest is not None and interest.is_approved
