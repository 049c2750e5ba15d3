"""
Listing and UserProfile - read-only views over the marketplace tables.

Listings ("issues" in the product database) are owned by a business profile;
`owner_user_id` is already resolved to the owning business *user*.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from marketplace_chat.domain.value_objects.listing_id import ListingId
from marketplace_chat.domain.value_objects.user_id import UserId


class ListingStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS_ACCEPTING = "in_progress_accepting"
    IN_PROGRESS = "in_progress"
    CLOSED = "closed"


ACCEPTING_APPLICATIONS = (ListingStatus.OPEN, ListingStatus.IN_PROGRESS_ACCEPTING)


@dataclass(frozen=True)
class Listing:
    id: ListingId
    title: str
    status: ListingStatus
    owner_user_id: UserId

    @property
    def accepts_applications(self) -> bool:
        return self.status in ACCEPTING_APPLICATIONS


class UserRole(str, Enum):
    STUDENT = "student"
    BUSINESS = "business"


@dataclass(frozen=True)
class UserProfile:
    id: UserId
    role: UserRole
    display_name: Optional[str] = None

    @property
    def name_or_default(self) -> str:
        if self.display_name:
            return self.display_name
        return "A student" if self.role is UserRole.STUDENT else "A business"
