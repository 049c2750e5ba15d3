"""
Interest Entity - A student's application to work on a listing.

Only an APPROVED interest unlocks messaging for the (student, listing) pair.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4

from marketplace_chat.domain.value_objects.interest_id import InterestId
from marketplace_chat.domain.value_objects.listing_id import ListingId
from marketplace_chat.domain.value_objects.user_id import UserId


class InterestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"


@dataclass(frozen=True)
class Interest:
    id: InterestId
    listing_id: ListingId
    student_id: UserId
    status: InterestStatus
    created_at: datetime
    updated_at: datetime
    cover_message: Optional[str] = None

    @classmethod
    def create(
        cls,
        listing_id: ListingId,
        student_id: UserId,
        cover_message: Optional[str] = None,
    ) -> Interest:
        now = datetime.now(timezone.utc)
        return cls(
            id=InterestId(str(uuid4())),
            listing_id=listing_id,
            student_id=student_id,
            status=InterestStatus.PENDING,
            created_at=now,
            updated_at=now,
            cover_message=cover_message or None,
        )

    @property
    def is_approved(self) -> bool:
        return self.status is InterestStatus.APPROVED

    def decide(self, status: InterestStatus) -> Interest:
        """Business decision on a pending application. Terminal states are final."""
        if status not in (InterestStatus.APPROVED, InterestStatus.REJECTED):
            raise ValueError(f"Invalid decision: {status.value}")
        if self.status is not InterestStatus.PENDING:
            raise ValueError(f"Application is already {self.status.value}")
        return replace(self, status=status, updated_at=datetime.now(timezone.utc))
