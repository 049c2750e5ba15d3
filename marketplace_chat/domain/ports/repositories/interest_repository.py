"""
Interest Repository Port - Interface for student applications (issue_interests).
Implementation: marketplace_chat/infrastructure/persistence/prisma_interest_repository.py
"""

from abc import ABC, abstractmethod
from typing import Optional

from marketplace_chat.domain.entities.interest import Interest, InterestStatus
from marketplace_chat.domain.value_objects.interest_id import InterestId
from marketplace_chat.domain.value_objects.listing_id import ListingId
from marketplace_chat.domain.value_objects.user_id import UserId


class InterestRepository(ABC):
    @abstractmethod
    async def get_by_id(self, interest_id: InterestId) -> Optional[Interest]: ...

    @abstractmethod
    async def get_for_student(
        self, listing_id: ListingId, student_id: UserId
    ) -> Optional[Interest]: ...

    @abstractmethod
    async def add(self, interest: Interest) -> None: ...

    @abstractmethod
    async def update_status(self, interest: Interest, expected: InterestStatus) -> bool:
        """Write interest.status only if the stored status is still `expected`."""
