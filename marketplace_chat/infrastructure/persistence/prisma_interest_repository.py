"""
Prisma Interest Repository Implementation.

Table "issue_interests": one row per (issue_id, student_id), enforced by a
unique constraint so concurrent duplicate applications cannot both land.
"""

from typing import Optional

from prisma import Prisma
from prisma.errors import UniqueViolationError
from prisma.models import IssueInterest as PrismaInterest

from marketplace_chat.domain.entities.interest import Interest, InterestStatus
from marketplace_chat.domain.exceptions import DomainValidationError
from marketplace_chat.domain.ports.repositories.interest_repository import (
    InterestRepository,
)
from marketplace_chat.domain.value_objects.interest_id import InterestId
from marketplace_chat.domain.value_objects.listing_id import ListingId
from marketplace_chat.domain.value_objects.user_id import UserId
from marketplace_chat.infrastructure.persistence.errors import storage_errors
from marketplace_chat.infrastructure.retry import read_retry


class PrismaInterestRepository(InterestRepository):
    _prisma: Prisma

    def __init__(self, prisma: Prisma):
        self._prisma = prisma

    def _to_entity(self, record: PrismaInterest) -> Interest:
        return Interest(
            id=InterestId(record.id),
            listing_id=ListingId(record.issue_id),
            student_id=UserId(record.student_id),
            status=InterestStatus(record.status),
            created_at=record.created_at,
            updated_at=record.updated_at,
            cover_message=record.cover_message,
        )

    @read_retry
    @storage_errors
    async def get_by_id(self, interest_id: InterestId) -> Optional[Interest]:
        record = await self._prisma.issueinterest.find_unique(
            where={"id": interest_id.value}
        )
        return self._to_entity(record) if record else None

    @read_retry
    @storage_errors
    async def get_for_student(
        self, listing_id: ListingId, student_id: UserId
    ) -> Optional[Interest]:
        record = await self._prisma.issueinterest.find_first(
            where={"issue_id": listing_id.value, "student_id": student_id.value}
        )
        return self._to_entity(record) if record else None

    @storage_errors
    async def add(self, interest: Interest) -> None:
        try:
            await self._prisma.issueinterest.create(
                data={
                    "id": interest.id.value,
                    "issue_id": interest.listing_id.value,
                    "student_id": interest.student_id.value,
                    "status": interest.status.value,
                    "cover_message": interest.cover_message,
                    "created_at": interest.created_at,
                    "updated_at": interest.updated_at,
                }
            )
        except UniqueViolationError as e:
            raise DomainValidationError(
                "You have already applied to this listing"
            ) from e

    @storage_errors
    async def update_status(self, interest: Interest, expected: InterestStatus) -> bool:
        # Conditional on the current status so concurrent decisions cannot both win
        count = await self._prisma.issueinterest.update_many(
            where={"id": interest.id.value, "status": expected.value},
            data={"status": interest.status.value, "updated_at": interest.updated_at},
        )
        return count > 0
