"""
Prisma Listing Repository Implementation.

Listings live in the "issues" table and are owned by a business profile;
the owning business *user* is resolved through that profile.
"""

from typing import Optional

from prisma import Prisma
from prisma.models import Issue as PrismaIssue

from marketplace_chat.domain.entities.listing import Listing, ListingStatus
from marketplace_chat.domain.ports.repositories.listing_repository import (
    ListingRepository,
)
from marketplace_chat.domain.value_objects.listing_id import ListingId
from marketplace_chat.domain.value_objects.user_id import UserId
from marketplace_chat.infrastructure.persistence.errors import storage_errors
from marketplace_chat.infrastructure.retry import read_retry


class PrismaListingRepository(ListingRepository):
    _prisma: Prisma

    def __init__(self, prisma: Prisma):
        self._prisma = prisma

    def _to_entity(self, record: PrismaIssue) -> Optional[Listing]:
        if record.business is None:
            return None
        return Listing(
            id=ListingId(record.id),
            title=record.title,
            status=ListingStatus(record.status),
            owner_user_id=UserId(record.business.user_id),
        )

    @read_retry
    @storage_errors
    async def get_by_id(self, listing_id: ListingId) -> Optional[Listing]:
        record = await self._prisma.issue.find_unique(
            where={"id": listing_id.value},
            include={"business": True},
        )
        return self._to_entity(record) if record else None

    @storage_errors
    async def update_status(self, listing_id: ListingId, status: ListingStatus) -> None:
        await self._prisma.issue.update(
            where={"id": listing_id.value},
            data={"status": status.value},
        )
