"""
Listing Repository Port - read access to listings and their owners.
Implementation: marketplace_chat/infrastructure/persistence/prisma_listing_repository.py
"""

from abc import ABC, abstractmethod
from typing import Optional

from marketplace_chat.domain.entities.listing import Listing, ListingStatus
from marketplace_chat.domain.value_objects.listing_id import ListingId


class ListingRepository(ABC):
    @abstractmethod
    async def get_by_id(self, listing_id: ListingId) -> Optional[Listing]: ...

    @abstractmethod
    async def update_status(self, listing_id: ListingId, status: ListingStatus) -> None: ...
