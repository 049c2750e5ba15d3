"""
Persistence Layer - Database implementations.

Contains Prisma repository implementations for domain ports.
"""

from marketplace_chat.infrastructure.persistence.prisma_message_repository import (
    PrismaMessageRepository,
)
from marketplace_chat.infrastructure.persistence.prisma_interest_repository import (
    PrismaInterestRepository,
)
from marketplace_chat.infrastructure.persistence.prisma_listing_repository import (
    PrismaListingRepository,
)
from marketplace_chat.infrastructure.persistence.prisma_user_repository import (
    PrismaUserRepository,
)
from marketplace_chat.infrastructure.persistence.prisma_notification_repository import (
    PrismaNotificationRepository,
)

__all__ = [
    "PrismaMessageRepository",
    "PrismaInterestRepository",
    "PrismaListingRepository",
    "PrismaUserRepository",
    "PrismaNotificationRepository",
]
