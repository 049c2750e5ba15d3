"""
REPOSITORY PORTS - Data persistence interfaces

Each repository port:
- Is an abstract base class (ABC)
- Defines methods the core needs
- Does NOT specify implementation (Prisma, SQLAlchemy, etc.)

Infrastructure layer provides implementations.
"""

from marketplace_chat.domain.ports.repositories.message_repository import (
    MessageRepository,
)
from marketplace_chat.domain.ports.repositories.interest_repository import (
    InterestRepository,
)
from marketplace_chat.domain.ports.repositories.listing_repository import (
    ListingRepository,
)
from marketplace_chat.domain.ports.repositories.user_repository import UserRepository
from marketplace_chat.domain.ports.repositories.notification_repository import (
    NotificationRepository,
)

__all__ = [
    "MessageRepository",
    "InterestRepository",
    "ListingRepository",
    "UserRepository",
    "NotificationRepository",
]
