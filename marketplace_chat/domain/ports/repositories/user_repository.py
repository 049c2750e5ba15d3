"""
User Repository Port - read access to user roles and display names.
Implementation: marketplace_chat/infrastructure/persistence/prisma_user_repository.py
"""

from abc import ABC, abstractmethod
from typing import Optional

from marketplace_chat.domain.entities.listing import UserProfile
from marketplace_chat.domain.value_objects.user_id import UserId


class UserRepository(ABC):
    @abstractmethod
    async def get_profile(self, user_id: UserId) -> Optional[UserProfile]: ...
