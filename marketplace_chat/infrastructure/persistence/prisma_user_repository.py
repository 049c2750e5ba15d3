"""
Prisma User Repository Implementation.

Display names come from the role-specific profile: a student's full_name or
a business's business_name.
"""

from typing import Optional

from prisma import Prisma
from prisma.models import User as PrismaUser

from marketplace_chat.domain.entities.listing import UserProfile, UserRole
from marketplace_chat.domain.ports.repositories.user_repository import UserRepository
from marketplace_chat.domain.value_objects.user_id import UserId
from marketplace_chat.infrastructure.persistence.errors import storage_errors
from marketplace_chat.infrastructure.retry import read_retry


class PrismaUserRepository(UserRepository):
    _prisma: Prisma

    def __init__(self, prisma: Prisma):
        self._prisma = prisma

    def _to_entity(self, record: PrismaUser) -> UserProfile:
        role = UserRole(record.role)
        display_name = None
        if role is UserRole.STUDENT and record.student_profile:
            display_name = record.student_profile.full_name
        elif role is UserRole.BUSINESS and record.business_profile:
            display_name = record.business_profile.business_name
        return UserProfile(id=UserId(record.id), role=role, display_name=display_name)

    @read_retry
    @storage_errors
    async def get_profile(self, user_id: UserId) -> Optional[UserProfile]:
        record = await self._prisma.user.find_unique(
            where={"id": user_id.value},
            include={"student_profile": True, "business_profile": True},
        )
        return self._to_entity(record) if record else None
