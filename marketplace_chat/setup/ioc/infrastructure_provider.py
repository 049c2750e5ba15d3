"""
Infrastructure provider: concrete adapters behind the domain ports
(Prisma, Redis, Supabase Storage, PostgreSQL change feed).

APP-scoped clients are created once, on first use, and closed with the
container. Repositories are REQUEST-scoped.

Flow:
  Container → provides → PrismaMessageRepository → as → MessageRepository → to → SendMessageHandler
"""

from typing import AsyncIterable

from dishka import Provider, Scope, provide
from prisma import Prisma
from redis.asyncio import Redis
from supabase import AsyncClient

from marketplace_chat.config.settings import Config
from marketplace_chat.domain.ports import (
    ChangeFeed,
    Notifier,
    ObjectStorage,
    PresenceStore,
)
from marketplace_chat.domain.ports.repositories import (
    InterestRepository,
    ListingRepository,
    MessageRepository,
    NotificationRepository,
    UserRepository,
)
from marketplace_chat.infrastructure.cache import (
    RedisPresenceStore,
    close_redis_client,
    create_redis_client,
)
from marketplace_chat.infrastructure.notifier import RedisPushOutbox
from marketplace_chat.infrastructure.persistence import (
    PrismaInterestRepository,
    PrismaListingRepository,
    PrismaMessageRepository,
    PrismaNotificationRepository,
    PrismaUserRepository,
)
from marketplace_chat.infrastructure.realtime import PostgresChangeFeed
from marketplace_chat.infrastructure.storage import (
    SupabaseObjectStorage,
    create_supabase_client,
)


class InfrastructureProvider(Provider):
    """Concrete adapters for the domain ports."""

    # ==================== DATABASE ====================

    @provide(scope=Scope.APP)
    async def get_prisma(self) -> AsyncIterable[Prisma]:
        """
        Provide Prisma client (singleton, app-scoped).

        Connected on first use, disconnected when the container closes.
        """
        prisma = Prisma()
        await prisma.connect()
        yield prisma
        await prisma.disconnect()

    @provide(scope=Scope.APP)
    async def get_change_feed(self) -> AsyncIterable[ChangeFeed]:
        feed = PostgresChangeFeed(
            database_url=Config.DATABASE_URL,
            channel=Config.CHANGE_FEED_CHANNEL,
            reconnect_seconds=Config.CHANGE_FEED_RECONNECT_SECONDS,
            queue_size=Config.CHANGE_FEED_QUEUE_SIZE,
        )
        feed.start()
        yield feed
        await feed.close()

    # ==================== REDIS ====================

    @provide(scope=Scope.APP)
    async def get_redis(self) -> AsyncIterable[Redis]:
        client = await create_redis_client()
        yield client
        await close_redis_client(client)

    @provide(scope=Scope.APP)
    def get_presence_store(self, redis: Redis) -> PresenceStore:
        return RedisPresenceStore(redis, ttl_seconds=Config.PRESENCE_TTL_SECONDS)

    @provide(scope=Scope.APP)
    def get_notifier(self, redis: Redis) -> Notifier:
        return RedisPushOutbox(redis, ttl_seconds=Config.PUSH_OUTBOX_TTL_SECONDS)

    # ==================== OBJECT STORAGE ====================

    @provide(scope=Scope.APP)
    async def get_supabase(self) -> AsyncClient:
        return await create_supabase_client()

    @provide(scope=Scope.APP)
    def get_object_storage(self, client: AsyncClient) -> ObjectStorage:
        return SupabaseObjectStorage(client, bucket=Config.ATTACHMENT_BUCKET)

    # ==================== REPOSITORIES ====================

    @provide(scope=Scope.REQUEST)
    def get_message_repository(self, prisma: Prisma) -> MessageRepository:
        """
        - Return type is ABSTRACT (MessageRepository)
        - Implementation is CONCRETE (PrismaMessageRepository)
        - Scope.REQUEST = new instance per HTTP request / socket
        """
        return PrismaMessageRepository(prisma)

    @provide(scope=Scope.REQUEST)
    def get_interest_repository(self, prisma: Prisma) -> InterestRepository:
        return PrismaInterestRepository(prisma)

    @provide(scope=Scope.REQUEST)
    def get_listing_repository(self, prisma: Prisma) -> ListingRepository:
        return PrismaListingRepository(prisma)

    @provide(scope=Scope.REQUEST)
    def get_user_repository(self, prisma: Prisma) -> UserRepository:
        return PrismaUserRepository(prisma)

    @provide(scope=Scope.REQUEST)
    def get_notification_repository(self, prisma: Prisma) -> NotificationRepository:
        return PrismaNotificationRepository(prisma)
