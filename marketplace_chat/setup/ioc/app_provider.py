"""
Application provider: access policy, dispatcher and command/query handlers.

Everything here is REQUEST-scoped and depends only on the domain ports,
so the same provider runs against production adapters
(infrastructure_provider.py) or in-memory fakes in tests.
"""

from dishka import Provider, Scope, provide

from marketplace_chat.application.commands.attachments import UploadAttachmentHandler
from marketplace_chat.application.commands.interests import (
    ApplyToListingHandler,
    DecideInterestHandler,
)
from marketplace_chat.application.commands.messages import (
    MarkConversationReadHandler,
    SendMessageHandler,
)
from marketplace_chat.application.commands.notifications import (
    DeleteNotificationHandler,
    DismissThreadHandler,
    MarkAllNotificationsReadHandler,
    MarkNotificationReadHandler,
)
from marketplace_chat.application.queries.attachments import GetSignedUrlHandler
from marketplace_chat.application.queries.messages import (
    CanMessageHandler,
    GetUnreadMessageCountHandler,
    ListConversationsHandler,
    ListMessagesHandler,
)
from marketplace_chat.application.queries.notifications import (
    GetUnreadNotificationCountHandler,
    ListNotificationsHandler,
)
from marketplace_chat.application.services.notification_dispatcher import (
    NotificationDispatcher,
)
from marketplace_chat.config.settings import Config
from marketplace_chat.domain.ports import Notifier, ObjectStorage, PresenceStore
from marketplace_chat.domain.ports.repositories import (
    InterestRepository,
    ListingRepository,
    MessageRepository,
    NotificationRepository,
    UserRepository,
)
from marketplace_chat.domain.services.access_policy import AccessPolicy


class AppProvider(Provider):
    """Application services and handlers. Depends on ports only."""

    # ==================== SERVICES ====================

    @provide(scope=Scope.REQUEST)
    def get_access_policy(
        self,
        listing_repository: ListingRepository,
        user_repository: UserRepository,
        interest_repository: InterestRepository,
    ) -> AccessPolicy:
        return AccessPolicy(listing_repository, user_repository, interest_repository)

    @provide(scope=Scope.REQUEST)
    def get_notification_dispatcher(
        self,
        notification_repository: NotificationRepository,
        notifier: Notifier,
        presence: PresenceStore,
    ) -> NotificationDispatcher:
        return NotificationDispatcher(notification_repository, notifier, presence)

    # ==================== MESSAGE HANDLERS ====================

    @provide(scope=Scope.REQUEST)
    def get_send_message_handler(
        self,
        message_repository: MessageRepository,
        user_repository: UserRepository,
        access_policy: AccessPolicy,
        dispatcher: NotificationDispatcher,
    ) -> SendMessageHandler:
        return SendMessageHandler(
            message_repo=message_repository,
            user_repo=user_repository,
            access_policy=access_policy,
            dispatcher=dispatcher,
            max_length=Config.MESSAGE_MAX_LENGTH,
        )

    @provide(scope=Scope.REQUEST)
    def get_mark_read_handler(
        self,
        message_repository: MessageRepository,
        access_policy: AccessPolicy,
        dispatcher: NotificationDispatcher,
    ) -> MarkConversationReadHandler:
        return MarkConversationReadHandler(message_repository, access_policy, dispatcher)

    @provide(scope=Scope.REQUEST)
    def get_list_messages_handler(
        self, message_repository: MessageRepository, access_policy: AccessPolicy
    ) -> ListMessagesHandler:
        return ListMessagesHandler(message_repository, access_policy)

    @provide(scope=Scope.REQUEST)
    def get_can_message_handler(self, access_policy: AccessPolicy) -> CanMessageHandler:
        return CanMessageHandler(access_policy)

    @provide(scope=Scope.REQUEST)
    def get_unread_message_count_handler(
        self, message_repository: MessageRepository
    ) -> GetUnreadMessageCountHandler:
        return GetUnreadMessageCountHandler(message_repository)

    @provide(scope=Scope.REQUEST)
    def get_list_conversations_handler(
        self, message_repository: MessageRepository
    ) -> ListConversationsHandler:
        return ListConversationsHandler(message_repository)

    # ==================== ATTACHMENT HANDLERS ====================

    @provide(scope=Scope.REQUEST)
    def get_upload_attachment_handler(
        self, storage: ObjectStorage
    ) -> UploadAttachmentHandler:
        return UploadAttachmentHandler(storage, Config.MAX_ATTACHMENT_MB)

    @provide(scope=Scope.REQUEST)
    def get_signed_url_handler(self, storage: ObjectStorage) -> GetSignedUrlHandler:
        return GetSignedUrlHandler(storage, Config.ATTACHMENT_BUCKET)

    # ==================== NOTIFICATION HANDLERS ====================

    @provide(scope=Scope.REQUEST)
    def get_list_notifications_handler(
        self, notification_repository: NotificationRepository
    ) -> ListNotificationsHandler:
        return ListNotificationsHandler(
            notification_repository, max_limit=Config.NOTIFICATION_LIST_MAX
        )

    @provide(scope=Scope.REQUEST)
    def get_unread_notification_count_handler(
        self, notification_repository: NotificationRepository
    ) -> GetUnreadNotificationCountHandler:
        return GetUnreadNotificationCountHandler(notification_repository)

    @provide(scope=Scope.REQUEST)
    def get_mark_notification_read_handler(
        self, notification_repository: NotificationRepository
    ) -> MarkNotificationReadHandler:
        return MarkNotificationReadHandler(notification_repository)

    @provide(scope=Scope.REQUEST)
    def get_mark_all_notifications_read_handler(
        self, notification_repository: NotificationRepository
    ) -> MarkAllNotificationsReadHandler:
        return MarkAllNotificationsReadHandler(notification_repository)

    @provide(scope=Scope.REQUEST)
    def get_delete_notification_handler(
        self, notification_repository: NotificationRepository
    ) -> DeleteNotificationHandler:
        return DeleteNotificationHandler(notification_repository)

    @provide(scope=Scope.REQUEST)
    def get_dismiss_thread_handler(
        self, dispatcher: NotificationDispatcher
    ) -> DismissThreadHandler:
        return DismissThreadHandler(dispatcher)

    # ==================== INTEREST HANDLERS ====================

    @provide(scope=Scope.REQUEST)
    def get_apply_to_listing_handler(
        self,
        listing_repository: ListingRepository,
        user_repository: UserRepository,
        interest_repository: InterestRepository,
        dispatcher: NotificationDispatcher,
    ) -> ApplyToListingHandler:
        return ApplyToListingHandler(
            listing_repository,
            user_repository,
            interest_repository,
            dispatcher,
            cover_max_length=Config.COVER_MESSAGE_MAX_LENGTH,
        )

    @provide(scope=Scope.REQUEST)
    def get_decide_interest_handler(
        self,
        interest_repository: InterestRepository,
        listing_repository: ListingRepository,
        dispatcher: NotificationDispatcher,
        send_message_handler: SendMessageHandler,
    ) -> DecideInterestHandler:
        return DecideInterestHandler(
            interest_repository, listing_repository, dispatcher, send_message_handler
        )
