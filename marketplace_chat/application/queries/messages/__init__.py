"""Message queries."""

from .list_messages import ListMessagesQuery, ListMessagesHandler
from .can_message import CanMessageQuery, CanMessageHandler
from .unread_count import GetUnreadMessageCountQuery, GetUnreadMessageCountHandler
from .list_conversations import ListConversationsQuery, ListConversationsHandler

__all__ = [
    "ListMessagesQuery",
    "ListMessagesHandler",
    "CanMessageQuery",
    "CanMessageHandler",
    "GetUnreadMessageCountQuery",
    "GetUnreadMessageCountHandler",
    "ListConversationsQuery",
    "ListConversationsHandler",
]
