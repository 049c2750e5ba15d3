"""Message commands."""

from .send_message import SendMessageCommand, SendMessageHandler
from .mark_read import MarkConversationReadCommand, MarkConversationReadHandler

__all__ = [
    "SendMessageCommand",
    "SendMessageHandler",
    "MarkConversationReadCommand",
    "MarkConversationReadHandler",
]
