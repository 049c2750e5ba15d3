"""Domain services - business rules that span several entities."""

from marketplace_chat.domain.services.access_policy import AccessPolicy, decide_access
from marketplace_chat.domain.services.thread_ids import (
    chat_thread_id,
    thread_id_for,
)

__all__ = [
    "AccessPolicy",
    "decide_access",
    "chat_thread_id",
    "thread_id_for",
]
