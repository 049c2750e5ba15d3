"""
PORTS - Interfaces that infrastructure implements

A "port" is an abstract interface that defines WHAT the core needs,
without specifying HOW it's done.

Subfolders:
- repositories/      → Data persistence interfaces (Prisma)
- (root files)       → Other external collaborators:
    object_storage.py   → private attachment bucket (Supabase Storage)
    change_feed.py      → row change subscription (Postgres LISTEN/NOTIFY)
    notifier.py         → background push scheduling (Redis outbox)
    presence.py         → client delivery context (Redis)
"""

from marketplace_chat.domain.ports.object_storage import ObjectStorage
from marketplace_chat.domain.ports.change_feed import (
    ChangeEvent,
    ChangeFeed,
    ChangeHandler,
    ChangeType,
    Subscription,
)
from marketplace_chat.domain.ports.notifier import Notifier
from marketplace_chat.domain.ports.presence import DeliveryContext, PresenceStore

__all__ = [
    "ObjectStorage",
    "ChangeEvent",
    "ChangeFeed",
    "ChangeHandler",
    "ChangeType",
    "Subscription",
    "Notifier",
    "DeliveryContext",
    "PresenceStore",
]
