"""
API Routers - FastAPI endpoint definitions.
"""

from marketplace_chat.presentation.api.conversations import (
    router as conversations_router,
    messages_router,
)
from marketplace_chat.presentation.api.attachments import router as attachments_router
from marketplace_chat.presentation.api.notifications import (
    router as notifications_router,
)
from marketplace_chat.presentation.api.interests import (
    router as interests_router,
    listings_router,
)
from marketplace_chat.presentation.api.presence import router as presence_router
from marketplace_chat.presentation.api.realtime import router as realtime_router
from marketplace_chat.presentation.api.metrics import router as metrics_router

__all__ = [
    "conversations_router",
    "messages_router",
    "attachments_router",
    "notifications_router",
    "interests_router",
    "listings_router",
    "presence_router",
    "realtime_router",
    "metrics_router",
]
