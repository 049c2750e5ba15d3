"""
Thread ids group related notifications so they can be dismissed together.

Derived purely from notification type + metadata:
    new_message                          → chat-{listing_id}-{participant_id}
    interest_approved/interest_rejected  → application-{listing_id}
    new_interest                         → interest-{listing_id}
"""

from typing import Any, Mapping, Optional

from marketplace_chat.domain.entities.notification import NotificationType


def chat_thread_id(listing_id: str, participant_id: str) -> str:
    return f"chat-{listing_id}-{participant_id}"


def application_thread_id(listing_id: str) -> str:
    return f"application-{listing_id}"


def interest_thread_id(listing_id: str) -> str:
    return f"interest-{listing_id}"


def thread_id_for(
    type: NotificationType, metadata: Mapping[str, Any]
) -> Optional[str]:
    listing_id = metadata.get("listing_id")
    if not listing_id:
        return None

    if type is NotificationType.NEW_MESSAGE:
        participant_id = metadata.get("participant_id")
        return chat_thread_id(listing_id, participant_id) if participant_id else None
    if type in (NotificationType.INTEREST_APPROVED, NotificationType.INTEREST_REJECTED):
        return application_thread_id(listing_id)
    if type is NotificationType.NEW_INTEREST:
        return interest_thread_id(listing_id)
    return None
