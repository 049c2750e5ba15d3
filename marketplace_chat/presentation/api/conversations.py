"""
Conversations API Router - messaging between a student and a business about a listing.

Every endpoint re-evaluates the access policy through its handler.

Flow:
  HTTP Request → Router → Command/Query → Handler → AccessPolicy → Repository
                                                           ↓
  HTTP Response ← Router ← DTO ← Result ←
"""

import logging
from typing import Optional

from dishka.integrations.fastapi import FromDishka, inject
from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from marketplace_chat.application.commands.messages import (
    MarkConversationReadCommand,
    MarkConversationReadHandler,
    SendMessageCommand,
    SendMessageHandler,
)
from marketplace_chat.application.dto import (
    AttachmentDTO,
    ConversationSummaryDTO,
    MessageDTO,
)
from marketplace_chat.application.queries.messages import (
    CanMessageHandler,
    CanMessageQuery,
    GetUnreadMessageCountHandler,
    GetUnreadMessageCountQuery,
    ListConversationsHandler,
    ListConversationsQuery,
    ListMessagesHandler,
    ListMessagesQuery,
)
from marketplace_chat.domain.entities.attachment import Attachment
from marketplace_chat.domain.exceptions import DomainValidationError
from marketplace_chat.domain.value_objects.attachment_path import AttachmentPath
from marketplace_chat.domain.value_objects.listing_id import ListingId
from marketplace_chat.domain.value_objects.user_id import UserId
from marketplace_chat.presentation.api.errors import (
    DOMAIN_ERRORS,
    parse_id,
    to_http_exception,
)
from marketplace_chat.presentation.dependencies.auth import AuthUser, get_current_user

logger = logging.getLogger(__name__)


# ==================== REQUEST/RESPONSE MODELS ====================


class SendMessageRequest(BaseModel):
    """Either content, an attachment (from POST /attachments), or both."""

    content: str = ""
    attachment: Optional[AttachmentDTO] = None


class ListMessagesResponse(BaseModel):
    messages: list[MessageDTO]


class ListConversationsResponse(BaseModel):
    conversations: list[ConversationSummaryDTO]


class CanMessageResponse(BaseModel):
    can_message: bool


class MarkReadResponse(BaseModel):
    updated: int


class UnreadCountResponse(BaseModel):
    count: int


# ==================== ROUTERS ====================

router = APIRouter(prefix="/conversations", tags=["conversations"])
messages_router = APIRouter(prefix="/messages", tags=["conversations"])


def _pair(listing_id: str, participant_id: str) -> tuple[ListingId, UserId]:
    return (
        parse_id(ListingId, listing_id, "listing id"),
        parse_id(UserId, participant_id, "participant id"),
    )


# ==================== ENDPOINTS ====================


@router.get("", response_model=ListConversationsResponse)
@inject
async def list_conversations(
    handler: FromDishka[ListConversationsHandler],
    current_user: AuthUser = Depends(get_current_user),
):
    """Inbox: one row per (listing, participant), most recent first."""
    try:
        summaries = await handler.execute(
            ListConversationsQuery(user_id=current_user.user_id)
        )
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e) from e
    return ListConversationsResponse(
        conversations=[ConversationSummaryDTO.from_entity(s) for s in summaries]
    )


@router.get(
    "/{listing_id}/{participant_id}/can-message", response_model=CanMessageResponse
)
@inject
async def can_message(
    listing_id: str,
    participant_id: str,
    handler: FromDishka[CanMessageHandler],
    current_user: AuthUser = Depends(get_current_user),
):
    listing, participant = _pair(listing_id, participant_id)
    allowed = await handler.execute(
        CanMessageQuery(
            listing_id=listing,
            acting_user_id=current_user.user_id,
            other_user_id=participant,
        )
    )
    return CanMessageResponse(can_message=allowed)


@router.get("/{listing_id}/{participant_id}/messages", response_model=ListMessagesResponse)
@inject
async def list_messages(
    listing_id: str,
    participant_id: str,
    handler: FromDishka[ListMessagesHandler],
    current_user: AuthUser = Depends(get_current_user),
):
    listing, participant = _pair(listing_id, participant_id)
    try:
        messages = await handler.execute(
            ListMessagesQuery(
                listing_id=listing,
                user_id=current_user.user_id,
                other_user_id=participant,
            )
        )
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e) from e
    return ListMessagesResponse(messages=[MessageDTO.from_entity(m) for m in messages])


@router.post(
    "/{listing_id}/{participant_id}/messages",
    response_model=MessageDTO,
    status_code=status.HTTP_201_CREATED,
)
@inject
async def send_message(
    listing_id: str,
    participant_id: str,
    request: SendMessageRequest,
    handler: FromDishka[SendMessageHandler],
    current_user: AuthUser = Depends(get_current_user),
):
    listing, participant = _pair(listing_id, participant_id)
    try:
        attachment = None
        if request.attachment is not None:
            attachment = Attachment(
                storage_path=AttachmentPath(request.attachment.path),
                display_name=request.attachment.name,
                mime_type=request.attachment.type,
                byte_size=request.attachment.size,
            )
    except ValueError as e:
        raise to_http_exception(DomainValidationError(str(e))) from e

    try:
        message = await handler.execute(
            SendMessageCommand(
                listing_id=listing,
                sender_id=current_user.user_id,
                receiver_id=participant,
                content=request.content,
                attachment=attachment,
            )
        )
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e) from e
    return MessageDTO.from_entity(message)


@router.post("/{listing_id}/{participant_id}/read", response_model=MarkReadResponse)
@inject
async def mark_conversation_read(
    listing_id: str,
    participant_id: str,
    handler: FromDishka[MarkConversationReadHandler],
    current_user: AuthUser = Depends(get_current_user),
):
    listing, participant = _pair(listing_id, participant_id)
    try:
        updated = await handler.execute(
            MarkConversationReadCommand(
                listing_id=listing,
                reader_id=current_user.user_id,
                other_user_id=participant,
            )
        )
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e) from e
    return MarkReadResponse(updated=updated)


@messages_router.get("/unread-count", response_model=UnreadCountResponse)
@inject
async def unread_message_count(
    handler: FromDishka[GetUnreadMessageCountHandler],
    current_user: AuthUser = Depends(get_current_user),
):
    try:
        count = await handler.execute(
            GetUnreadMessageCountQuery(user_id=current_user.user_id)
        )
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e) from e
    return UnreadCountResponse(count=count)
