"""
Notifications API Router - the user's in-app notification list.

All operations are scoped to the authenticated user; another user's
notification id behaves exactly like an unknown id (404).
"""

import logging

from dishka.integrations.fastapi import FromDishka, inject
from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from marketplace_chat.application.commands.notifications import (
    DeleteNotificationCommand,
    DeleteNotificationHandler,
    DismissThreadCommand,
    DismissThreadHandler,
    MarkAllNotificationsReadCommand,
    MarkAllNotificationsReadHandler,
    MarkNotificationReadCommand,
    MarkNotificationReadHandler,
)
from marketplace_chat.application.dto import NotificationDTO
from marketplace_chat.application.queries.notifications import (
    GetUnreadNotificationCountHandler,
    GetUnreadNotificationCountQuery,
    ListNotificationsHandler,
    ListNotificationsQuery,
)
from marketplace_chat.config.settings import Config
from marketplace_chat.domain.value_objects.notification_id import NotificationId
from marketplace_chat.presentation.api.errors import (
    DOMAIN_ERRORS,
    parse_id,
    to_http_exception,
)
from marketplace_chat.presentation.dependencies.auth import AuthUser, get_current_user

logger = logging.getLogger(__name__)


# ==================== RESPONSE MODELS ====================


class ListNotificationsResponse(BaseModel):
    notifications: list[NotificationDTO]


class UnreadCountResponse(BaseModel):
    count: int


class SuccessResponse(BaseModel):
    success: bool


class UpdatedResponse(BaseModel):
    updated: int


class DismissedResponse(BaseModel):
    dismissed: int


# ==================== ROUTER ====================

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=ListNotificationsResponse)
@inject
async def list_notifications(
    handler: FromDishka[ListNotificationsHandler],
    limit: int = Query(Config.NOTIFICATION_LIST_LIMIT, ge=1),
    current_user: AuthUser = Depends(get_current_user),
):
    """Newest first. `limit` is capped at Config.NOTIFICATION_LIST_MAX."""
    try:
        notifications = await handler.execute(
            ListNotificationsQuery(user_id=current_user.user_id, limit=limit)
        )
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e) from e
    return ListNotificationsResponse(
        notifications=[NotificationDTO.from_entity(n) for n in notifications]
    )


@router.get("/unread-count", response_model=UnreadCountResponse)
@inject
async def unread_notification_count(
    handler: FromDishka[GetUnreadNotificationCountHandler],
    current_user: AuthUser = Depends(get_current_user),
):
    try:
        count = await handler.execute(
            GetUnreadNotificationCountQuery(user_id=current_user.user_id)
        )
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e) from e
    return UnreadCountResponse(count=count)


@router.post("/read-all", response_model=UpdatedResponse)
@inject
async def mark_all_notifications_read(
    handler: FromDishka[MarkAllNotificationsReadHandler],
    current_user: AuthUser = Depends(get_current_user),
):
    try:
        updated = await handler.execute(
            MarkAllNotificationsReadCommand(user_id=current_user.user_id)
        )
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e) from e
    return UpdatedResponse(updated=updated)


@router.post("/threads/{thread_id}/dismiss", response_model=DismissedResponse)
@inject
async def dismiss_thread(
    thread_id: str,
    handler: FromDishka[DismissThreadHandler],
    current_user: AuthUser = Depends(get_current_user),
):
    """Retract pending pushes of a thread (e.g. `chat-{listing}-{participant}`)."""
    dismissed = await handler.execute(
        DismissThreadCommand(user_id=current_user.user_id, thread_id=thread_id)
    )
    return DismissedResponse(dismissed=dismissed)


@router.post("/{notification_id}/read", response_model=SuccessResponse)
@inject
async def mark_notification_read(
    notification_id: str,
    handler: FromDishka[MarkNotificationReadHandler],
    current_user: AuthUser = Depends(get_current_user),
):
    try:
        await handler.execute(
            MarkNotificationReadCommand(
                notification_id=parse_id(
                    NotificationId, notification_id, "notification id"
                ),
                user_id=current_user.user_id,
            )
        )
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e) from e
    return SuccessResponse(success=True)


@router.delete(
    "/{notification_id}",
    response_model=SuccessResponse,
    status_code=status.HTTP_200_OK,
)
@inject
async def delete_notification(
    notification_id: str,
    handler: FromDishka[DeleteNotificationHandler],
    current_user: AuthUser = Depends(get_current_user),
):
    try:
        await handler.execute(
            DeleteNotificationCommand(
                notification_id=parse_id(
                    NotificationId, notification_id, "notification id"
                ),
                user_id=current_user.user_id,
            )
        )
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e) from e
    return SuccessResponse(success=True)
