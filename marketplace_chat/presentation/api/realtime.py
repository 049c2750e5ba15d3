"""
Realtime WebSocket Router.

- WS /ws/conversations/{listing_id}/{participant_id}?token=<jwt>
    One ConversationSyncEngine per connection. The server pushes
        {"type": "snapshot", "messages": [...]}
    after the initial load and after every merge. The client may send
        {"type": "send", "content": "...", "attachment": {...} | null}
    Errors come back as {"type": "error", "status": <http code>, "detail": "..."}.

- WS /ws/notifications?token=<jwt>
    Streams {"type": "notification", "event": "INSERT"|"UPDATE", "notification": {...}}
    for the authenticated user.

Request-scoped dependencies are resolved from a child of the app container
that stays open for the lifetime of the socket.
"""

import json
import logging

from dishka import AsyncContainer
from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from marketplace_chat.application.commands.messages import (
    MarkConversationReadHandler,
    SendMessageHandler,
)
from marketplace_chat.application.dto import AttachmentDTO, MessageDTO, NotificationDTO
from marketplace_chat.application.queries.messages import ListMessagesHandler
from marketplace_chat.application.realtime import ConversationSyncEngine, NotificationFeed
from marketplace_chat.domain.entities.attachment import Attachment
from marketplace_chat.domain.entities.message import Message
from marketplace_chat.domain.entities.notification import Notification
from marketplace_chat.domain.exceptions import AccessDeniedError
from marketplace_chat.domain.ports.change_feed import ChangeFeed, ChangeType
from marketplace_chat.domain.value_objects.attachment_path import AttachmentPath
from marketplace_chat.domain.value_objects.listing_id import ListingId
from marketplace_chat.domain.value_objects.user_id import UserId
from marketplace_chat.presentation.api.errors import DOMAIN_ERRORS, status_for
from marketplace_chat.presentation.dependencies.auth import (
    AuthUser,
    InvalidTokenError,
    decode_token,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ws", tags=["realtime"])


async def _authenticate(websocket: WebSocket, token: str) -> AuthUser | None:
    try:
        return decode_token(token)
    except InvalidTokenError as e:
        logger.info(f"[WS] Rejected handshake: {e}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return None


def _container(websocket: WebSocket) -> AsyncContainer:
    return websocket.app.state.dishka_container


async def _send_error(websocket: WebSocket, error: Exception) -> None:
    await websocket.send_json(
        {"type": "error", "status": status_for(error), "detail": str(error)}
    )


def _attachment_from(payload) -> Attachment | None:
    if not payload:
        return None
    dto = AttachmentDTO.model_validate(payload)
    return Attachment(
        storage_path=AttachmentPath(dto.path),
        display_name=dto.name,
        mime_type=dto.type,
        byte_size=dto.size,
    )


@router.websocket("/conversations/{listing_id}/{participant_id}")
async def conversation_socket(
    websocket: WebSocket, listing_id: str, participant_id: str, token: str = ""
):
    user = await _authenticate(websocket, token)
    if user is None:
        return
    try:
        listing = ListingId(listing_id)
        participant = UserId(participant_id)
    except ValueError:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()

    async with _container(websocket)() as container:
        engine = ConversationSyncEngine(
            listing_id=listing,
            local_user_id=user.user_id,
            other_user_id=participant,
            change_feed=await container.get(ChangeFeed),
            list_messages=await container.get(ListMessagesHandler),
            mark_read=await container.get(MarkConversationReadHandler),
            send_message=await container.get(SendMessageHandler),
        )

        async def push_snapshot(messages: list[Message]) -> None:
            await websocket.send_json(
                {
                    "type": "snapshot",
                    "messages": [
                        MessageDTO.from_entity(m).model_dump(mode="json")
                        for m in messages
                    ],
                }
            )

        engine.on_change(push_snapshot)
        try:
            await engine.start()
        except DOMAIN_ERRORS as e:
            await _send_error(websocket, e)
            code = (
                status.WS_1008_POLICY_VIOLATION
                if isinstance(e, AccessDeniedError)
                else status.WS_1011_INTERNAL_ERROR
            )
            await websocket.close(code=code)
            return

        try:
            while True:
                raw = await websocket.receive_text()
                try:
                    data = json.loads(raw)
                except json.JSONDecodeError:
                    await websocket.send_json(
                        {"type": "error", "status": 400, "detail": "Invalid JSON"}
                    )
                    continue
                if not isinstance(data, dict) or data.get("type") != "send":
                    continue
                try:
                    await engine.send(
                        str(data.get("content") or ""),
                        _attachment_from(data.get("attachment")),
                    )
                except DOMAIN_ERRORS as e:
                    await _send_error(websocket, e)
                except ValueError as e:
                    await websocket.send_json(
                        {"type": "error", "status": 422, "detail": str(e)}
                    )
        except WebSocketDisconnect:
            logger.debug(f"[WS] Conversation socket closed on {listing.value}")
        finally:
            await engine.detach()


@router.websocket("/notifications")
async def notification_socket(websocket: WebSocket, token: str = ""):
    user = await _authenticate(websocket, token)
    if user is None:
        return
    await websocket.accept()

    feed = NotificationFeed(user.user_id, await _container(websocket).get(ChangeFeed))

    async def push(event: ChangeType, notification: Notification) -> None:
        await websocket.send_json(
            {
                "type": "notification",
                "event": event.value,
                "notification": NotificationDTO.from_entity(notification).model_dump(
                    mode="json"
                ),
            }
        )

    await feed.start(push)
    try:
        while True:
            # Client messages are ignored; receiving detects the disconnect
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.debug("[WS] Notification socket closed")
    finally:
        await feed.stop()
