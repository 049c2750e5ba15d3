"""
Presence API Router - the client shell reports whether it is in the foreground.

Foreground clients get in-app notifications only; everyone else also gets a
push. Reports expire after Config.PRESENCE_TTL_SECONDS, so clients re-send
while they stay in the foreground.
"""

import logging
from typing import Literal

from dishka.integrations.fastapi import FromDishka, inject
from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from marketplace_chat.config.settings import Config
from marketplace_chat.domain.ports.presence import DeliveryContext, PresenceStore
from marketplace_chat.presentation.dependencies.auth import AuthUser, get_current_user

logger = logging.getLogger(__name__)


class PresenceRequest(BaseModel):
    state: Literal["foreground", "background"]


class PresenceResponse(BaseModel):
    state: str
    ttl_seconds: int


router = APIRouter(prefix="/presence", tags=["presence"])


@router.put("", response_model=PresenceResponse, status_code=status.HTTP_200_OK)
@inject
async def report_presence(
    request: PresenceRequest,
    presence: FromDishka[PresenceStore],
    current_user: AuthUser = Depends(get_current_user),
):
    context = DeliveryContext(request.state)
    await presence.report(current_user.user_id, context)
    return PresenceResponse(state=context.value, ttl_seconds=Config.PRESENCE_TTL_SECONDS)
