"""
Interests API Router - student applications and the owner's decision.

Approving an application is what opens the conversation between the
student and the business.
"""

import logging
from datetime import datetime
from typing import Literal, Optional

from dishka.integrations.fastapi import FromDishka, inject
from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from marketplace_chat.application.commands.interests import (
    ApplyToListingCommand,
    ApplyToListingHandler,
    DecideInterestCommand,
    DecideInterestHandler,
)
from marketplace_chat.domain.entities.interest import Interest, InterestStatus
from marketplace_chat.domain.value_objects.interest_id import InterestId
from marketplace_chat.domain.value_objects.listing_id import ListingId
from marketplace_chat.presentation.api.errors import (
    DOMAIN_ERRORS,
    parse_id,
    to_http_exception,
)
from marketplace_chat.presentation.dependencies.auth import AuthUser, get_current_user

logger = logging.getLogger(__name__)


# ==================== REQUEST/RESPONSE MODELS ====================


class ApplyRequest(BaseModel):
    cover_message: Optional[str] = None


class DecisionRequest(BaseModel):
    status: Literal["approved", "rejected"]


class InterestResponse(BaseModel):
    id: str
    listing_id: str
    student_id: str
    status: str
    cover_message: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, interest: Interest) -> "InterestResponse":
        return cls(
            id=interest.id.value,
            listing_id=interest.listing_id.value,
            student_id=interest.student_id.value,
            status=interest.status.value,
            cover_message=interest.cover_message,
            created_at=interest.created_at,
            updated_at=interest.updated_at,
        )


# ==================== ROUTERS ====================

listings_router = APIRouter(prefix="/listings", tags=["interests"])
router = APIRouter(prefix="/interests", tags=["interests"])


@listings_router.post(
    "/{listing_id}/interests",
    response_model=InterestResponse,
    status_code=status.HTTP_201_CREATED,
)
@inject
async def apply_to_listing(
    listing_id: str,
    request: ApplyRequest,
    handler: FromDishka[ApplyToListingHandler],
    current_user: AuthUser = Depends(get_current_user),
):
    try:
        interest = await handler.execute(
            ApplyToListingCommand(
                listing_id=parse_id(ListingId, listing_id, "listing id"),
                student_id=current_user.user_id,
                cover_message=request.cover_message,
            )
        )
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e) from e
    return InterestResponse.from_entity(interest)


@router.post("/{interest_id}/decision", response_model=InterestResponse)
@inject
async def decide_interest(
    interest_id: str,
    request: DecisionRequest,
    handler: FromDishka[DecideInterestHandler],
    current_user: AuthUser = Depends(get_current_user),
):
    try:
        interest = await handler.execute(
            DecideInterestCommand(
                interest_id=parse_id(InterestId, interest_id, "interest id"),
                business_user_id=current_user.user_id,
                status=InterestStatus(request.status),
            )
        )
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e) from e
    return InterestResponse.from_entity(interest)
