"""
Domain events that produce notifications.

Each event is emitted exactly once by the single write path that commits it.
"""

from dataclasses import dataclass

from marketplace_chat.domain.entities.interest import Interest
from marketplace_chat.domain.entities.listing import Listing
from marketplace_chat.domain.entities.message import Message


@dataclass(frozen=True)
class NewMessage:
    message: Message
    sender_name: str


@dataclass(frozen=True)
class InterestCreated:
    interest: Interest
    listing: Listing
    student_name: str


@dataclass(frozen=True)
class InterestApproved:
    interest: Interest
    listing: Listing


@dataclass(frozen=True)
class InterestRejected:
    interest: Interest
    listing: Listing


DomainEvent = NewMessage | InterestCreated | InterestApproved | InterestRejected
