"""
MessageId Value Object - time-ordered UUID (version 7) for message identity.

Version 7 UUIDs start with a 48-bit millisecond timestamp, so the string
form sorts in creation order. That makes (created_at, id) a total order
that agrees with insertion order for messages created in the same
millisecond by one process.
"""

import os
import time
from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, order=True)
class MessageId:
    value: str  # message_id, presented as UUID string

    def __post_init__(self):
        if not self.value:
            raise ValueError("Message ID cannot be empty")
        UUID(self.value)  # raises ValueError if invalid UUID

    def __str__(self) -> str:
        return self.value

    @classmethod
    def generate(cls) -> "MessageId":
        millis = time.time_ns() // 1_000_000
        rand = int.from_bytes(os.urandom(10), "big")
        value = (millis & 0xFFFF_FFFF_FFFF) << 80
        value |= 0x7 << 76  # version
        value |= ((rand >> 62) & 0xFFF) << 64  # rand_a
        value |= 0b10 << 62  # RFC 4122 variant
        value |= rand & 0x3FFF_FFFF_FFFF_FFFF  # rand_b
        return cls(str(UUID(int=value)))
