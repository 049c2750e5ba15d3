"""
ListingId Value Object - UUID wrapper.
"""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class ListingId:
    value: str

    def __post_init__(self):
        if not self.value:
            raise ValueError("Listing ID cannot be empty")
        UUID(self.value)  # raises ValueError if invalid UUID

    def __str__(self) -> str:
        return self.value
