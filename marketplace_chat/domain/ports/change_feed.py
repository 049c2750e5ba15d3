"""
Change Feed Port - row-level change subscription on the durable store.
Implementation: marketplace_chat/infrastructure/realtime/postgres_change_feed.py

Delivery is at-least-once and unordered; consumers deduplicate by id.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Optional


class ChangeType(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    type: ChangeType
    record: dict[str, Any] = field(default_factory=dict)
    old_record: Optional[dict[str, Any]] = None
    # Row was too large for one notification; `record` lacks large columns
    truncated: bool = False

    def matches(self, column: str, value: str) -> bool:
        row = self.record if self.type is not ChangeType.DELETE else (self.old_record or {})
        return str(row.get(column)) == value


ChangeHandler = Callable[[ChangeEvent], Awaitable[None]]


class Subscription(ABC):
    @property
    @abstractmethod
    def active(self) -> bool: ...

    @abstractmethod
    async def unsubscribe(self) -> None:
        """Release the subscription. Idempotent; no handler call happens afterwards."""
        ...


class ChangeFeed(ABC):
    @abstractmethod
    async def subscribe(
        self, table: str, column: str, value: str, handler: ChangeHandler
    ) -> Subscription:
        """Deliver changes on `table` whose `column` equals `value` to `handler`."""
        ...
