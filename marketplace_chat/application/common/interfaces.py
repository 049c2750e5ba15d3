"""
Base interfaces for CQRS pattern.

Usage:
    @dataclass(frozen=True)
    class MarkConversationReadCommand(Command[int]):
        listing_id: ListingId
        reader_id: UserId
        other_user_id: UserId

    class MarkConversationReadHandler(CommandHandler[int]):
        def __init__(self, message_repo: MessageRepository):
            self._message_repo = message_repo

        async def execute(self, command: MarkConversationReadCommand) -> int:
            ...
"""
from abc import ABC, abstractmethod
from typing import TypeVar, Generic

T = TypeVar("T")


class Command(ABC, Generic[T]):
    """Base class for write operations"""
    pass


class CommandHandler(ABC, Generic[T]):
    @abstractmethod
    async def execute(self, command: Command[T]) -> T:
        """Execute the command and return a result of type T"""
        ...


class Query(ABC, Generic[T]):
    """Base class for read operations"""
    pass


class QueryHandler(ABC, Generic[T]):
    @abstractmethod
    async def execute(self, query: Query[T]) -> T:
        """Execute the query and return a result of type T"""
        ...
