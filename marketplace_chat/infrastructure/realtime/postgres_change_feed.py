"""
PostgresChangeFeed - ChangeFeed over PostgreSQL LISTEN/NOTIFY.

A row trigger (prisma/sql/row_change_feed.sql) publishes every INSERT,
UPDATE and DELETE on "messages" and "notifications" to one channel as JSON:

    {"table": "messages", "type": "INSERT", "record": {...},
     "old_record": {...} | null, "truncated": false}

One dedicated psycopg connection per process LISTENs on the channel and
fans notifications out to the in-process subscriptions whose filter
matches. Filtering is client-side; the channel carries every row change.

Delivery guarantees:
- Each subscription has its own bounded queue and worker task, so a slow
  handler delays only its own events. The listener never awaits handlers.
- Within a subscription, events are handled one at a time in arrival order.
- A subscription whose queue fills up loses its backlog and receives one
  synthetic truncated event instead, so the consumer re-fetches.
- After a reconnect, events sent while disconnected are gone. Every live
  subscription then receives a synthetic truncated event as well.
"""

import asyncio
import json
import logging
from typing import Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import psycopg
from psycopg import sql

from marketplace_chat.config.settings import Config
from marketplace_chat.domain.ports.change_feed import (
    ChangeEvent,
    ChangeFeed,
    ChangeHandler,
    ChangeType,
    Subscription,
)
from marketplace_chat.observability.metrics import (
    MetricsErrorType,
    decrement_active_subscriptions,
    increment_active_subscriptions,
    increment_error,
    increment_feed_event,
)

logger = logging.getLogger(__name__)

# Prisma-only connection string parameters that libpq rejects
_PRISMA_ONLY_PARAMS = {"schema", "connection_limit", "pool_timeout", "pgbouncer"}


def libpq_dsn(database_url: str) -> str:
    parts = urlsplit(database_url)
    query = [(k, v) for k, v in parse_qsl(parts.query) if k not in _PRISMA_ONLY_PARAMS]
    return urlunsplit(parts._replace(query=urlencode(query)))


def parse_payload(payload: str) -> Optional[ChangeEvent]:
    try:
        data = json.loads(payload)
        return ChangeEvent(
            table=data["table"],
            type=ChangeType(data["type"]),
            record=data.get("record") or {},
            old_record=data.get("old_record"),
            truncated=bool(data.get("truncated", False)),
        )
    except (ValueError, KeyError, TypeError) as e:
        logger.warning(f"[ChangeFeed] Dropping unparseable payload: {e}")
        return None


def resync_event(table: str) -> ChangeEvent:
    return ChangeEvent(table=table, type=ChangeType.UPDATE, truncated=True)


class _PgSubscription(Subscription):
    def __init__(
        self,
        feed: "PostgresChangeFeed",
        table: str,
        column: str,
        value: str,
        handler: ChangeHandler,
        queue_size: int,
    ):
        self._feed = feed
        self.table = table
        self.column = column
        self.value = value
        self.handler = handler
        self._active = True
        self._queue: asyncio.Queue[ChangeEvent] = asyncio.Queue(maxsize=max(1, queue_size))
        self._worker = asyncio.create_task(self._work(), name=f"change-feed-{table}")

    @property
    def active(self) -> bool:
        return self._active

    def wants(self, event: ChangeEvent) -> bool:
        if not self._active or event.table != self.table:
            return False
        return event.matches(self.column, self.value)

    def enqueue(self, event: ChangeEvent) -> None:
        if not self._active:
            return
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            dropped = self._discard_backlog()
            increment_error(MetricsErrorType.FEED_CONSUMER_LAGGING)
            logger.warning(
                f"[ChangeFeed] Subscriber on {self.table} fell behind, "
                f"dropped {dropped} event(s) and sent a resync"
            )
            self._queue.put_nowait(resync_event(self.table))

    async def join(self) -> None:
        """Wait until every queued event has been handled."""
        await self._queue.join()

    async def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        self._feed._remove(self)
        # A handler may unsubscribe itself; its worker then exits after the handler returns
        if self._worker is not asyncio.current_task():
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
        self._discard_backlog()

    async def _work(self) -> None:
        while self._active:
            event = await self._queue.get()
            try:
                if self._active:
                    await self.handler(event)
            except Exception as e:
                increment_error(MetricsErrorType.FEED_HANDLER_FAILED)
                logger.error(f"[ChangeFeed] Handler for {self.table} failed: {e}")
            finally:
                self._queue.task_done()

    def _discard_backlog(self) -> int:
        dropped = 0
        while True:
            try:
                self._queue.get_nowait()
            except asyncio.QueueEmpty:
                return dropped
            self._queue.task_done()
            dropped += 1


class PostgresChangeFeed(ChangeFeed):
    def __init__(
        self,
        database_url: str = Config.DATABASE_URL,
        channel: str = Config.CHANGE_FEED_CHANNEL,
        reconnect_seconds: float = Config.CHANGE_FEED_RECONNECT_SECONDS,
        queue_size: int = Config.CHANGE_FEED_QUEUE_SIZE,
    ):
        self._dsn = libpq_dsn(database_url)
        self._channel = channel
        self._reconnect_seconds = reconnect_seconds
        self._queue_size = queue_size
        self._subscriptions: list[_PgSubscription] = []
        self._task: Optional[asyncio.Task] = None
        self._closed = False

    # ==================== LIFECYCLE ====================

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._closed = False
            self._task = asyncio.create_task(self._run(), name="change-feed-listener")

    async def close(self) -> None:
        self._closed = True
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        for subscription in list(self._subscriptions):
            await subscription.unsubscribe()
        logger.info("[ChangeFeed] Closed")

    # ==================== SUBSCRIPTIONS ====================

    async def subscribe(
        self, table: str, column: str, value: str, handler: ChangeHandler
    ) -> Subscription:
        subscription = _PgSubscription(
            self, table, column, value, handler, self._queue_size
        )
        self._subscriptions.append(subscription)
        increment_active_subscriptions()
        return subscription

    def _remove(self, subscription: _PgSubscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)
            decrement_active_subscriptions()

    async def drain(self) -> None:
        """Wait until every subscription has handled what is queued for it."""
        for subscription in list(self._subscriptions):
            await subscription.join()

    # ==================== LISTENER LOOP ====================

    async def _run(self) -> None:
        connected_before = False
        while not self._closed:
            try:
                async with await psycopg.AsyncConnection.connect(
                    self._dsn, autocommit=True
                ) as conn:
                    await conn.execute(
                        sql.SQL("LISTEN {}").format(sql.Identifier(self._channel))
                    )
                    logger.info(f"[ChangeFeed] Listening on '{self._channel}'")
                    if connected_before:
                        self._resync_all()
                    connected_before = True

                    async for notify in conn.notifies():
                        self.dispatch(notify.payload)
            except psycopg.Error as e:
                increment_error(MetricsErrorType.FEED_DISCONNECTED)
                logger.warning(
                    f"[ChangeFeed] Connection lost, retrying in "
                    f"{self._reconnect_seconds}s: {e}"
                )
                await asyncio.sleep(self._reconnect_seconds)

    def dispatch(self, payload: str) -> None:
        event = parse_payload(payload)
        if event is None:
            return
        increment_feed_event(event.table, event.type.value)
        for subscription in list(self._subscriptions):
            if subscription.wants(event):
                subscription.enqueue(event)

    def _resync_all(self) -> None:
        for subscription in list(self._subscriptions):
            subscription.enqueue(resync_event(subscription.table))
