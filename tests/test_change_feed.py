import asyncio
import json
from datetime import datetime, timezone

from marketplace_chat.application.realtime.records import (
    message_from_record,
    notification_from_record,
    parse_timestamp,
)
from marketplace_chat.domain.ports import ChangeType
from marketplace_chat.infrastructure.realtime.postgres_change_feed import (
    PostgresChangeFeed,
    libpq_dsn,
    parse_payload,
)

from fakes import make_message, message_record, new_listing_id, new_user_id


def _payload(table, type, record, old_record=None, truncated=False):
    return json.dumps(
        {
            "table": table,
            "type": type,
            "record": record,
            "old_record": old_record,
            "truncated": truncated,
        }
    )


def test_libpq_dsn_strips_prisma_only_params():
    dsn = libpq_dsn(
        "postgresql://u:p@db:5432/app?schema=public&sslmode=require&connection_limit=5"
    )
    assert dsn == "postgresql://u:p@db:5432/app?sslmode=require"


def test_parse_payload():
    event = parse_payload(_payload("messages", "INSERT", {"id": "1"}))
    assert event.table == "messages"
    assert event.type is ChangeType.INSERT
    assert event.record == {"id": "1"}
    assert event.truncated is False


def test_parse_payload_rejects_garbage():
    assert parse_payload("not json") is None
    assert parse_payload(json.dumps({"table": "messages", "type": "MERGE"})) is None
    assert parse_payload(json.dumps({"type": "INSERT"})) is None


def test_dispatch_routes_by_table_and_filter():
    feed = PostgresChangeFeed(database_url="postgresql://localhost/test")
    listing_a, listing_b = new_listing_id(), new_listing_id()
    seen = {"a": [], "b": [], "notifications": []}

    def row_id(event):
        return (event.old_record or event.record)["id"]

    async def scenario():
        async def on_a(event):
            seen["a"].append(row_id(event))

        async def on_b(event):
            seen["b"].append(row_id(event))

        async def on_notification(event):
            seen["notifications"].append(row_id(event))

        await feed.subscribe("messages", "issue_id", listing_a.value, on_a)
        await feed.subscribe("messages", "issue_id", listing_b.value, on_b)
        await feed.subscribe("notifications", "issue_id", listing_a.value, on_notification)

        feed.dispatch(_payload("messages", "INSERT", {"id": "m1", "issue_id": listing_a.value}))
        feed.dispatch(_payload("messages", "UPDATE", {"id": "m2", "issue_id": listing_b.value}))
        feed.dispatch(
            _payload("messages", "DELETE", None, old_record={"id": "m3", "issue_id": listing_a.value})
        )
        await feed.drain()
        await feed.close()

    asyncio.run(scenario())

    assert seen == {"a": ["m1", "m3"], "b": ["m2"], "notifications": []}


def test_failing_handler_does_not_block_others():
    feed = PostgresChangeFeed(database_url="postgresql://localhost/test")
    listing = new_listing_id()
    delivered = []

    async def scenario():
        async def broken(event):
            raise RuntimeError("boom")

        async def healthy(event):
            delivered.append(event.record["id"])

        await feed.subscribe("messages", "issue_id", listing.value, broken)
        await feed.subscribe("messages", "issue_id", listing.value, healthy)
        feed.dispatch(_payload("messages", "INSERT", {"id": "m1", "issue_id": listing.value}))
        feed.dispatch(_payload("messages", "INSERT", {"id": "m2", "issue_id": listing.value}))
        await feed.drain()
        await feed.close()

    asyncio.run(scenario())

    assert delivered == ["m1", "m2"]


def test_slow_handler_does_not_delay_other_subscribers():
    feed = PostgresChangeFeed(database_url="postgresql://localhost/test")
    listing = new_listing_id()

    async def scenario():
        gate = asyncio.Event()
        healthy_got = asyncio.Event()
        stuck_got = []

        async def stuck(event):
            stuck_got.append(event.record["id"])
            await gate.wait()

        async def healthy(event):
            healthy_got.set()

        await feed.subscribe("messages", "issue_id", listing.value, stuck)
        await feed.subscribe("messages", "issue_id", listing.value, healthy)
        feed.dispatch(_payload("messages", "INSERT", {"id": "m1", "issue_id": listing.value}))

        await asyncio.wait_for(healthy_got.wait(), timeout=1)
        assert stuck_got == ["m1"]
        assert not gate.is_set()

        gate.set()
        await feed.drain()
        await feed.close()

    asyncio.run(scenario())


def test_lagging_subscriber_gets_one_resync_instead_of_backlog():
    feed = PostgresChangeFeed(database_url="postgresql://localhost/test", queue_size=2)
    listing = new_listing_id()
    handled = []

    async def scenario():
        gate = asyncio.Event()

        async def slow(event):
            await gate.wait()
            handled.append("resync" if event.truncated else event.record["id"])

        await feed.subscribe("messages", "issue_id", listing.value, slow)
        feed.dispatch(_payload("messages", "INSERT", {"id": "m1", "issue_id": listing.value}))
        # The worker takes m1 and blocks on the gate
        await asyncio.sleep(0)
        for n in range(2, 6):
            feed.dispatch(
                _payload("messages", "INSERT", {"id": f"m{n}", "issue_id": listing.value})
            )

        gate.set()
        await feed.drain()
        await feed.close()

    asyncio.run(scenario())

    assert handled == ["m1", "resync", "m5"]


def test_unsubscribe_and_close_stop_delivery():
    feed = PostgresChangeFeed(database_url="postgresql://localhost/test")
    listing = new_listing_id()
    delivered = []

    async def scenario():
        async def handler(event):
            delivered.append(event.record["id"])

        first = await feed.subscribe("messages", "issue_id", listing.value, handler)
        second = await feed.subscribe("messages", "issue_id", listing.value, handler)
        await first.unsubscribe()
        await first.unsubscribe()
        feed.dispatch(_payload("messages", "INSERT", {"id": "m1", "issue_id": listing.value}))
        await feed.drain()

        await feed.close()
        feed.dispatch(_payload("messages", "INSERT", {"id": "m2", "issue_id": listing.value}))
        await feed.drain()
        return first, second

    first, second = asyncio.run(scenario())

    assert delivered == ["m1"]
    assert not first.active
    assert not second.active


def test_handler_may_unsubscribe_itself():
    feed = PostgresChangeFeed(database_url="postgresql://localhost/test")
    listing = new_listing_id()
    delivered = []

    async def scenario():
        subscription = None

        async def once(event):
            delivered.append(event.record["id"])
            await subscription.unsubscribe()

        subscription = await feed.subscribe("messages", "issue_id", listing.value, once)
        feed.dispatch(_payload("messages", "INSERT", {"id": "m1", "issue_id": listing.value}))
        feed.dispatch(_payload("messages", "INSERT", {"id": "m2", "issue_id": listing.value}))
        await subscription.join()
        return subscription

    subscription = asyncio.run(scenario())

    assert delivered == ["m1"]
    assert not subscription.active


def test_message_record_round_trip():
    listing, sender, receiver = new_listing_id(), new_user_id(), new_user_id()
    message = make_message(listing, sender, receiver, "hi", seconds=3, is_read=True)

    parsed = message_from_record(message_record(message))

    assert parsed == message


def test_offsetless_timestamps_are_read_as_utc():
    parsed = parse_timestamp("2024-05-01T12:00:05.000")

    assert parsed == datetime(2024, 5, 1, 12, 0, 5, tzinfo=timezone.utc)
    assert parse_timestamp("2024-05-01T14:00:05+02:00") == parsed
    assert parse_timestamp("2024-05-01T12:00:05Z") == parsed
    assert parse_timestamp(None) is None


def test_malformed_records_are_skipped():
    assert message_from_record({"id": "not-a-uuid"}) is None
    assert notification_from_record({"id": "x", "type": "unknown"}) is None
