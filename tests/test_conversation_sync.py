import asyncio

import pytest

from marketplace_chat.application.realtime import ConversationSyncEngine, SyncState
from marketplace_chat.domain.exceptions import AccessDeniedError, DomainValidationError
from marketplace_chat.domain.ports import ChangeEvent, ChangeType

from fakes import FakeBackend, make_message, message_record


def _world(auto_deliver=True):
    backend = FakeBackend(auto_deliver=auto_deliver)
    owner = backend.add_business("Acme Ltd")
    student = backend.add_student("Sam Student")
    listing = backend.add_listing(owner)
    backend.add_interest(listing, student)
    return backend, listing, owner, student


def engine_for(backend, listing, local, other, list_handler=None, send_handler=None):
    return ConversationSyncEngine(
        listing_id=listing,
        local_user_id=local,
        other_user_id=other,
        change_feed=backend.feed,
        list_messages=list_handler or backend.list_handler(),
        mark_read=backend.mark_read_handler(),
        send_message=send_handler or backend.send_handler(),
    )


def insert_event(message):
    return ChangeEvent(table="messages", type=ChangeType.INSERT, record=message_record(message))


def test_start_loads_history_and_marks_incoming_read():
    backend, listing, owner, student = _world()
    incoming = make_message(listing, owner, student, "hello", seconds=2)
    outgoing = make_message(listing, student, owner, "hi!", seconds=1)
    backend.messages.seed(incoming, outgoing)

    async def scenario():
        engine = engine_for(backend, listing, student, owner)
        snapshots = []

        async def listener(messages):
            snapshots.append(messages)

        engine.on_change(listener)
        messages = await engine.start()
        return engine, messages, snapshots

    engine, messages, snapshots = asyncio.run(scenario())

    assert engine.state is SyncState.LIVE
    assert [m.content for m in messages] == ["hi!", "hello"]
    assert messages[1].is_read is True
    assert messages[0].is_read is False
    assert backend.messages.messages[incoming.id.value].is_read is True
    assert len(snapshots) == 1


def test_out_of_order_delivery_is_displayed_in_order():
    backend, listing, owner, student = _world()
    m1 = make_message(listing, student, owner, "one", seconds=1)
    m2 = make_message(listing, student, owner, "two", seconds=2)
    m3 = make_message(listing, student, owner, "three", seconds=3)

    async def scenario():
        engine = engine_for(backend, listing, student, owner)
        await engine.start()
        for message in (m3, m1, m2):
            await backend.feed.deliver(insert_event(message))
        return engine.messages

    messages = asyncio.run(scenario())

    assert [m.content for m in messages] == ["one", "two", "three"]


def test_live_insert_with_offsetless_timestamp_joins_aware_history():
    backend, listing, owner, student = _world()
    earlier = make_message(listing, owner, student, "earlier", seconds=1)
    later = make_message(listing, owner, student, "later", seconds=9)
    live = make_message(listing, student, owner, "live", seconds=5)
    backend.messages.seed(earlier, later)
    record = message_record(live)
    assert record["created_at"] == "2024-05-01T12:00:05.000"

    async def scenario():
        engine = engine_for(backend, listing, student, owner)
        history = await engine.start()
        assert all(m.created_at.tzinfo is not None for m in history)
        await backend.feed.deliver(
            ChangeEvent(table="messages", type=ChangeType.INSERT, record=record)
        )
        return engine.messages

    messages = asyncio.run(scenario())

    assert [m.content for m in messages] == ["earlier", "live", "later"]
    assert messages[1].created_at == live.created_at


def test_same_timestamp_orders_by_id():
    backend, listing, owner, student = _world()
    a = make_message(
        listing, student, owner, "a", seconds=1,
        message_id="00000000-0000-7000-8000-000000000001",
    )
    b = make_message(
        listing, student, owner, "b", seconds=1,
        message_id="00000000-0000-7000-8000-000000000002",
    )

    async def scenario():
        engine = engine_for(backend, listing, student, owner)
        await engine.start()
        await backend.feed.deliver(insert_event(b))
        await backend.feed.deliver(insert_event(a))
        return engine.messages

    assert [m.content for m in asyncio.run(scenario())] == ["a", "b"]


def test_duplicate_insert_is_merged_once():
    backend, listing, owner, student = _world()
    message = make_message(listing, student, owner, "once", seconds=1)

    async def scenario():
        engine = engine_for(backend, listing, student, owner)
        await engine.start()
        snapshots = []

        async def listener(messages):
            snapshots.append(messages)

        engine.on_change(listener)
        await backend.feed.deliver(insert_event(message))
        await backend.feed.deliver(insert_event(message))
        return engine.messages, snapshots

    messages, snapshots = asyncio.run(scenario())

    assert [m.content for m in messages] == ["once"]
    assert len(snapshots) == 1


def test_update_only_advances_is_read():
    backend, listing, owner, student = _world()
    sent = make_message(listing, owner, student, "original", seconds=1)
    backend.messages.seed(sent)

    async def scenario():
        # Owner's view: the message is outgoing, so starting does not mark it read
        engine = engine_for(backend, listing, owner, student)
        await engine.start()
        assert engine.messages[0].is_read is False

        tampered = dict(message_record(sent), content="edited", is_read=True)
        await backend.feed.deliver(
            ChangeEvent(table="messages", type=ChangeType.UPDATE, record=tampered)
        )
        after_read = engine.messages

        unread_again = dict(message_record(sent), is_read=False)
        await backend.feed.deliver(
            ChangeEvent(table="messages", type=ChangeType.UPDATE, record=unread_again)
        )
        return after_read, engine.messages

    after_read, final = asyncio.run(scenario())

    assert after_read[0].is_read is True
    assert after_read[0].content == "original"
    assert final[0].is_read is True


def test_incoming_insert_is_marked_read_before_merge():
    backend, listing, owner, student = _world()

    async def scenario():
        engine = engine_for(backend, listing, student, owner)
        await engine.start()
        stored = await backend.messages.add(make_message(listing, owner, student, "new"))
        return engine.messages, stored

    messages, stored = asyncio.run(scenario())

    assert messages[0].id == stored.id
    assert messages[0].is_read is True
    assert backend.messages.messages[stored.id.value].is_read is True


def test_read_receipts_converge_across_participants():
    backend, listing, owner, student = _world(auto_deliver=False)

    async def scenario():
        owner_view = engine_for(backend, listing, owner, student)
        student_view = engine_for(backend, listing, student, owner)
        await owner_view.start()
        await student_view.start()

        sent = await owner_view.send("Welcome aboard")
        assert owner_view.messages[0].is_read is False

        # INSERT reaches the student, whose mark-read produces an UPDATE
        # that flush() then delivers to the owner
        await backend.feed.flush()
        return sent, owner_view.messages, student_view.messages

    sent, owner_messages, student_messages = asyncio.run(scenario())

    assert [m.id for m in owner_messages] == [sent.id]
    assert [m.id for m in student_messages] == [sent.id]
    assert owner_messages[0].is_read is True
    assert student_messages[0].is_read is True


def test_other_pairs_on_the_same_listing_are_ignored():
    backend, listing, owner, student = _world()
    other_student = backend.add_student("Other")
    backend.add_interest(listing, other_student)

    async def scenario():
        engine = engine_for(backend, listing, student, owner)
        await engine.start()
        await backend.messages.add(make_message(listing, owner, other_student, "private"))
        return engine.messages

    assert asyncio.run(scenario()) == []


def test_detach_stops_all_updates():
    backend, listing, owner, student = _world()
    calls = []

    async def scenario():
        engine = engine_for(backend, listing, student, owner)

        async def listener(messages):
            calls.append(messages)

        engine.on_change(listener)
        await engine.start()
        await engine.detach()
        await engine.detach()
        await backend.feed.deliver(insert_event(make_message(listing, owner, student)))
        return engine

    engine = asyncio.run(scenario())

    assert engine.state is SyncState.DETACHED
    assert engine.messages == []
    assert len(calls) == 1
    assert backend.feed.subscriptions == []


def test_truncated_event_triggers_refetch():
    backend, listing, owner, student = _world()
    large = make_message(listing, student, owner, "x" * 4000, seconds=1)

    async def scenario():
        engine = engine_for(backend, listing, student, owner)
        await engine.start()
        backend.messages.seed(large)
        await backend.feed.deliver(
            ChangeEvent(
                table="messages",
                type=ChangeType.INSERT,
                record={"id": large.id.value, "issue_id": listing.value},
                truncated=True,
            )
        )
        return engine.messages

    messages = asyncio.run(scenario())

    assert [m.id for m in messages] == [large.id]
    assert messages[0].content == "x" * 4000


def test_events_during_initial_load_are_not_lost():
    backend, listing, owner, student = _world()
    inner = backend.list_handler()
    racing = make_message(listing, student, owner, "raced the fetch", seconds=5)

    class RacingList:
        async def execute(self, query):
            result = await inner.execute(query)
            # Inserted after the snapshot was read but before the engine went live
            await backend.messages.add(racing)
            return result

    async def scenario():
        engine = engine_for(backend, listing, student, owner, list_handler=RacingList())
        return await engine.start()

    messages = asyncio.run(scenario())

    assert [m.content for m in messages] == ["raced the fetch"]


def test_start_denied_releases_subscription():
    backend, listing, owner, student = _world()
    outsider = backend.add_student("Olive Outsider")

    async def scenario():
        engine = engine_for(backend, listing, outsider, owner)
        with pytest.raises(AccessDeniedError):
            await engine.start()
        return engine

    engine = asyncio.run(scenario())

    assert engine.state is SyncState.DETACHED
    assert backend.feed.subscriptions == []


def test_send_requires_live_state():
    backend, listing, owner, student = _world()
    engine = engine_for(backend, listing, student, owner)
    with pytest.raises(DomainValidationError, match="not connected"):
        asyncio.run(engine.send("too early"))


def test_only_one_send_in_flight():
    backend, listing, owner, student = _world()
    inner = backend.send_handler()
    gate = asyncio.Event()

    class SlowSend:
        async def execute(self, command):
            await gate.wait()
            return await inner.execute(command)

    async def scenario():
        engine = engine_for(backend, listing, student, owner, send_handler=SlowSend())
        await engine.start()

        first = asyncio.create_task(engine.send("first"))
        await asyncio.sleep(0)
        with pytest.raises(DomainValidationError, match="already being sent"):
            await engine.send("second")

        gate.set()
        await first
        await engine.send("third")
        return engine.messages

    messages = asyncio.run(scenario())

    assert [m.content for m in messages] == ["first", "third"]
