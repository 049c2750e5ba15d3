import asyncio

import pytest

from marketplace_chat.application.commands.notifications import (
    DeleteNotificationCommand,
    DeleteNotificationHandler,
    DismissThreadCommand,
    DismissThreadHandler,
    MarkAllNotificationsReadCommand,
    MarkAllNotificationsReadHandler,
    MarkNotificationReadCommand,
    MarkNotificationReadHandler,
)
from marketplace_chat.application.queries.notifications import (
    GetUnreadNotificationCountHandler,
    GetUnreadNotificationCountQuery,
    ListNotificationsHandler,
    ListNotificationsQuery,
)
from marketplace_chat.application.realtime import NotificationFeed
from marketplace_chat.application.services import build_notification
from marketplace_chat.domain.entities import (
    Interest,
    InterestApproved,
    InterestCreated,
    InterestRejected,
    Listing,
    ListingStatus,
    Notification,
    NotificationType,
    NewMessage,
)
from marketplace_chat.domain.exceptions import EntityNotFoundError
from marketplace_chat.domain.ports import ChangeEvent, ChangeType, DeliveryContext
from marketplace_chat.domain.services.thread_ids import thread_id_for

from fakes import make_message, new_listing_id, new_user_id, notification_record


def _listing(owner):
    return Listing(
        id=new_listing_id(),
        title="Build a landing page",
        status=ListingStatus.OPEN,
        owner_user_id=owner,
    )


def _notification(user_id, title="hello"):
    return Notification.create(
        user_id=user_id,
        type=NotificationType.NEW_MESSAGE,
        title=title,
        message="body",
        metadata={"listing_id": "l1", "participant_id": "p1"},
    )


# ==================== EVENT → NOTIFICATION ====================


def test_new_message_notification():
    listing, sender, receiver = new_listing_id(), new_user_id(), new_user_id()
    message = make_message(listing, sender, receiver, "short")

    notification = build_notification(NewMessage(message=message, sender_name="Acme"))

    assert notification.user_id == receiver
    assert notification.type is NotificationType.NEW_MESSAGE
    assert notification.title == "New message from Acme"
    assert notification.message == "short"
    assert notification.is_read is False


def test_self_message_produces_no_notification():
    listing, user = new_listing_id(), new_user_id()
    message = make_message(listing, user, user, "note to self")
    assert build_notification(NewMessage(message=message, sender_name="Me")) is None


def test_interest_notifications_address_the_right_party():
    owner, student = new_user_id(), new_user_id()
    listing = _listing(owner)
    interest = Interest.create(listing.id, student, "Pick me")

    created = build_notification(
        InterestCreated(interest=interest, listing=listing, student_name="Sam")
    )
    approved = build_notification(InterestApproved(interest=interest, listing=listing))
    rejected = build_notification(InterestRejected(interest=interest, listing=listing))

    assert created.user_id == owner
    assert created.type is NotificationType.NEW_INTEREST
    assert created.message == 'Sam applied to "Build a landing page"'
    assert approved.user_id == student
    assert approved.metadata["participant_id"] == owner.value
    assert rejected.user_id == student
    assert rejected.type is NotificationType.INTEREST_REJECTED


@pytest.mark.parametrize(
    "type, metadata, expected",
    [
        (
            NotificationType.NEW_MESSAGE,
            {"listing_id": "L", "participant_id": "P"},
            "chat-L-P",
        ),
        (NotificationType.NEW_MESSAGE, {"listing_id": "L"}, None),
        (NotificationType.INTEREST_APPROVED, {"listing_id": "L"}, "application-L"),
        (NotificationType.INTEREST_REJECTED, {"listing_id": "L"}, "application-L"),
        (NotificationType.NEW_INTEREST, {"listing_id": "L"}, "interest-L"),
        (NotificationType.NEW_INTEREST, {}, None),
    ],
)
def test_thread_ids(type, metadata, expected):
    assert thread_id_for(type, metadata) == expected


# ==================== DISPATCH ====================


def _new_message_event(conversation):
    c = conversation
    message = make_message(c.listing, c.student, c.owner, "ping")
    return NewMessage(message=message, sender_name="Sam Student")


def test_background_recipient_gets_in_app_and_push(backend, conversation):
    event = _new_message_event(conversation)

    notification = asyncio.run(
        backend.dispatcher().dispatch(event, DeliveryContext.BACKGROUND)
    )

    assert backend.notifications.for_user(conversation.owner) == [notification]
    [push] = backend.notifier.for_user(conversation.owner)
    assert push["title"] == "New message from Sam Student"
    assert push["thread_id"] == (
        f"chat-{conversation.listing.value}-{conversation.student.value}"
    )
    assert push["data"]["type"] == "new_message"
    assert push["data"]["notification_id"] == notification.id.value


def test_foreground_recipient_gets_in_app_only(backend, conversation):
    event = _new_message_event(conversation)

    asyncio.run(backend.dispatcher().dispatch(event, DeliveryContext.FOREGROUND))

    assert len(backend.notifications.for_user(conversation.owner)) == 1
    assert backend.notifier.scheduled == []


def test_notify_uses_reported_presence(backend, conversation):
    event = _new_message_event(conversation)
    asyncio.run(backend.presence.report(conversation.owner, DeliveryContext.FOREGROUND))

    asyncio.run(backend.dispatcher().notify(event))

    assert backend.notifier.scheduled == []


def test_presence_failure_falls_back_to_push(backend, conversation):
    event = _new_message_event(conversation)
    backend.presence.fail = True

    asyncio.run(backend.dispatcher().notify(event))

    assert len(backend.notifier.for_user(conversation.owner)) == 1


def test_persist_failure_is_isolated(backend, conversation):
    event = _new_message_event(conversation)
    backend.notifications.fail_writes = True

    result = asyncio.run(backend.dispatcher().notify(event))

    assert result is None
    assert backend.notifier.scheduled == []


def test_push_failure_keeps_in_app_notification(backend, conversation):
    event = _new_message_event(conversation)
    backend.notifier.fail = True

    result = asyncio.run(backend.dispatcher().notify(event))

    assert result is not None
    assert backend.notifications.for_user(conversation.owner) == [result]


def test_dismiss_thread_retracts_only_that_thread(backend, conversation):
    c = conversation
    asyncio.run(backend.dispatcher().notify(_new_message_event(c)))
    other_listing = backend.add_listing(c.owner, title="Logo design")
    backend.add_interest(other_listing, c.student)
    other_message = make_message(other_listing, c.student, c.owner, "elsewhere")
    asyncio.run(
        backend.dispatcher().notify(NewMessage(message=other_message, sender_name="Sam"))
    )

    dismissed = asyncio.run(
        DismissThreadHandler(backend.dispatcher()).execute(
            DismissThreadCommand(
                user_id=c.owner, thread_id=f"chat-{c.listing.value}-{c.student.value}"
            )
        )
    )

    assert dismissed == 1
    [remaining] = backend.notifier.for_user(c.owner)
    assert remaining["data"]["listing_id"] == other_listing.value


def test_dismiss_failure_returns_zero(backend, conversation):
    backend.notifier.fail = True
    dismissed = asyncio.run(
        backend.dispatcher().dismiss_thread(conversation.owner, "chat-a-b")
    )
    assert dismissed == 0


# ==================== MANAGEMENT ====================


def test_list_newest_first_with_capped_limit(backend):
    user = new_user_id()
    for i in range(60):
        asyncio.run(backend.notifications.add(_notification(user, title=f"n{i}")))

    handler = ListNotificationsHandler(backend.notifications, max_limit=50)
    capped = asyncio.run(handler.execute(ListNotificationsQuery(user_id=user, limit=500)))
    floor = asyncio.run(handler.execute(ListNotificationsQuery(user_id=user, limit=0)))

    assert len(capped) == 50
    assert capped == sorted(capped, key=lambda n: n.created_at, reverse=True)
    assert len(floor) == 1


def test_mark_read_and_counts_are_scoped_to_owner(backend):
    alice, bob = new_user_id(), new_user_id()
    mine = _notification(alice)
    theirs = _notification(bob)
    asyncio.run(backend.notifications.add(mine))
    asyncio.run(backend.notifications.add(theirs))
    mark = MarkNotificationReadHandler(backend.notifications)

    with pytest.raises(EntityNotFoundError):
        asyncio.run(
            mark.execute(MarkNotificationReadCommand(notification_id=theirs.id, user_id=alice))
        )
    asyncio.run(mark.execute(MarkNotificationReadCommand(notification_id=mine.id, user_id=alice)))

    count = GetUnreadNotificationCountHandler(backend.notifications)
    assert asyncio.run(count.execute(GetUnreadNotificationCountQuery(user_id=alice))) == 0
    assert asyncio.run(count.execute(GetUnreadNotificationCountQuery(user_id=bob))) == 1


def test_mark_all_read(backend):
    user = new_user_id()
    for _ in range(3):
        asyncio.run(backend.notifications.add(_notification(user)))

    handler = MarkAllNotificationsReadHandler(backend.notifications)
    assert asyncio.run(handler.execute(MarkAllNotificationsReadCommand(user_id=user))) == 3
    assert asyncio.run(handler.execute(MarkAllNotificationsReadCommand(user_id=user))) == 0


def test_delete_is_scoped_to_owner(backend):
    alice, bob = new_user_id(), new_user_id()
    notification = _notification(alice)
    asyncio.run(backend.notifications.add(notification))
    delete = DeleteNotificationHandler(backend.notifications)

    with pytest.raises(EntityNotFoundError):
        asyncio.run(
            delete.execute(
                DeleteNotificationCommand(notification_id=notification.id, user_id=bob)
            )
        )
    asyncio.run(
        delete.execute(
            DeleteNotificationCommand(notification_id=notification.id, user_id=alice)
        )
    )
    assert backend.notifications.for_user(alice) == []


# ==================== LIVE FEED ====================


def test_notification_feed_forwards_own_inserts_and_updates(backend):
    user, other = new_user_id(), new_user_id()
    received = []

    async def scenario():
        feed = NotificationFeed(user, backend.feed)

        async def listener(event_type, notification):
            received.append((event_type, notification.title))

        await feed.start(listener)
        await backend.notifications.add(_notification(user, title="mine"))
        await backend.notifications.add(_notification(other, title="not mine"))
        read = dict(notification_record(_notification(user, title="read")), is_read=True)
        await backend.feed.deliver(
            ChangeEvent(table="notifications", type=ChangeType.UPDATE, record=read)
        )
        await backend.feed.deliver(
            ChangeEvent(
                table="notifications",
                type=ChangeType.DELETE,
                old_record=notification_record(_notification(user, title="gone")),
            )
        )
        await feed.stop()
        await backend.notifications.add(_notification(user, title="after stop"))

    asyncio.run(scenario())

    assert received == [(ChangeType.INSERT, "mine"), (ChangeType.UPDATE, "read")]
    assert backend.feed.subscriptions == []
