import time
from datetime import timedelta
from uuid import uuid4

import pytest
from starlette.websockets import WebSocketDisconnect

from marketplace_chat.domain.entities import InterestStatus, Notification, NotificationType

from fakes import make_message, new_user_id
from jwt_generation import auth_headers_for, generate_jwt_token


def conversation_url(c, suffix=""):
    return f"/conversations/{c.listing.value}/{c.owner.value}{suffix}"


def seed_notification(backend, user_id, title="hello"):
    notification = Notification.create(
        user_id=user_id,
        type=NotificationType.NEW_MESSAGE,
        title=title,
        message="body",
        metadata={"listing_id": "l", "participant_id": "p"},
    )
    backend.notifications.notifications[notification.id.value] = notification
    return notification


def wait_for_subscription(backend, count=1):
    for _ in range(200):
        if len(backend.feed.subscriptions) >= count:
            return
        time.sleep(0.01)
    raise AssertionError("socket never subscribed to the change feed")


# ==================== AUTH ====================


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_missing_token_rejected(client):
    response = client.get("/conversations")
    assert response.status_code in (401, 403)


def test_invalid_token_rejected(client):
    response = client.get(
        "/conversations", headers={"Authorization": "Bearer not-a-jwt"}
    )
    assert response.status_code == 401
    assert response.json()["error"].startswith("Invalid token")


def test_expired_token_rejected(client):
    token = generate_jwt_token(new_user_id().value, expires_in=timedelta(seconds=-30))
    response = client.get(
        "/conversations", headers={"Authorization": f"Bearer {token}"}
    )
    assert response.status_code == 401
    assert response.json() == {"error": "Token has expired"}


# ==================== CONVERSATIONS ====================


def test_can_message(client, conversation):
    c = conversation
    allowed = client.get(conversation_url(c, "/can-message"), headers=auth_headers_for(c.student))
    denied = client.get(conversation_url(c, "/can-message"), headers=auth_headers_for(c.outsider))

    assert allowed.json() == {"can_message": True}
    assert denied.json() == {"can_message": False}


def test_send_then_list(client, backend, conversation):
    c = conversation
    headers = auth_headers_for(c.student)

    sent = client.post(
        conversation_url(c, "/messages"), json={"content": "  Hi there  "}, headers=headers
    )
    assert sent.status_code == 201
    body = sent.json()
    assert body["content"] == "Hi there"
    assert body["sender_id"] == c.student.value
    assert body["is_read"] is False

    listed = client.get(conversation_url(c, "/messages"), headers=headers)
    assert listed.status_code == 200
    assert [m["id"] for m in listed.json()["messages"]] == [body["id"]]
    assert len(backend.notifications.for_user(c.owner)) == 1


def test_outsider_cannot_send(client, backend, conversation):
    c = conversation
    response = client.post(
        conversation_url(c, "/messages"),
        json={"content": "let me in"},
        headers=auth_headers_for(c.outsider),
    )
    assert response.status_code == 403
    assert "error" in response.json()
    assert backend.messages.messages == {}


def test_empty_message_rejected(client, conversation):
    c = conversation
    response = client.post(
        conversation_url(c, "/messages"), json={"content": "   "}, headers=auth_headers_for(c.student)
    )
    assert response.status_code == 422


def test_malformed_ids_rejected(client, conversation):
    response = client.get(
        f"/conversations/not-a-uuid/{conversation.owner.value}/messages",
        headers=auth_headers_for(conversation.student),
    )
    assert response.status_code == 422
    assert response.json() == {"error": "Invalid listing id"}


def test_mark_read_and_unread_count(client, backend, conversation):
    c = conversation
    backend.messages.seed(
        make_message(c.listing, c.owner, c.student, "one", seconds=1),
        make_message(c.listing, c.owner, c.student, "two", seconds=2),
    )
    headers = auth_headers_for(c.student)

    assert client.get("/messages/unread-count", headers=headers).json() == {"count": 2}
    response = client.post(conversation_url(c, "/read"), headers=headers)
    assert response.json() == {"updated": 2}
    assert client.get("/messages/unread-count", headers=headers).json() == {"count": 0}


def test_conversation_inbox(client, backend, conversation):
    c = conversation
    backend.messages.seed(make_message(c.listing, c.owner, c.student, "welcome", seconds=1))

    response = client.get("/conversations", headers=auth_headers_for(c.student))

    [row] = response.json()["conversations"]
    assert row["listing_id"] == c.listing.value
    assert row["participant_id"] == c.owner.value
    assert row["last_message"] == "welcome"
    assert row["unread_count"] == 1


# ==================== ATTACHMENTS ====================


def test_upload_attachment(client, backend, conversation):
    response = client.post(
        "/attachments",
        files={"file": ("brief.pdf", b"%PDF-1.4 tiny", "application/pdf")},
        headers=auth_headers_for(conversation.student),
    )

    assert response.status_code == 201
    body = response.json()
    assert body["path"].startswith(f"{conversation.student.value}/")
    assert body["name"] == "brief.pdf"
    assert body["type"] == "application/pdf"
    assert body["size"] == len(b"%PDF-1.4 tiny")
    assert backend.storage.objects[body["path"]] == b"%PDF-1.4 tiny"


def test_upload_too_large(client, backend, conversation):
    response = client.post(
        "/attachments",
        files={"file": ("big.bin", b"0" * (6 * 1024 * 1024), "application/octet-stream")},
        headers=auth_headers_for(conversation.student),
    )

    assert response.status_code == 413
    assert "5MB" in response.json()["error"]
    assert backend.storage.calls == []


def test_send_with_uploaded_attachment(client, conversation):
    c = conversation
    headers = auth_headers_for(c.student)
    uploaded = client.post(
        "/attachments",
        files={"file": ("brief.pdf", b"data", "application/pdf")},
        headers=headers,
    ).json()

    response = client.post(
        conversation_url(c, "/messages"), json={"attachment": uploaded}, headers=headers
    )

    assert response.status_code == 201
    assert response.json()["content"] == "Sent a file: brief.pdf"
    assert response.json()["attachment"]["path"] == uploaded["path"]


def test_signed_url(client, conversation):
    response = client.get(
        "/attachments/signed-url",
        params={"path": "u/1-abc-a.pdf", "expires_in": 120},
        headers=auth_headers_for(conversation.student),
    )

    assert response.status_code == 200
    assert response.json()["url"].endswith("u/1-abc-a.pdf?token=signed-120")


def test_signed_url_storage_failure(client, backend, conversation):
    backend.storage.error = "bucket offline"
    response = client.get(
        "/attachments/signed-url",
        params={"path": "u/a.pdf"},
        headers=auth_headers_for(conversation.student),
    )
    assert response.status_code == 503


# ==================== NOTIFICATIONS ====================


def test_notification_lifecycle(client, backend):
    user = new_user_id()
    headers = auth_headers_for(user)
    first = seed_notification(backend, user, "first")
    seed_notification(backend, user, "second")

    listed = client.get("/notifications", headers=headers).json()["notifications"]
    assert {n["title"] for n in listed} == {"first", "second"}
    assert client.get("/notifications/unread-count", headers=headers).json() == {"count": 2}

    response = client.post(f"/notifications/{first.id.value}/read", headers=headers)
    assert response.json() == {"success": True}
    assert client.get("/notifications/unread-count", headers=headers).json() == {"count": 1}

    assert client.post("/notifications/read-all", headers=headers).json() == {"updated": 1}

    response = client.delete(f"/notifications/{first.id.value}", headers=headers)
    assert response.json() == {"success": True}
    assert len(backend.notifications.for_user(user)) == 1


def test_notifications_of_other_users_are_not_found(client, backend):
    owner, intruder = new_user_id(), new_user_id()
    notification = seed_notification(backend, owner)

    read = client.post(
        f"/notifications/{notification.id.value}/read", headers=auth_headers_for(intruder)
    )
    deleted = client.delete(
        f"/notifications/{notification.id.value}", headers=auth_headers_for(intruder)
    )

    assert read.status_code == 404
    assert deleted.status_code == 404
    assert backend.notifications.for_user(owner) == [notification]


def test_dismiss_thread(client, backend, conversation):
    c = conversation
    client.post(
        conversation_url(c, "/messages"), json={"content": "ping"}, headers=auth_headers_for(c.student)
    )
    assert len(backend.notifier.for_user(c.owner)) == 1

    response = client.post(
        f"/notifications/threads/chat-{c.listing.value}-{c.student.value}/dismiss",
        headers=auth_headers_for(c.owner),
    )

    assert response.json() == {"dismissed": 1}
    assert backend.notifier.for_user(c.owner) == []


def test_foreground_presence_suppresses_push(client, backend, conversation):
    c = conversation
    response = client.put(
        "/presence", json={"state": "foreground"}, headers=auth_headers_for(c.owner)
    )
    assert response.status_code == 200
    assert response.json()["state"] == "foreground"

    client.post(
        conversation_url(c, "/messages"), json={"content": "ping"}, headers=auth_headers_for(c.student)
    )

    assert len(backend.notifications.for_user(c.owner)) == 1
    assert backend.notifier.scheduled == []


def test_presence_rejects_unknown_state(client, conversation):
    response = client.put(
        "/presence", json={"state": "asleep"}, headers=auth_headers_for(conversation.owner)
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Validation error"


# ==================== INTERESTS ====================


def test_apply_and_approve_opens_conversation(client, backend):
    owner = backend.add_business("Acme Ltd")
    student = backend.add_student("Sam Student")
    listing = backend.add_listing(owner)
    can_message_url = f"/conversations/{listing.value}/{owner.value}/can-message"

    applied = client.post(
        f"/listings/{listing.value}/interests",
        json={"cover_message": "Keen to help"},
        headers=auth_headers_for(student),
    )
    assert applied.status_code == 201
    assert applied.json()["status"] == "pending"
    assert client.get(can_message_url, headers=auth_headers_for(student)).json() == {
        "can_message": False
    }

    decided = client.post(
        f"/interests/{applied.json()['id']}/decision",
        json={"status": "approved"},
        headers=auth_headers_for(owner),
    )
    assert decided.status_code == 200
    assert decided.json()["status"] == "approved"
    assert client.get(can_message_url, headers=auth_headers_for(student)).json() == {
        "can_message": True
    }


def test_decision_by_non_owner_looks_like_unknown_interest(client, backend, conversation):
    interest = backend.add_interest(
        conversation.listing,
        backend.add_student("Late Applicant"),
        status=InterestStatus.PENDING,
    )
    response = client.post(
        f"/interests/{interest.id.value}/decision",
        json={"status": "approved"},
        headers=auth_headers_for(conversation.student),
    )
    unknown = client.post(
        f"/interests/{uuid4()}/decision",
        json={"status": "approved"},
        headers=auth_headers_for(conversation.student),
    )
    assert response.status_code == 404
    assert unknown.status_code == 404
    assert backend.interests.interests[interest.id.value].status is InterestStatus.PENDING


def test_duplicate_application_rejected(client, backend, conversation):
    response = client.post(
        f"/listings/{conversation.listing.value}/interests",
        json={},
        headers=auth_headers_for(conversation.student),
    )
    assert response.status_code == 422
    assert "already applied" in response.json()["error"]


def test_metrics_endpoint(client, conversation):
    c = conversation
    client.post(
        conversation_url(c, "/messages"), json={"content": "count me"}, headers=auth_headers_for(c.student)
    )
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "chat_messages_sent_total" in response.text


# ==================== WEBSOCKETS ====================


def test_conversation_socket_snapshot_and_send(client, backend, conversation):
    c = conversation
    backend.messages.seed(make_message(c.listing, c.owner, c.student, "welcome", seconds=1))
    token = generate_jwt_token(c.student.value)

    with client.websocket_connect(
        f"/ws/conversations/{c.listing.value}/{c.owner.value}?token={token}"
    ) as ws:
        initial = ws.receive_json()
        assert initial["type"] == "snapshot"
        assert [m["content"] for m in initial["messages"]] == ["welcome"]
        assert initial["messages"][0]["is_read"] is True

        ws.send_json({"type": "send", "content": "thanks!"})
        after_send = ws.receive_json()
        assert [m["content"] for m in after_send["messages"]] == ["welcome", "thanks!"]

        ws.send_json({"type": "send", "content": "   "})
        error = ws.receive_json()
        assert error["type"] == "error"
        assert error["status"] == 422


def test_conversation_socket_denied(client, conversation):
    c = conversation
    token = generate_jwt_token(c.outsider.value)

    with client.websocket_connect(
        f"/ws/conversations/{c.listing.value}/{c.owner.value}?token={token}"
    ) as ws:
        error = ws.receive_json()
        assert error["type"] == "error"
        assert error["status"] == 403
        with pytest.raises(WebSocketDisconnect) as excinfo:
            ws.receive_json()
        assert excinfo.value.code == 1008


def test_socket_with_bad_token_is_refused(client, conversation):
    c = conversation
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect(
            f"/ws/conversations/{c.listing.value}/{c.owner.value}?token=garbage"
        ) as ws:
            ws.receive_json()


def test_notification_socket_streams_inserts(client, backend, conversation):
    c = conversation
    token = generate_jwt_token(c.owner.value)

    with client.websocket_connect(f"/ws/notifications?token={token}") as ws:
        wait_for_subscription(backend)
        client.post(
            conversation_url(c, "/messages"),
            json={"content": "ping"},
            headers=auth_headers_for(c.student),
        )
        event = ws.receive_json()

    assert event["type"] == "notification"
    assert event["event"] == "INSERT"
    assert event["notification"]["title"] == "New message from Sam Student"
    assert event["notification"]["metadata"]["listing_id"] == c.listing.value
