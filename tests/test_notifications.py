from __future__ import annotations

import asyncio
from datetime import datetime, timedelta

from network_service.application.notification_service import NotificationService
from network_service.config import settings
from network_service.domain.models import NotificationType

from .conftest import auth
from .fakes import FakeNotificationRepository, FakeUserRepository


def like_post(client, author_token, fan_token):
    post = client.post("/api/posts", json={"content": "hello"}, headers=auth(author_token)).json()["data"]
    client.post(f"/api/posts/{post['id']}/like", headers=auth(fan_token))
    return post


def test_social_actions_notify_the_other_user(client, register) -> None:
    a_token, a_id = register("Ada", "Lovelace", "a@x.com")
    b_token, b_id = register("Grace", "Hopper", "b@x.com")

    post = like_post(client, a_token, b_token)
    client.post(f"/api/users/{a_id}/follow", headers=auth(b_token))

    body = client.get("/api/notifications", headers=auth(a_token)).json()
    assert body["pagination"]["total"] == 2
    newest, oldest = body["data"]
    assert newest["type"] == "follow"
    assert oldest["type"] == "like"
    assert oldest["postId"] == post["id"]
    assert oldest["senderId"] == b_id
    assert oldest["sender"]["fullName"] == "Grace Hopper"
    assert oldest["content"] == "Grace Hopper liked your post"
    assert oldest["isRead"] is False


def test_self_actions_do_not_notify(client, register, repos) -> None:
    token, _ = register("Ada", "Lovelace", "a@x.com")

    post = like_post(client, token, token)
    client.post(f"/api/posts/{post['id']}/comments", json={"content": "me"}, headers=auth(token))
    client.post(f"/api/posts/{post['id']}/share", headers=auth(token))

    assert repos.notifications.notifications == {}


def test_read_state_and_soft_delete(client, register) -> None:
    a_token, _ = register("Ada", "Lovelace", "a@x.com")
    b_token, _ = register("Grace", "Hopper", "b@x.com")
    for _ in range(3):
        like_post(client, a_token, b_token)

    def unread():
        return client.get("/api/notifications/unread-count", headers=auth(a_token)).json()["data"]["count"]

    notes = client.get("/api/notifications", headers=auth(a_token)).json()["data"]
    assert unread() == 3

    assert client.put(f"/api/notifications/{notes[0]['id']}/read", headers=auth(a_token)).status_code == 200
    assert unread() == 2

    assert client.delete(f"/api/notifications/{notes[1]['id']}", headers=auth(a_token)).status_code == 200
    assert unread() == 1
    remaining = client.get("/api/notifications", headers=auth(a_token)).json()
    assert [n["id"] for n in remaining["data"]] == [notes[0]["id"], notes[2]["id"]]
    assert remaining["pagination"]["total"] == 2

    # A soft-deleted notification is gone for the recipient
    gone = client.put(f"/api/notifications/{notes[1]['id']}/read", headers=auth(a_token))
    assert gone.status_code == 404

    client.put("/api/notifications/mark-all-read", headers=auth(a_token))
    assert unread() == 0

    client.delete("/api/notifications", headers=auth(a_token))
    assert client.get("/api/notifications", headers=auth(a_token)).json()["data"] == []


def test_cannot_touch_someone_elses_notification(client, register) -> None:
    a_token, _ = register("Ada", "Lovelace", "a@x.com")
    b_token, _ = register("Grace", "Hopper", "b@x.com")
    like_post(client, a_token, b_token)
    note_id = client.get("/api/notifications", headers=auth(a_token)).json()["data"][0]["id"]

    res = client.put(f"/api/notifications/{note_id}/read", headers=auth(b_token))
    assert res.status_code == 404
    assert res.json()["message"] == "Notification not found"
    assert client.delete(f"/api/notifications/{note_id}", headers=auth(b_token)).status_code == 404


def test_prune_removes_only_old_read_notifications() -> None:
    notifications = FakeNotificationRepository()
    service = NotificationService(notifications, FakeUserRepository())

    async def scenario():
        old_read = await service.notify("r", "s", NotificationType.LIKE, content="old read")
        old_unread = await service.notify("r", "s", NotificationType.LIKE, content="old unread")
        fresh_read = await service.notify("r", "s", NotificationType.LIKE, content="fresh read")

        long_ago = datetime.utcnow() - timedelta(days=45)
        notifications.notifications[old_read.id].created_at = long_ago
        notifications.notifications[old_unread.id].created_at = long_ago
        notifications.notifications[fresh_read.id].created_at = datetime.utcnow()
        await service.mark_read(old_read.id, "r")
        await service.mark_read(fresh_read.id, "r")

        removed = await service.prune(days=30)
        return removed, old_unread, fresh_read

    removed, old_unread, fresh_read = asyncio.run(scenario())

    assert removed == 1
    assert set(notifications.notifications) == {old_unread.id, fresh_read.id}


def test_notify_truncates_content_and_skips_self() -> None:
    notifications = FakeNotificationRepository()
    service = NotificationService(notifications, FakeUserRepository())

    async def scenario():
        own = await service.notify("u", "u", NotificationType.FOLLOW)
        long = await service.notify("r", "s", NotificationType.COMMENT, content="x" * 500)
        return own, long

    own, long = asyncio.run(scenario())

    assert own is None
    assert len(long.content) == 200


def test_default_page_sizes_come_from_settings(client, register) -> None:
    token, _ = register("Ada", "Lovelace", "a@x.com")

    notes = client.get("/api/notifications", headers=auth(token)).json()["pagination"]
    feed = client.get("/api/posts").json()["pagination"]

    assert notes["limit"] == settings.NOTIFICATION_PAGE_SIZE
    assert feed["limit"] == settings.DEFAULT_PAGE_SIZE
