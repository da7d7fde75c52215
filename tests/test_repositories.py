"""MongoDB repositories against an in-process mongomock server."""
from __future__ import annotations

import asyncio
from datetime import datetime, timedelta

import pytest
from bson import ObjectId
from mongomock_motor import AsyncMongoMockClient
from pymongo import ASCENDING

from network_service.domain.models import (
    NotificationType, Post, RelationshipKind, RelationshipStatus, Visibility
)
from network_service.infrastructure.database.connection import MongoDB
from network_service.infrastructure.database.repositories import (
    CommentRepository, NotificationRepository, PostRepository,
    RelationshipRepository, UserRepository
)

CONNECTION = RelationshipKind.CONNECTION
FOLLOW = RelationshipKind.FOLLOW
PENDING = RelationshipStatus.PENDING
ACCEPTED = RelationshipStatus.ACCEPTED


@pytest.fixture()
def mongo() -> MongoDB:
    db = MongoDB()
    db.db = AsyncMongoMockClient()["network_test"]

    async def unique_indexes():
        await db.users.create_index("email", unique=True)
        await db.relationships.create_index([("kind", ASCENDING), ("pair", ASCENDING)], unique=True)

    asyncio.run(unique_indexes())
    return db


async def make_user(users: UserRepository, name: str):
    return await users.create(first_name=name, last_name="Test", email=f"{name}@x.com", password_hash="h")


def test_users_unique_email_and_ordered_lookup(mongo) -> None:
    users = UserRepository(mongo)

    async def scenario():
        a, b, c = [await make_user(users, n) for n in ("ada", "bob", "cy")]
        duplicate = await users.create(first_name="Ada", last_name="Again", email="ADA@x.com", password_hash="h")
        await users.deactivate(b.id)
        found = await users.find_by_ids([c.id, "not-an-id", b.id, a.id])
        return a, c, duplicate, found

    a, c, duplicate, found = asyncio.run(scenario())

    assert duplicate is None
    assert [u.id for u in found] == [c.id, a.id]
    assert all(isinstance(u.id, str) for u in found)


def test_feed_query_applies_visibility(mongo) -> None:
    users = UserRepository(mongo)
    posts = PostRepository(mongo)

    async def scenario():
        author, friend, stranger = [await make_user(users, n) for n in ("ada", "bob", "cy")]
        for visibility in Visibility:
            await posts.create(Post(id="", author_id=author.id, content=visibility.value, visibility=visibility))
        await posts.create(Post(id="", author_id=stranger.id, content="elsewhere"))

        anonymous = await posts.find_visible(None, [])
        as_friend = await posts.find_visible(friend.id, [author.id])
        as_stranger = await posts.find_visible(stranger.id, [])
        as_author = await posts.find_visible(author.id, [], author_id=author.id)
        return anonymous, as_friend, as_stranger, as_author

    anonymous, as_friend, as_stranger, as_author = asyncio.run(scenario())

    def contents(page):
        return {p.content for p in page.items}

    assert contents(anonymous) == {"public", "elsewhere"}
    assert anonymous.total == 2
    assert contents(as_friend) == {"public", "connections", "elsewhere"}
    assert contents(as_stranger) == {"public", "elsewhere"}
    assert contents(as_author) == {"public", "connections", "private"}


def test_likes_and_shares_are_unique_per_user(mongo) -> None:
    posts = PostRepository(mongo)
    fan = str(ObjectId())

    async def scenario():
        post = await posts.create(Post(id="", author_id=str(ObjectId()), content="hello #x", hashtags=["#x"]))
        results = [
            await posts.add_like(post.id, fan),
            await posts.add_like(post.id, fan),
            await posts.add_share(post.id, fan),
            await posts.add_share(post.id, fan),
        ]
        liked = await posts.find_by_id(post.id)
        results.append(await posts.remove_like(post.id, fan))
        unliked = await posts.find_by_id(post.id)
        by_tag = await posts.search(hashtag="#x")
        return results, liked, unliked, by_tag

    results, liked, unliked, by_tag = asyncio.run(scenario())

    assert results == [True, False, True, False, True]
    assert [like.user_id for like in liked.likes] == [fan]
    assert [share.user_id for share in liked.shares] == [fan]
    assert unliked.like_count == 0
    assert by_tag.total == 1


def test_connection_pair_is_unique_in_either_direction(mongo) -> None:
    edges = RelationshipRepository(mongo)
    a, b = str(ObjectId()), str(ObjectId())

    async def scenario():
        first = await edges.create(CONNECTION, a, b, PENDING)
        crossing = await edges.create(CONNECTION, b, a, PENDING)
        follow = await edges.create(FOLLOW, a, b, ACCEPTED)
        follow_back = await edges.create(FOLLOW, b, a, ACCEPTED)
        await edges.update_status(CONNECTION, a, b, ACCEPTED)
        return (
            first, crossing, follow, follow_back,
            await edges.get(CONNECTION, a, b),
            await edges.list_sources(FOLLOW, b, ACCEPTED),
            await edges.list_targets(CONNECTION, a, PENDING),
        )

    first, crossing, follow, follow_back, stored, followers, pending = asyncio.run(scenario())

    assert first is not None
    assert crossing is None
    assert follow is not None and follow_back is not None
    assert stored.is_accepted()
    assert followers == [a]
    assert pending == []


def test_comments_group_replies_and_cascade(mongo) -> None:
    comments = CommentRepository(mongo)
    post_id, other_post, user = str(ObjectId()), str(ObjectId()), str(ObjectId())

    async def scenario():
        first = await comments.create_comment(post_id, user, "one")
        await comments.create_comment(post_id, user, "two")
        await comments.create_comment(other_post, user, "elsewhere")
        await comments.create_reply(post_id, first.id, user, "reply")
        listed = await comments.list_comments(post_id)
        counts = await comments.count_comments([post_id, other_post, str(ObjectId())])
        await comments.delete_for_post(post_id)
        after = await comments.list_comments(post_id)
        return first, listed, counts, after

    first, listed, counts, after = asyncio.run(scenario())

    replies = {c.content: [r.content for r in c.replies] for c in listed}
    assert replies == {"one": ["reply"], "two": []}
    assert list(counts.values()) == [2, 1, 0]
    assert after == []


def test_notifications_soft_delete_and_prune(mongo) -> None:
    notes = NotificationRepository(mongo)
    recipient, sender = str(ObjectId()), str(ObjectId())

    async def scenario():
        old_read = await notes.create(recipient, sender, NotificationType.LIKE, content="old read")
        old_unread = await notes.create(recipient, sender, NotificationType.LIKE, content="old unread")
        gone = await notes.create(recipient, sender, NotificationType.FOLLOW, content="deleted")

        long_ago = datetime.utcnow() - timedelta(days=45)
        for note in (old_read, old_unread):
            await mongo.notifications.update_one({"_id": ObjectId(note.id)}, {"$set": {"created_at": long_ago}})
        await notes.mark_read(old_read.id)
        await notes.mark_deleted(gone.id)

        page = await notes.find_for_recipient(recipient)
        unread = await notes.count_unread(recipient)
        hidden = await notes.find_one(gone.id, recipient)
        removed = await notes.delete_read_before(datetime.utcnow() - timedelta(days=30))
        remaining = await notes.find_for_recipient(recipient)
        return page, unread, hidden, removed, remaining, old_unread

    page, unread, hidden, removed, remaining, old_unread = asyncio.run(scenario())

    assert page.total == 2
    assert unread == 1
    assert hidden is None
    assert removed == 1
    assert [n.id for n in remaining.items] == [old_unread.id]
    assert remaining.items[0].post_id is None
