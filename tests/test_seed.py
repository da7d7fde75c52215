from __future__ import annotations

import asyncio

from network_service.application.graph_service import GraphService
from network_service.application.notification_service import NotificationService
from network_service.application.seed import SAMPLE_PASSWORD, seed_sample_data
from network_service.infrastructure import auth as security

from .fakes import (
    FakeCommentRepository, FakeNotificationRepository, FakePostRepository,
    FakeRelationshipRepository, FakeUserRepository
)


def test_seed_builds_sample_network_once(monkeypatch) -> None:
    monkeypatch.setattr(security.settings, "BCRYPT_ROUNDS", 4)
    users = FakeUserRepository()
    posts = FakePostRepository()
    comments = FakeCommentRepository()
    relationships = FakeRelationshipRepository()
    graph = GraphService(relationships, users, NotificationService(FakeNotificationRepository(), users))

    async def scenario():
        first = await seed_sample_data(users, posts, comments, relationships)
        second = await seed_sample_data(users, posts, comments, relationships)
        john = await users.find_by_email("john@example.com")
        stats = await graph.stats(john.id)
        return first, second, john, stats

    first, second, john, stats = asyncio.run(scenario())

    assert first == {"users": 4, "posts": 4, "connections": 4, "follows": 10, "likes": 10, "comments": 3}
    assert second is None
    assert len(users.users) == 4
    assert len(posts.posts) == 4

    assert john.company == "TechCorp"
    assert john.skills == ["JavaScript", "React", "Node.js", "MongoDB"]
    assert security.verify_password(SAMPLE_PASSWORD, john.password_hash)
    assert (stats.connections, stats.followers, stats.following) == (2, 3, 3)

    first_post = next(p for p in posts.posts.values() if p.author_id == john.id)
    assert first_post.hashtags == ["#webdev", "#performance"]
    assert first_post.like_count == 2
