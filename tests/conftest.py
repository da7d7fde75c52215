from __future__ import annotations

from types import SimpleNamespace
from typing import Callable, Dict, Tuple

import pytest
from fastapi.testclient import TestClient

from network_service.api import dependencies
from network_service.config import settings
from network_service.main import app

from .fakes import (
    FakeCommentRepository, FakeNotificationRepository, FakePostRepository,
    FakeRelationshipRepository, FakeUserRepository
)


@pytest.fixture()
def repos() -> SimpleNamespace:
    return SimpleNamespace(
        users=FakeUserRepository(),
        posts=FakePostRepository(),
        comments=FakeCommentRepository(),
        relationships=FakeRelationshipRepository(),
        notifications=FakeNotificationRepository(),
    )


@pytest.fixture()
def client(repos: SimpleNamespace, monkeypatch: pytest.MonkeyPatch):
    # Cheap hashing keeps the suite fast
    monkeypatch.setattr(settings, "BCRYPT_ROUNDS", 4)

    app.dependency_overrides[dependencies.get_user_repository] = lambda: repos.users
    app.dependency_overrides[dependencies.get_post_repository] = lambda: repos.posts
    app.dependency_overrides[dependencies.get_comment_repository] = lambda: repos.comments
    app.dependency_overrides[dependencies.get_relationship_repository] = lambda: repos.relationships
    app.dependency_overrides[dependencies.get_notification_repository] = lambda: repos.notifications

    # Not entered as a context manager: the lifespan would connect to MongoDB
    yield TestClient(app)

    app.dependency_overrides.clear()


def auth(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def register(client: TestClient) -> Callable[..., Tuple[str, str]]:
    """Register a user and return (token, user_id)."""

    def _register(first_name: str, last_name: str, email: str, password: str = "secret123"):
        res = client.post(
            "/api/auth/register",
            json={"firstName": first_name, "lastName": last_name, "email": email, "password": password},
        )
        assert res.status_code == 201, res.text
        body = res.json()
        return body["token"], body["user"]["id"]

    return _register
