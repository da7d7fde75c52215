from __future__ import annotations

from network_service.config import settings

from .conftest import auth


def test_register_returns_token_and_public_profile(client) -> None:
    res = client.post(
        "/api/auth/register",
        json={"firstName": "Ada", "lastName": "Lovelace", "email": "A@X.com", "password": "secret123"},
    )

    assert res.status_code == 201
    body = res.json()
    assert body["success"] is True
    assert body["token"]
    user = body["user"]
    assert user["email"] == "a@x.com"
    assert user["fullName"] == "Ada Lovelace"
    assert user["followerCount"] == 0
    assert "passwordHash" not in user
    assert "password_hash" not in user


def test_duplicate_email_is_rejected(client, register) -> None:
    register("Ada", "Lovelace", "a@x.com")
    res = client.post(
        "/api/auth/register",
        json={"firstName": "Ada", "lastName": "Byron", "email": "a@x.com", "password": "secret123"},
    )

    assert res.status_code == 400
    assert res.json() == {"success": False, "message": "User already exists with this email"}


def test_validation_errors_are_field_level(client) -> None:
    res = client.post(
        "/api/auth/register",
        json={"firstName": "A", "lastName": "Lovelace", "email": "not-an-email", "password": "123"},
    )

    assert res.status_code == 400
    body = res.json()
    assert body["success"] is False
    fields = {error["field"] for error in body["errors"]}
    assert {"firstName", "email", "password"} <= fields


def test_login_does_not_reveal_which_check_failed(client, register) -> None:
    register("Ada", "Lovelace", "a@x.com")

    wrong_password = client.post("/api/auth/login", json={"email": "a@x.com", "password": "nope"})
    unknown_email = client.post("/api/auth/login", json={"email": "b@x.com", "password": "secret123"})

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json() == {"success": False, "message": "Invalid credentials"}

    ok = client.post("/api/auth/login", json={"email": "a@x.com", "password": "secret123"})
    assert ok.status_code == 200
    assert ok.json()["user"]["email"] == "a@x.com"


def test_deactivated_account_cannot_login(client, register) -> None:
    token, _ = register("Ada", "Lovelace", "a@x.com")
    assert client.delete("/api/users/me", headers=auth(token)).status_code == 200

    res = client.post("/api/auth/login", json={"email": "a@x.com", "password": "secret123"})
    assert res.status_code == 401
    assert res.json()["message"] == "Account is deactivated"

    # Existing tokens stop working as well
    assert client.get("/api/auth/me", headers=auth(token)).status_code == 401


def test_me_requires_a_valid_token(client, register) -> None:
    token, user_id = register("Ada", "Lovelace", "a@x.com")

    assert client.get("/api/auth/me").status_code == 401
    assert client.get("/api/auth/me", headers=auth("garbage")).status_code == 401

    res = client.get("/api/auth/me", headers=auth(token))
    assert res.status_code == 200
    assert res.json()["data"]["id"] == user_id


def test_update_profile_whitelists_fields(client, register) -> None:
    token, _ = register("Ada", "Lovelace", "a@x.com")

    res = client.put(
        "/api/auth/profile",
        json={"title": "Engineer", "skills": [" python ", "", "  "], "email": "evil@x.com"},
        headers=auth(token),
    )

    assert res.status_code == 200
    data = res.json()["data"]
    assert data["title"] == "Engineer"
    assert data["skills"] == ["python"]
    assert data["email"] == "a@x.com"

    empty = client.put("/api/auth/profile", json={}, headers=auth(token))
    assert empty.status_code == 400
    assert empty.json()["message"] == "No fields to update"


def test_change_password(client, register) -> None:
    token, _ = register("Ada", "Lovelace", "a@x.com")

    wrong = client.put(
        "/api/auth/change-password",
        json={"currentPassword": "nope", "newPassword": "newsecret"},
        headers=auth(token),
    )
    assert wrong.status_code == 400
    assert wrong.json()["message"] == "Current password is incorrect"

    ok = client.put(
        "/api/auth/change-password",
        json={"currentPassword": "secret123", "newPassword": "newsecret"},
        headers=auth(token),
    )
    assert ok.status_code == 200
    assert client.post("/api/auth/login", json={"email": "a@x.com", "password": "newsecret"}).status_code == 200


def test_password_reset_flow(client, register, monkeypatch) -> None:
    monkeypatch.setattr(settings, "DEBUG", True)
    register("Ada", "Lovelace", "a@x.com")

    res = client.post("/api/auth/forgot-password", json={"email": "a@x.com"})
    assert res.status_code == 200
    reset_token = res.json()["resetToken"]

    bad = client.put("/api/auth/reset-password/not-the-token", json={"password": "brandnew"})
    assert bad.status_code == 400
    assert bad.json()["message"] == "Invalid or expired reset token"

    ok = client.put(f"/api/auth/reset-password/{reset_token}", json={"password": "brandnew"})
    assert ok.status_code == 200
    assert client.post("/api/auth/login", json={"email": "a@x.com", "password": "brandnew"}).status_code == 200

    # Tokens are single use
    again = client.put(f"/api/auth/reset-password/{reset_token}", json={"password": "another1"})
    assert again.status_code == 400


def test_reset_token_hidden_outside_debug(client, register, monkeypatch) -> None:
    monkeypatch.setattr(settings, "DEBUG", False)
    register("Ada", "Lovelace", "a@x.com")

    res = client.post("/api/auth/forgot-password", json={"email": "a@x.com"})
    assert res.status_code == 200
    assert "resetToken" not in res.json()

    missing = client.post("/api/auth/forgot-password", json={"email": "b@x.com"})
    assert missing.status_code == 404


def test_logout_and_health(client, register) -> None:
    token, _ = register("Ada", "Lovelace", "a@x.com")

    assert client.post("/api/auth/logout", headers=auth(token)).json()["message"] == "Logged out successfully"
    assert client.get("/health").json()["status"] == "healthy"


def test_passwords_longer_than_bcrypt_input_are_field_errors(client, register) -> None:
    too_long = client.post(
        "/api/auth/register",
        json={"firstName": "Ada", "lastName": "Lovelace", "email": "a@x.com", "password": "p" * 80},
    )
    # 40 characters but 80 bytes once encoded
    wide = client.post(
        "/api/auth/register",
        json={"firstName": "Ada", "lastName": "Lovelace", "email": "a@x.com", "password": "é" * 40},
    )

    for res in (too_long, wide):
        assert res.status_code == 400
        assert [error["field"] for error in res.json()["errors"]] == ["password"]
    assert wide.json()["errors"][0]["message"] == "Password cannot be longer than 72 bytes"

    token, _ = register("Ada", "Lovelace", "a@x.com")
    change = client.put(
        "/api/auth/change-password",
        json={"currentPassword": "secret123", "newPassword": "p" * 80},
        headers=auth(token),
    )
    reset = client.put("/api/auth/reset-password/whatever", json={"password": "p" * 80})
    assert change.status_code == reset.status_code == 400

    login = client.post("/api/auth/login", json={"email": "a@x.com", "password": "p" * 80})
    assert login.status_code == 401
    assert login.json()["message"] == "Invalid credentials"


def test_concurrent_registration_with_same_email(client, repos, monkeypatch) -> None:
    async def nobody_yet(email):
        return False

    # Both requests pass the existence check, the unique email index decides
    monkeypatch.setattr(repos.users, "exists_by_email", nobody_yet)
    payload = {"firstName": "Ada", "lastName": "Lovelace", "email": "a@x.com", "password": "secret123"}

    assert client.post("/api/auth/register", json=payload).status_code == 201
    second = client.post("/api/auth/register", json=payload)

    assert second.status_code == 400
    assert second.json() == {"success": False, "message": "User already exists with this email"}
    assert len(repos.users.users) == 1
