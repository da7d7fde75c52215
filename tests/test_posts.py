from __future__ import annotations

from .conftest import auth


def create_post(client, token, content="hello #world #World", **extra):
    res = client.post("/api/posts", json={"content": content, **extra}, headers=auth(token))
    assert res.status_code == 201, res.text
    return res.json()["data"]


def test_create_post_derives_hashtags(client, register) -> None:
    token, user_id = register("Ada", "Lovelace", "a@x.com")

    post = create_post(client, token, content="hello #world #World @grace")

    assert post["hashtags"] == ["#world"]
    assert post["mentions"] == ["@grace"]
    assert post["authorId"] == user_id
    assert post["author"]["fullName"] == "Ada Lovelace"
    assert post["likeCount"] == post["commentCount"] == post["shareCount"] == 0
    assert post["visibility"] == "public"


def test_post_validation(client, register) -> None:
    token, _ = register("Ada", "Lovelace", "a@x.com")

    too_long = client.post("/api/posts", json={"content": "x" * 2001}, headers=auth(token))
    bad_media = client.post("/api/posts", json={"content": "hi", "media": ["ftp://x"]}, headers=auth(token))
    bad_visibility = client.post("/api/posts", json={"content": "hi", "visibility": "friends"}, headers=auth(token))

    assert too_long.status_code == bad_media.status_code == bad_visibility.status_code == 400
    assert client.post("/api/posts", json={"content": "hi"}).status_code == 401


def test_like_toggle_is_idempotent_per_pair(client, register, repos) -> None:
    author_token, _ = register("Ada", "Lovelace", "a@x.com")
    fan_token, _ = register("Grace", "Hopper", "g@x.com")
    post = create_post(client, author_token)

    first = client.post(f"/api/posts/{post['id']}/like", headers=auth(fan_token)).json()
    assert first["liked"] is True
    assert first["likeCount"] == 1
    assert len(repos.posts.posts[post["id"]].likes) == 1

    second = client.post(f"/api/posts/{post['id']}/like", headers=auth(fan_token)).json()
    assert second["liked"] is False
    assert second["likeCount"] == 0

    third = client.post(f"/api/posts/{post['id']}/like", headers=auth(fan_token)).json()
    assert third["likeCount"] == 1


def test_second_share_is_rejected(client, register) -> None:
    author_token, _ = register("Ada", "Lovelace", "a@x.com")
    fan_token, _ = register("Grace", "Hopper", "g@x.com")
    post = create_post(client, author_token)

    first = client.post(f"/api/posts/{post['id']}/share", headers=auth(fan_token))
    assert first.status_code == 200
    assert first.json()["data"] == 1

    second = client.post(f"/api/posts/{post['id']}/share", headers=auth(fan_token))
    assert second.status_code == 400
    assert second.json() == {"success": False, "message": "Post already shared"}


def test_edit_keeps_history_and_requires_author(client, register) -> None:
    author_token, _ = register("Ada", "Lovelace", "a@x.com")
    other_token, _ = register("Grace", "Hopper", "g@x.com")
    post = create_post(client, author_token, content="short #a")

    forbidden = client.put(f"/api/posts/{post['id']}", json={"content": "hijack"}, headers=auth(other_token))
    assert forbidden.status_code == 403

    res = client.put(
        f"/api/posts/{post['id']}",
        json={"content": "a much longer body #B", "visibility": "connections"},
        headers=auth(author_token),
    )
    assert res.status_code == 200
    edited = res.json()["data"]
    assert edited["isEdited"] is True
    assert edited["hashtags"] == ["#b"]
    assert edited["visibility"] == "connections"
    assert [entry["content"] for entry in edited["editHistory"]] == ["short #a"]


def test_delete_removes_comments_but_keeps_notifications(client, register, repos) -> None:
    author_token, author_id = register("Ada", "Lovelace", "a@x.com")
    fan_token, _ = register("Grace", "Hopper", "g@x.com")
    post = create_post(client, author_token)

    comment = client.post(
        f"/api/posts/{post['id']}/comments", json={"content": "nice"}, headers=auth(fan_token)
    ).json()["data"]
    client.post(
        f"/api/comments/{post['id']}/{comment['id']}/reply", json={"content": "thanks"}, headers=auth(author_token)
    )

    assert client.delete(f"/api/posts/{post['id']}", headers=auth(fan_token)).status_code == 403
    res = client.delete(f"/api/posts/{post['id']}", headers=auth(author_token))
    assert res.status_code == 200

    assert client.get(f"/api/posts/{post['id']}").status_code == 404
    assert repos.comments.comments == {}
    assert repos.comments.replies == {}

    # The comment notification stays, pointing at the removed post
    notes = [n for n in repos.notifications.notifications.values() if n.recipient_id == author_id]
    assert [n.post_id for n in notes] == [post["id"]]


def test_get_post_includes_comments_and_viewer_state(client, register) -> None:
    author_token, _ = register("Ada", "Lovelace", "a@x.com")
    fan_token, _ = register("Grace", "Hopper", "g@x.com")
    post = create_post(client, author_token)

    client.post(f"/api/posts/{post['id']}/like", headers=auth(fan_token))
    comment = client.post(
        f"/api/posts/{post['id']}/comments", json={"content": "nice"}, headers=auth(fan_token)
    ).json()["data"]
    client.post(
        f"/api/comments/{post['id']}/{comment['id']}/reply", json={"content": "thanks"}, headers=auth(author_token)
    )

    detail = client.get(f"/api/posts/{post['id']}", headers=auth(fan_token)).json()["data"]
    assert detail["userLiked"] is True
    assert detail["userShared"] is False
    assert detail["commentCount"] == 1
    assert detail["comments"][0]["content"] == "nice"
    assert detail["comments"][0]["replies"][0]["content"] == "thanks"
    assert detail["comments"][0]["replyCount"] == 1

    anonymous = client.get(f"/api/posts/{post['id']}").json()["data"]
    assert anonymous["userLiked"] is False

    assert client.get("/api/posts/not-an-id").status_code == 404


def test_feed_respects_visibility(client, register) -> None:
    ada_token, ada_id = register("Ada", "Lovelace", "a@x.com")
    grace_token, grace_id = register("Grace", "Hopper", "g@x.com")
    alan_token, _ = register("Alan", "Turing", "t@x.com")

    create_post(client, ada_token, content="public", visibility="public")
    create_post(client, ada_token, content="network", visibility="connections")
    create_post(client, ada_token, content="secret", visibility="private")

    client.post(f"/api/users/{ada_id}/connect", headers=auth(grace_token))
    client.post(f"/api/users/{grace_id}/accept-connection", headers=auth(ada_token))

    def feed(token=None):
        headers = auth(token) if token else {}
        body = client.get("/api/posts", headers=headers).json()
        return [p["content"] for p in body["data"]], body["pagination"]

    anonymous, pagination = feed()
    assert anonymous == ["public"]
    assert pagination == {"page": 1, "limit": 10, "total": 1, "pages": 1}

    assert feed(alan_token)[0] == ["public"]
    assert feed(grace_token)[0] == ["network", "public"]
    assert feed(ada_token)[0] == ["secret", "network", "public"]

    # Same rules apply to a single post and to an author's post list
    user_posts = client.get(f"/api/posts/user/{ada_id}", headers=auth(alan_token)).json()["data"]
    assert [p["content"] for p in user_posts] == ["public"]


def test_feed_pagination(client, register) -> None:
    token, _ = register("Ada", "Lovelace", "a@x.com")
    for i in range(5):
        create_post(client, token, content=f"post {i}")

    body = client.get("/api/posts", params={"page": 2, "limit": 2}).json()
    assert [p["content"] for p in body["data"]] == ["post 2", "post 1"]
    assert body["pagination"] == {"page": 2, "limit": 2, "total": 5, "pages": 3}


def test_private_post_is_hidden_from_others(client, register) -> None:
    author_token, _ = register("Ada", "Lovelace", "a@x.com")
    other_token, _ = register("Grace", "Hopper", "g@x.com")
    post = create_post(client, author_token, content="secret", visibility="private")

    assert client.get(f"/api/posts/{post['id']}", headers=auth(other_token)).status_code == 404
    assert client.post(f"/api/posts/{post['id']}/like", headers=auth(other_token)).status_code == 404
    assert client.get(f"/api/posts/{post['id']}", headers=auth(author_token)).status_code == 200


def test_search_by_hashtag_with_or_without_hash(client, register) -> None:
    token, _ = register("Ada", "Lovelace", "a@x.com")
    create_post(client, token, content="learning #Python today")
    create_post(client, token, content="hidden #python", visibility="private")
    create_post(client, token, content="nothing here")

    for tag in ("python", "#PYTHON"):
        body = client.get("/api/posts/search", params={"hashtag": tag}).json()
        assert [p["content"] for p in body["data"]] == ["learning #Python today"]


def test_comment_delete_allows_comment_or_post_author(client, register) -> None:
    author_token, _ = register("Ada", "Lovelace", "a@x.com")
    commenter_token, _ = register("Grace", "Hopper", "g@x.com")
    third_token, _ = register("Alan", "Turing", "t@x.com")
    post = create_post(client, author_token)

    def comment(text):
        return client.post(
            f"/api/posts/{post['id']}/comments", json={"content": text}, headers=auth(commenter_token)
        ).json()["data"]["id"]

    first, second = comment("one"), comment("two")

    denied = client.delete(f"/api/comments/{post['id']}/{first}", headers=auth(third_token))
    assert denied.status_code == 403
    assert denied.json()["message"] == "Not authorized to delete this comment"

    assert client.delete(f"/api/comments/{post['id']}/{first}", headers=auth(author_token)).status_code == 200
    assert client.delete(f"/api/comments/{post['id']}/{second}", headers=auth(commenter_token)).status_code == 200

    remaining = client.get(f"/api/posts/{post['id']}/comments").json()["data"]
    assert remaining == []


def test_comment_update_is_author_only(client, register) -> None:
    author_token, _ = register("Ada", "Lovelace", "a@x.com")
    commenter_token, _ = register("Grace", "Hopper", "g@x.com")
    post = create_post(client, author_token)
    comment_id = client.post(
        f"/api/posts/{post['id']}/comments", json={"content": "typo"}, headers=auth(commenter_token)
    ).json()["data"]["id"]

    # The post author may delete but not rewrite someone else's comment
    denied = client.put(
        f"/api/comments/{post['id']}/{comment_id}", json={"content": "changed"}, headers=auth(author_token)
    )
    assert denied.status_code == 403

    ok = client.put(
        f"/api/comments/{post['id']}/{comment_id}", json={"content": "fixed"}, headers=auth(commenter_token)
    )
    assert ok.json()["data"]["content"] == "fixed"


def test_comment_and_reply_likes_and_reply_delete(client, register) -> None:
    author_token, _ = register("Ada", "Lovelace", "a@x.com")
    fan_token, _ = register("Grace", "Hopper", "g@x.com")
    post = create_post(client, author_token)
    comment_id = client.post(
        f"/api/posts/{post['id']}/comments", json={"content": "nice"}, headers=auth(fan_token)
    ).json()["data"]["id"]

    liked = client.post(f"/api/comments/{post['id']}/{comment_id}/like", headers=auth(author_token)).json()
    assert (liked["liked"], liked["likeCount"]) == (True, 1)
    unliked = client.post(f"/api/comments/{post['id']}/{comment_id}/like", headers=auth(author_token)).json()
    assert (unliked["liked"], unliked["likeCount"]) == (False, 0)

    replied = client.post(
        f"/api/comments/{post['id']}/{comment_id}/reply", json={"content": "thanks"}, headers=auth(fan_token)
    )
    assert replied.status_code == 201
    reply_id = replied.json()["data"]["replies"][0]["id"]

    reply_like = client.post(
        f"/api/comments/{post['id']}/{comment_id}/replies/{reply_id}/like", headers=auth(author_token)
    ).json()
    assert reply_like["likeCount"] == 1

    # Post author removes a reply written by someone else
    res = client.delete(f"/api/comments/{post['id']}/{comment_id}/replies/{reply_id}", headers=auth(author_token))
    assert res.status_code == 200

    missing = client.post(f"/api/comments/{post['id']}/unknown/like", headers=auth(author_token))
    assert missing.status_code == 404
    assert missing.json()["message"] == "Comment not found"
