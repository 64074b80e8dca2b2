"""Tests for comment submission and moderation endpoints."""

from fastapi import status

from quillpost.schemas.comment import Comment


def _submit(client, slug="chatty", content="Nice post!", **fields):
    payload = {"author": {"name": "Reader", "email": "reader@example.org"}, "content": content, **fields}
    return client.post(f"/api/v1/posts/{slug}/comments/", json=payload)


def test_submit_comment_awaits_moderation(client, make_post) -> None:
    post = make_post("chatty")

    response = _submit(client)

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["postId"] == post.id
    assert data["approved"] is False
    assert client.get("/api/v1/posts/chatty/comments/").json() == []


def test_submit_comment_on_unknown_post_is_404(client) -> None:
    assert _submit(client, slug="ghost").status_code == status.HTTP_404_NOT_FOUND


def test_submit_comment_on_draft_is_404(client, make_post) -> None:
    make_post("unreleased", status="draft")
    assert _submit(client, slug="unreleased").status_code == status.HTTP_404_NOT_FOUND


def test_admin_approves_comment(client, make_post, admin_headers) -> None:
    post = make_post("chatty")
    comment = _submit(client).json()

    response = client.post(
        f"/api/v1/comments/{post.id}/{comment['id']}/approve",
        headers=admin_headers,
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["approved"] is True
    visible = client.get("/api/v1/posts/chatty/comments/").json()
    assert [item["id"] for item in visible] == [comment["id"]]


def test_approve_with_wrong_post_is_404(client, make_post, admin_headers) -> None:
    make_post("chatty")
    comment = _submit(client).json()

    response = client.post(f"/api/v1/comments/not-the-post/{comment['id']}/approve", headers=admin_headers)

    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_moderation_requires_admin(client, make_post, author_headers) -> None:
    post = make_post("chatty")
    comment = _submit(client).json()

    assert client.get("/api/v1/comments/", headers=author_headers).status_code == status.HTTP_403_FORBIDDEN
    assert client.get("/api/v1/comments/").status_code == status.HTTP_401_UNAUTHORIZED
    response = client.delete(f"/api/v1/comments/{post.id}/{comment['id']}", headers=author_headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_admin_lists_and_deletes(client, make_post, admin_headers) -> None:
    post = make_post("chatty")
    first = _submit(client, content="first").json()
    _submit(client, content="second")

    listed = client.get("/api/v1/comments/", headers=admin_headers).json()
    deleted = client.delete(f"/api/v1/comments/{post.id}/{first['id']}", headers=admin_headers)

    assert len(listed) == 2
    assert deleted.status_code == status.HTTP_204_NO_CONTENT
    remaining = client.get("/api/v1/comments/", headers=admin_headers).json()
    assert [item["content"] for item in remaining] == ["second"]


def test_thread_separates_replies(client, make_post, store) -> None:
    post = make_post("chatty")
    for comment_id, created, parent in [
        ("top-old", "2024-01-01T00:00:00Z", None),
        ("top-new", "2024-01-05T00:00:00Z", None),
        ("reply-late", "2024-01-04T00:00:00Z", "top-old"),
        ("reply-early", "2024-01-02T00:00:00Z", "top-old"),
    ]:
        comment = Comment(
            id=comment_id,
            post_id=post.id,
            author={"name": "R", "email": "r@example.org"},
            content=comment_id,
            created_at=created,
            approved=True,
            parent_id=parent,
        )
        store.create("comments", comment.to_document())

    top = client.get("/api/v1/posts/chatty/comments/").json()
    replies = client.get("/api/v1/posts/chatty/comments/", params={"parentId": "top-old"}).json()

    assert [item["id"] for item in top] == ["top-new", "top-old"]
    assert [item["id"] for item in replies] == ["reply-early", "reply-late"]


def test_admin_lists_moderation_queue_per_post(client, make_post, admin_headers) -> None:
    post = make_post("chatty")
    make_post("quiet")
    pending = _submit(client, content="pending").json()
    accepted = _submit(client, content="accepted").json()
    _submit(client, slug="quiet", content="elsewhere")
    client.post(f"/api/v1/comments/{post.id}/{accepted['id']}/approve", headers=admin_headers)

    queue = client.get(f"/api/v1/comments/{post.id}", headers=admin_headers)
    approved = client.get(f"/api/v1/comments/{post.id}", params={"approved": "true"}, headers=admin_headers)

    assert queue.status_code == status.HTTP_200_OK
    assert [item["id"] for item in queue.json()] == [pending["id"]]
    assert [item["id"] for item in approved.json()] == [accepted["id"]]


def test_per_post_queue_requires_admin(client, make_post, author_headers) -> None:
    post = make_post("chatty")

    response = client.get(f"/api/v1/comments/{post.id}", headers=author_headers)

    assert response.status_code == status.HTTP_403_FORBIDDEN
