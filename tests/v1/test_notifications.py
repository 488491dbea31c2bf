# mypy: ignore-errors
"""Tests for notification endpoints."""

from fastapi import status


def _share(client, post_id, headers, emails=("bob@example.com",)):
    r = client.post(
        f"/api/v1/posts/{post_id}/share",
        json={"emails": list(emails), "permission": "comment"},
        headers=headers,
    )
    assert r.status_code == status.HTTP_200_OK


def test_inbox_and_counts(client, draft, editor, author_headers, editor_headers) -> None:
    _share(client, draft.id, author_headers)

    r = client.get("/api/v1/notifications", headers=editor_headers)
    [notification] = r.json()
    assert notification["type"] == "invite"
    assert notification["actor_name"] == "alice"
    assert notification["post_title"] == "Working title"

    assert client.get("/api/v1/notifications/count", headers=editor_headers).json() == {"count": 1}
    assert client.get("/api/v1/notifications/invites/count", headers=editor_headers).json() == {"count": 1}

    r = client.post("/api/v1/notifications/mark-read", json={"notification_id": notification["id"]}, headers=editor_headers)
    assert r.json() == {"updated": 1}
    assert client.get("/api/v1/notifications/count", headers=editor_headers).json() == {"count": 0}
    assert client.get("/api/v1/notifications/invites/count", headers=editor_headers).json() == {"count": 0}


def test_mark_all_read_without_body(client, draft, author_headers, editor_headers) -> None:
    _share(client, draft.id, author_headers)
    client.post(f"/api/v1/posts/{draft.id}/comments", json={"content": "hello"}, headers=editor_headers)

    assert client.get("/api/v1/notifications/count", headers=author_headers).json() == {"count": 1}
    r = client.post("/api/v1/notifications/mark-read", headers=author_headers)
    assert r.status_code == status.HTTP_200_OK
    assert r.json() == {"updated": 1}


def test_invite_badge_resets_and_returns_on_reshare(client, draft, author_headers, editor_headers) -> None:
    _share(client, draft.id, author_headers)

    r = client.post("/api/v1/notifications/invites/mark-viewed", headers=editor_headers)
    assert r.json() == {"updated": 1}
    assert client.get("/api/v1/notifications/invites/count", headers=editor_headers).json() == {"count": 0}

    r = client.get("/api/v1/posts/drafts", headers=editor_headers)
    assert r.json()["shared_with_me"][0]["is_viewed"] is True

    _share(client, draft.id, author_headers)
    assert client.get("/api/v1/notifications/invites/count", headers=editor_headers).json()["count"] >= 1


def test_requires_auth(client) -> None:
    assert client.get("/api/v1/notifications").status_code == status.HTTP_401_UNAUTHORIZED
