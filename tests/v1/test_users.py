# mypy: ignore-errors
"""Tests for profile and follow endpoints."""

from fastapi import status


def test_profile_and_posts(client, author, published_post, draft) -> None:
    r = client.get(f"/api/v1/users/{author.id}")
    assert r.status_code == status.HTTP_200_OK
    assert r.json()["username"] == "alice"
    assert "email" not in r.json()

    r = client.get(f"/api/v1/users/{author.id}/posts")
    assert [p["id"] for p in r.json()] == [published_post.id]

    assert client.get("/api/v1/users/99999").status_code == status.HTTP_404_NOT_FOUND


def test_follow_flow(client, author, editor, editor_headers, author_headers) -> None:
    r = client.post(f"/api/v1/users/{author.id}/follow", headers=editor_headers)
    assert r.json() == {"following": True}

    assert client.get(f"/api/v1/users/{author.id}/follow-status", headers=editor_headers).json() == {
        "following": True
    }
    assert client.get(f"/api/v1/users/{author.id}/follow-status").json() == {"following": False}
    assert client.get(f"/api/v1/users/{author.id}/follow-counts").json() == {"followers": 1, "following": 0}
    assert [u["username"] for u in client.get(f"/api/v1/users/{author.id}/followers").json()] == ["bob"]
    assert [u["username"] for u in client.get(f"/api/v1/users/{editor.id}/following").json()] == ["alice"]

    r = client.delete(f"/api/v1/users/{author.id}/follow", headers=editor_headers)
    assert r.json() == {"following": False}
    assert client.get(f"/api/v1/users/{author.id}/follow-counts").json()["followers"] == 0


def test_cannot_follow_self(client, author, author_headers) -> None:
    r = client.post(f"/api/v1/users/{author.id}/follow", headers=author_headers)
    assert r.status_code == status.HTTP_400_BAD_REQUEST
    assert r.json()["detail"] == "You cannot follow yourself"
