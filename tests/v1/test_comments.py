"""Tests for comment endpoints."""

from fastapi import status

from inkwell.models import PostStatus


def _comment(client, headers, post_id, content="Great read", parent=None):
    payload = {"content": content, "post": post_id}
    if parent is not None:
        payload["parentComment"] = parent
    return client.post("/api/v1/comments/", json=payload, headers=headers)


def test_create_and_list_thread(client, auth_token, other_auth_token, test_post) -> None:
    first = _comment(client, auth_token, test_post.id, "first").json()["data"]
    second = _comment(client, other_auth_token, test_post.id, "second").json()["data"]
    reply = _comment(client, other_auth_token, test_post.id, "reply", parent=first["id"])
    assert reply.status_code == status.HTTP_201_CREATED

    body = client.get(f"/api/v1/comments/post/{test_post.id}").json()

    assert body["count"] == 2
    assert [c["id"] for c in body["data"]] == [second["id"], first["id"]]
    assert [r["content"] for r in body["data"][1]["replies"]] == ["reply"]


def test_reply_to_reply_rejected(client, auth_token, test_post) -> None:
    root = _comment(client, auth_token, test_post.id).json()["data"]
    reply = _comment(client, auth_token, test_post.id, parent=root["id"]).json()["data"]
    response = _comment(client, auth_token, test_post.id, parent=reply["id"])
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_comments_disabled(client, auth_token, other_user, make_post) -> None:
    post = make_post(other_user, comments_enabled=False)
    assert _comment(client, auth_token, post.id).status_code == status.HTTP_403_FORBIDDEN


def test_comment_on_missing_post(client, auth_token) -> None:
    assert _comment(client, auth_token, 9999).status_code == status.HTTP_404_NOT_FOUND


def test_edit_and_delete_owner_only(client, auth_token, other_auth_token, test_post) -> None:
    comment = _comment(client, auth_token, test_post.id).json()["data"]
    url = f"/api/v1/comments/{comment['id']}"

    assert client.put(url, json={"content": "x"}, headers=other_auth_token).status_code == 403
    edited = client.put(url, json={"content": "fixed typo"}, headers=auth_token).json()["data"]
    assert edited["content"] == "fixed typo"
    assert edited["edited"] is True

    assert client.delete(url, headers=other_auth_token).status_code == 403
    assert client.delete(url, headers=auth_token).status_code == 200
    assert client.get(f"/api/v1/comments/post/{test_post.id}").json()["count"] == 0


def test_comment_like_toggle(client, auth_token, other_auth_token, test_post) -> None:
    comment = _comment(client, auth_token, test_post.id).json()["data"]
    url = f"/api/v1/comments/{comment['id']}/like"

    assert client.put(url, headers=other_auth_token).json()["likeCount"] == 1
    assert client.put(url, headers=auth_token).json()["likeCount"] == 2
    result = client.put(url, headers=other_auth_token).json()
    assert (result["liked"], result["likeCount"]) == (False, 1)


def test_like_missing_comment(client, auth_token) -> None:
    response = client.put("/api/v1/comments/777/like", headers=auth_token)
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["message"] == "Comment not found"


def test_list_user_comments(client, auth_token, other_auth_token, test_user, test_post) -> None:
    older = _comment(client, auth_token, test_post.id, "older").json()["data"]
    newer = _comment(client, auth_token, test_post.id, "newer").json()["data"]
    _comment(client, other_auth_token, test_post.id, "not mine")

    body = client.get(f"/api/v1/comments/user/{test_user.id}", params={"limit": 1}).json()

    assert body["total"] == 2
    assert body["pagination"] == {"page": 1, "pages": 2}
    assert [c["id"] for c in body["data"]] == [newer["id"]]
    assert body["data"][0]["postTitle"] == "Test Post"
    assert body["data"][0]["postSlug"] == test_post.slug

    second_page = client.get(
        f"/api/v1/comments/user/{test_user.id}", params={"limit": 1, "page": 2}
    ).json()
    assert [c["id"] for c in second_page["data"]] == [older["id"]]


def test_user_comments_on_drafts_hidden(
    client, auth_token, other_auth_token, test_user, other_user, test_post, make_post, make_comment
) -> None:
    draft = make_post(other_user, status=PostStatus.DRAFT)
    make_comment(test_user, draft)
    _comment(client, auth_token, test_post.id)

    public = client.get(f"/api/v1/comments/user/{test_user.id}").json()
    for_draft_author = client.get(
        f"/api/v1/comments/user/{test_user.id}", headers=other_auth_token
    ).json()

    assert public["total"] == 1
    assert for_draft_author["total"] == 2


def test_user_comments_unknown_user(client) -> None:
    assert client.get("/api/v1/comments/user/9999").status_code == status.HTTP_404_NOT_FOUND
