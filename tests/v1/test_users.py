"""Tests for user endpoints: profiles, follows, bookmarks and stats."""

from fastapi import status

from inkwell.models import PostStatus


def test_get_profile(client, test_user) -> None:
    response = client.get(f"/api/v1/users/{test_user.id}")
    assert response.status_code == status.HTTP_200_OK
    data = response.json()["data"]
    assert data["name"] == "Test User"
    assert data["followerCount"] == 0
    assert "email" not in data


def test_get_missing_profile(client) -> None:
    assert client.get("/api/v1/users/9999").status_code == status.HTTP_404_NOT_FOUND


def test_follow_toggle_is_symmetric(client, auth_token, test_user, other_user) -> None:
    url = f"/api/v1/users/follow/{other_user.id}"
    followed = client.put(url, headers=auth_token).json()
    assert followed["following"] is True

    followers = client.get(f"/api/v1/users/{other_user.id}/followers").json()
    following = client.get(f"/api/v1/users/{test_user.id}/following").json()
    assert [u["id"] for u in followers["data"]] == [test_user.id]
    assert [u["id"] for u in following["data"]] == [other_user.id]

    unfollowed = client.put(url, headers=auth_token).json()
    assert unfollowed["following"] is False
    assert client.get(f"/api/v1/users/{other_user.id}/followers").json()["count"] == 0


def test_cannot_follow_self(client, auth_token, test_user) -> None:
    response = client.put(f"/api/v1/users/follow/{test_user.id}", headers=auth_token)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["message"] == "You cannot follow yourself"


def test_follow_missing_user(client, auth_token) -> None:
    assert client.put("/api/v1/users/follow/9999", headers=auth_token).status_code == 404


def test_follow_requires_auth(client, other_user) -> None:
    assert client.put(f"/api/v1/users/follow/{other_user.id}").status_code == 401


def test_invalid_token_rejected(client, other_user) -> None:
    headers = {"Authorization": "Bearer not-a-token"}
    assert client.put(f"/api/v1/users/follow/{other_user.id}", headers=headers).status_code == 401


def test_bookmarks_in_insertion_order(client, auth_token, other_user, make_post) -> None:
    first, second = make_post(other_user), make_post(other_user)
    assert client.put(f"/api/v1/users/bookmark/{second.id}", headers=auth_token).json()["bookmarked"]
    assert client.put(f"/api/v1/users/bookmark/{first.id}", headers=auth_token).json()["bookmarked"]

    body = client.get("/api/v1/users/bookmarks", headers=auth_token).json()
    assert [p["id"] for p in body["data"]] == [second.id, first.id]

    removed = client.put(f"/api/v1/users/bookmark/{second.id}", headers=auth_token).json()
    assert removed["bookmarked"] is False


def test_search_users(client, make_user) -> None:
    make_user("Ada Lovelace")
    make_user("Alan Turing")

    body = client.get("/api/v1/users/search", params={"q": "ada"}).json()
    assert [u["name"] for u in body["data"]] == ["Ada Lovelace"]
    assert client.get("/api/v1/users/search").status_code == status.HTTP_400_BAD_REQUEST


def test_stats_owner_only(client, auth_token, other_auth_token, test_user, make_post) -> None:
    make_post(test_user, views=7)
    url = f"/api/v1/users/{test_user.id}/stats"

    data = client.get(url, params={"range": "month"}, headers=auth_token).json()["data"]
    assert data["totalPosts"] == 1
    assert data["totalViews"] == 7
    assert data["range"] == "month"

    assert client.get(url, headers=other_auth_token).status_code == status.HTTP_403_FORBIDDEN
    assert client.get(url, params={"range": "x"}, headers=auth_token).status_code == 400


def test_graph_check_reports_clean_graph(client, auth_token, other_user) -> None:
    client.put(f"/api/v1/users/follow/{other_user.id}", headers=auth_token)
    data = client.get("/api/v1/users/graph/check", headers=auth_token).json()["data"]
    assert data == {"added": 0, "removed": 0, "problems": []}


def test_cannot_bookmark_someone_elses_draft(client, auth_token, other_user, make_post) -> None:
    draft = make_post(other_user, status=PostStatus.DRAFT)
    response = client.put(f"/api/v1/users/bookmark/{draft.id}", headers=auth_token)
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert client.get("/api/v1/users/bookmarks", headers=auth_token).json()["count"] == 0


def test_own_draft_can_be_bookmarked(client, auth_token, test_user, make_post) -> None:
    draft = make_post(test_user, status=PostStatus.DRAFT)
    assert client.put(f"/api/v1/users/bookmark/{draft.id}", headers=auth_token).json()["bookmarked"]
    body = client.get("/api/v1/users/bookmarks", headers=auth_token).json()
    assert [p["id"] for p in body["data"]] == [draft.id]


def test_unpublished_bookmark_hidden_but_removable(client, auth_token, other_auth_token, test_post) -> None:
    client.put(f"/api/v1/users/bookmark/{test_post.id}", headers=auth_token)
    client.put(f"/api/v1/posts/{test_post.id}", json={"status": "draft"}, headers=other_auth_token)

    assert client.get("/api/v1/users/bookmarks", headers=auth_token).json()["count"] == 0
    removed = client.put(f"/api/v1/users/bookmark/{test_post.id}", headers=auth_token)
    assert removed.status_code == status.HTTP_200_OK
    assert removed.json()["bookmarked"] is False
