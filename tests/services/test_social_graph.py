"""Tests for the follow graph and its repair pass."""

import pytest
from sqlalchemy import select

from inkwell.core.errors import Conflict, InvalidOperation, NotFound
from inkwell.models import Follow
from inkwell.repositories.user_repo import UserRepository
from inkwell.services.social_graph import SocialGraphManager


def test_follow_updates_both_sets(db_session, make_user) -> None:
    a, b = make_user(), make_user()
    graph = SocialGraphManager(db_session)
    repo = UserRepository(db_session)

    assert graph.toggle_follow(a.id, b.id).following is True
    assert repo.following_ids(a.id) == [b.id]
    assert repo.follower_ids(b.id) == [a.id]
    assert graph.is_following(a.id, b.id)
    assert not graph.is_following(b.id, a.id)

    assert graph.toggle_follow(a.id, b.id).following is False
    assert repo.following_ids(a.id) == []
    assert repo.follower_ids(b.id) == []
    assert repo.get_edge(a.id, b.id) is None


def test_cannot_follow_self(db_session, make_user) -> None:
    a = make_user()
    with pytest.raises(InvalidOperation):
        SocialGraphManager(db_session).toggle_follow(a.id, a.id)


def test_follow_missing_user(db_session, make_user) -> None:
    with pytest.raises(NotFound):
        SocialGraphManager(db_session).toggle_follow(make_user().id, 9999)


def test_followers_and_following_lists(db_session, make_user) -> None:
    a, b, c = make_user(), make_user(), make_user()
    graph = SocialGraphManager(db_session)
    graph.toggle_follow(a.id, c.id)
    graph.toggle_follow(b.id, c.id)
    graph.toggle_follow(c.id, a.id)

    assert {u.id for u in graph.get_followers(c.id)} == {a.id, b.id}
    assert [u.id for u in graph.get_following(c.id)] == [a.id]
    with pytest.raises(NotFound):
        graph.get_followers(4040)


def test_reconcile_restores_sets_from_edges(db_session, make_user) -> None:
    a, b = make_user(), make_user()
    graph = SocialGraphManager(db_session)
    repo = UserRepository(db_session)
    graph.toggle_follow(a.id, b.id)

    # Simulate a partial write that lost the follower entry.
    repo.remove_follower(b.id, a.id)
    db_session.commit()
    assert graph.find_divergence(a.id) == [f"followers set of {b.id} is missing {a.id}"]

    repair = graph.reconcile(a.id)

    assert repair.added == 1
    assert repo.follower_ids(b.id) == [a.id]
    assert graph.find_divergence(a.id) == []
    assert graph.reconcile(a.id).total == 0


def test_reconcile_drops_entries_without_edges(db_session, make_user) -> None:
    a, b = make_user(), make_user()
    repo = UserRepository(db_session)
    repo.add_following(a.id, b.id)
    repo.add_follower(b.id, a.id)
    db_session.commit()

    repair = SocialGraphManager(db_session).reconcile(a.id)

    assert repair.removed == 1
    assert repo.following_ids(a.id) == []
    assert repo.follower_ids(b.id) == []


def test_duplicate_edge_is_a_conflict_and_leaves_graph_intact(
    db_session, make_user, monkeypatch
) -> None:
    a, b = make_user(), make_user()
    graph = SocialGraphManager(db_session)
    repo = UserRepository(db_session)
    graph.toggle_follow(a.id, b.id)

    # Another writer won the race: the edge exists but this request did not see it.
    monkeypatch.setattr(UserRepository, "get_edge", lambda self, follower_id, following_id: None)
    with pytest.raises(Conflict) as excinfo:
        graph.toggle_follow(a.id, b.id)
    monkeypatch.undo()

    assert excinfo.value.status_code == 409
    edges = db_session.execute(select(Follow.follower_id, Follow.following_id)).all()
    assert [tuple(edge) for edge in edges] == [(a.id, b.id)]
    assert repo.following_ids(a.id) == [b.id]
    assert repo.follower_ids(b.id) == [a.id]
    assert graph.find_divergence(a.id) == []
