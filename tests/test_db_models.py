"""Tests for storage-level rules declared on the models."""

from sqlalchemy import delete, func, select

from inkwell.models import (
    Bookmark,
    Comment,
    Follow,
    Post,
    PostLike,
    User,
    UserFollower,
    UserFollowing,
)
from inkwell.services.interactions import InteractionService, LikeTarget


def _count(db_session, model) -> int:
    return db_session.scalar(select(func.count()).select_from(model))


def test_deleting_account_cascades(db_session, make_user, make_post, make_comment) -> None:
    leaving, staying = make_user(), make_user()
    own_post = make_post(leaving)
    other_post = make_post(staying)
    make_comment(leaving, other_post)
    make_comment(staying, own_post)
    service = InteractionService(db_session)
    service.toggle_like(leaving.id, other_post.id, LikeTarget.POST)
    service.toggle_like(staying.id, own_post.id, LikeTarget.POST)
    service.toggle_bookmark(leaving.id, other_post.id)
    service.toggle_bookmark(staying.id, own_post.id)
    service.toggle_follow(leaving.id, staying.id)
    service.toggle_follow(staying.id, leaving.id)

    db_session.execute(delete(User).where(User.id == leaving.id))
    db_session.commit()

    assert db_session.scalars(select(Post.id)).all() == [other_post.id]
    assert _count(db_session, Comment) == 0
    assert _count(db_session, PostLike) == 0
    assert _count(db_session, Bookmark) == 0
    assert _count(db_session, Follow) == 0
    assert _count(db_session, UserFollower) == 0
    assert _count(db_session, UserFollowing) == 0
