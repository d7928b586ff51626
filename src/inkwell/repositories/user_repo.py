"""Data access helpers for users, their social sets and bookmarks."""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy import delete, func, insert, or_, select
from sqlalchemy.orm import Session

from inkwell.models import (
    Bookmark,
    Follow,
    Post,
    PostStatus,
    User,
    UserFollower,
    UserFollowing,
)

__all__ = ["AuthorSummary", "UserRepository"]


@dataclass(frozen=True)
class AuthorSummary:
    """Denormalized author fields attached to ranked posts."""

    id: int
    name: str
    avatar_url: str


class UserRepository:
    """Reads and low-level writes for user-owned social state."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_id(self, user_id: int) -> User | None:
        """Return a user by primary key."""
        return self.session.get(User, user_id)

    def exists(self, user_id: int) -> bool:
        return self.session.execute(select(User.id).where(User.id == user_id)).first() is not None

    def search(self, text: str, limit: int) -> list[User]:
        """Case-insensitive substring match on name or email."""
        pattern = f"%{text.lower()}%"
        stmt = (
            select(User)
            .where(or_(func.lower(User.name).like(pattern), func.lower(User.email).like(pattern)))
            .order_by(User.id)
            .limit(limit)
        )
        return list(self.session.scalars(stmt))

    def author_summaries(self, user_ids: Iterable[int]) -> dict[int, AuthorSummary]:
        ids = set(user_ids)
        if not ids:
            return {}
        rows = self.session.execute(
            select(User.id, User.name, User.avatar_url).where(User.id.in_(ids))
        ).all()
        return {uid: AuthorSummary(id=uid, name=name, avatar_url=avatar) for uid, name, avatar in rows}

    # Denormalized follower / following sets

    def follower_ids(self, user_id: int) -> list[int]:
        stmt = (
            select(UserFollower.follower_id)
            .where(UserFollower.user_id == user_id)
            .order_by(UserFollower.follower_id)
        )
        return list(self.session.scalars(stmt))

    def following_ids(self, user_id: int) -> list[int]:
        stmt = (
            select(UserFollowing.following_id)
            .where(UserFollowing.user_id == user_id)
            .order_by(UserFollowing.following_id)
        )
        return list(self.session.scalars(stmt))

    def users_by_ids(self, user_ids: list[int]) -> list[User]:
        if not user_ids:
            return []
        users = {u.id: u for u in self.session.scalars(select(User).where(User.id.in_(user_ids)))}
        return [users[uid] for uid in user_ids if uid in users]

    def add_follower(self, user_id: int, follower_id: int) -> None:
        if not self._has(UserFollower, user_id=user_id, follower_id=follower_id):
            self.session.execute(
                insert(UserFollower).values(user_id=user_id, follower_id=follower_id)
            )

    def remove_follower(self, user_id: int, follower_id: int) -> None:
        self.session.execute(
            delete(UserFollower).where(
                UserFollower.user_id == user_id, UserFollower.follower_id == follower_id
            )
        )

    def add_following(self, user_id: int, following_id: int) -> None:
        if not self._has(UserFollowing, user_id=user_id, following_id=following_id):
            self.session.execute(
                insert(UserFollowing).values(user_id=user_id, following_id=following_id)
            )

    def remove_following(self, user_id: int, following_id: int) -> None:
        self.session.execute(
            delete(UserFollowing).where(
                UserFollowing.user_id == user_id, UserFollowing.following_id == following_id
            )
        )

    # Follow edge ledger

    def get_edge(self, follower_id: int, following_id: int) -> Follow | None:
        stmt = select(Follow).where(
            Follow.follower_id == follower_id, Follow.following_id == following_id
        )
        return self.session.scalars(stmt).first()

    def edges_touching(self, user_id: int) -> list[tuple[int, int]]:
        """Return (follower, following) pairs where ``user_id`` is on either end."""
        stmt = select(Follow.follower_id, Follow.following_id).where(
            or_(Follow.follower_id == user_id, Follow.following_id == user_id)
        )
        return [(a, b) for a, b in self.session.execute(stmt).all()]

    # Bookmarks

    def bookmarked_post_ids(self, user_id: int) -> list[int]:
        """Return bookmarked post ids in insertion order."""
        stmt = select(Bookmark.post_id).where(Bookmark.user_id == user_id).order_by(Bookmark.id)
        return list(self.session.scalars(stmt))

    def bookmarked_posts(self, user_id: int) -> list[Post]:
        """Bookmarked posts the user may still read: published ones and their own drafts."""
        stmt = (
            select(Post)
            .join(Bookmark, Bookmark.post_id == Post.id)
            .where(
                Bookmark.user_id == user_id,
                or_(Post.status == PostStatus.PUBLISHED, Post.author_id == user_id),
            )
            .order_by(Bookmark.id)
        )
        return list(self.session.scalars(stmt))

    def remove_bookmark(self, user_id: int, post_id: int) -> bool:
        result = self.session.execute(
            delete(Bookmark).where(Bookmark.user_id == user_id, Bookmark.post_id == post_id)
        )
        return result.rowcount > 0

    def add_bookmark(self, user_id: int, post_id: int) -> None:
        self.session.execute(insert(Bookmark).values(user_id=user_id, post_id=post_id))

    def _has(self, model: type, **keys: int) -> bool:
        stmt = select(model).filter_by(**keys)
        return self.session.execute(stmt).first() is not None
