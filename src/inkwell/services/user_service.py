"""Read helpers for user profiles, search and bookmarks."""
from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from inkwell.core.errors import InvalidOperation, NotFound
from inkwell.models import Post, PostStatus, User
from inkwell.repositories.user_repo import UserRepository
from inkwell.schemas.user import UserProfile, UserSummary

__all__ = [
    "get_profile",
    "search_users",
    "get_bookmarks",
    "to_summary",
]


def to_summary(user: User) -> UserSummary:
    return UserSummary(id=user.id, name=user.name, avatar_url=user.avatar_url, bio=user.bio)


def get_profile(db: Session, user_id: int) -> UserProfile:
    """Return a profile with its follower/following sets and published post count."""
    repo = UserRepository(db)
    user = repo.get_by_id(user_id)
    if user is None:
        raise NotFound("User not found")

    followers = repo.users_by_ids(repo.follower_ids(user_id))
    following = repo.users_by_ids(repo.following_ids(user_id))
    post_count = db.scalar(
        select(func.count())
        .select_from(Post)
        .where(Post.author_id == user_id, Post.status == PostStatus.PUBLISHED)
    )
    return UserProfile(
        id=user.id,
        name=user.name,
        avatar_url=user.avatar_url,
        bio=user.bio,
        theme=user.theme,
        language=user.language,
        created_at=user.created_at,
        follower_count=len(followers),
        following_count=len(following),
        post_count=int(post_count or 0),
        followers=[to_summary(u) for u in followers],
        following=[to_summary(u) for u in following],
    )


def search_users(db: Session, text: str | None, limit: int) -> list[UserSummary]:
    if not text or not text.strip():
        raise InvalidOperation("Search query is required")
    return [to_summary(u) for u in UserRepository(db).search(text.strip(), limit)]


def get_bookmarks(db: Session, user_id: int) -> list[Post]:
    """Bookmarked posts in the order they were bookmarked."""
    return UserRepository(db).bookmarked_posts(user_id)
