"""Data access helpers for working with posts."""
from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.orm import Session

from inkwell.db.time import as_utc
from inkwell.models import (
    Bookmark,
    Comment,
    CommentLike,
    Post,
    PostCategory,
    PostLike,
    PostStatus,
)

__all__ = ["PostRepository", "PostSnapshot"]


@dataclass(frozen=True)
class PostSnapshot:
    """Read-only view of a post with its interaction counts."""

    id: int
    author_id: int
    title: str
    slug: str
    excerpt: str | None
    featured_image: str | None
    category: str
    tags: tuple[str, ...]
    views: int
    like_count: int
    comment_count: int
    published_at: datetime | None


def _like_count_subquery():
    return (
        select(func.count())
        .select_from(PostLike)
        .where(PostLike.post_id == Post.id)
        .correlate(Post)
        .scalar_subquery()
    )


def _comment_count_subquery():
    return (
        select(func.count())
        .select_from(Comment)
        .where(Comment.post_id == Post.id)
        .correlate(Post)
        .scalar_subquery()
    )


def _matches(post: Post, needle: str | None, wanted: set[str]) -> bool:
    tags = post.tags or []
    if wanted and not wanted.intersection(tags):
        return False
    if needle:
        return (
            needle in post.title.lower()
            or needle in post.content.lower()
            or any(needle in tag.lower() for tag in tags)
        )
    return True


class PostRepository:
    """Thin wrapper around database access for post entities."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get_by_id(self, post_id: int) -> Post | None:
        """Return a post by identifier."""
        return self.session.get(Post, post_id)

    def get_by_slug(self, slug: str) -> Post | None:
        return self.session.scalars(select(Post).where(Post.slug == slug)).first()

    def add(self, post: Post) -> Post:
        """Stage a new post and flush so it receives an id."""
        self.session.add(post)
        self.session.flush()
        return post

    def slug_exists(self, slug: str) -> bool:
        return (
            self.session.execute(select(Post.id).where(Post.slug == slug)).first()
            is not None
        )

    def like_count(self, post_id: int) -> int:
        """Return the cardinality of the post's like set."""
        return int(
            self.session.scalar(
                select(func.count()).select_from(PostLike).where(PostLike.post_id == post_id)
            )
            or 0
        )

    def has_liked(self, post_id: int, user_id: int) -> bool:
        stmt = select(PostLike.post_id).where(
            PostLike.post_id == post_id, PostLike.user_id == user_id
        )
        return self.session.execute(stmt).first() is not None

    def remove_like(self, post_id: int, user_id: int) -> bool:
        """Delete the like row; True when a row was removed."""
        result = self.session.execute(
            delete(PostLike).where(PostLike.post_id == post_id, PostLike.user_id == user_id)
        )
        return result.rowcount > 0

    def add_like(self, post_id: int, user_id: int) -> None:
        self.session.execute(insert(PostLike).values(post_id=post_id, user_id=user_id))

    def increment_views(self, post_id: int) -> None:
        """Bump the view counter in place, without a read-modify-write."""
        self.session.execute(
            update(Post).where(Post.id == post_id).values(views=Post.views + 1)
        )

    def liked_post_ids(self, user_id: int) -> list[int]:
        stmt = select(PostLike.post_id).where(PostLike.user_id == user_id).order_by(
            PostLike.post_id
        )
        return list(self.session.scalars(stmt))

    def liked_posts(self, user_id: int) -> list[Post]:
        """Return every post the user currently likes, in id order."""
        stmt = (
            select(Post)
            .join(PostLike, PostLike.post_id == Post.id)
            .where(PostLike.user_id == user_id)
            .order_by(Post.id)
        )
        return list(self.session.scalars(stmt))

    def published_snapshots(self, since: datetime | None = None) -> list[PostSnapshot]:
        """Return published posts (optionally published at or after ``since``) with counts."""
        stmt = select(
            Post,
            _like_count_subquery().label("like_count"),
            _comment_count_subquery().label("comment_count"),
        ).where(Post.status == PostStatus.PUBLISHED)
        if since is not None:
            stmt = stmt.where(Post.published_at.is_not(None), Post.published_at >= since)
        rows = self.session.execute(stmt.order_by(Post.id)).all()
        return [
            self._snapshot(post, int(likes or 0), int(comments or 0))
            for post, likes, comments in rows
        ]

    def published_tag_lists(self) -> list[list[str]]:
        """Return the raw tag list of every published post."""
        stmt = select(Post.tags).where(Post.status == PostStatus.PUBLISHED).order_by(Post.id)
        return [list(tags or []) for tags in self.session.scalars(stmt)]

    def iter_recommendation_pool(
        self,
        *,
        exclude_author_id: int,
        exclude_post_ids: Iterable[int],
        batch_size: int = 200,
    ) -> Iterator[Post]:
        """Yield published posts not authored by the user and not in the excluded set.

        Posts come newest first by ``published_at`` with the id as a stable
        secondary key.
        """
        excluded = list(exclude_post_ids)
        stmt = select(Post).where(
            Post.status == PostStatus.PUBLISHED,
            Post.author_id != exclude_author_id,
        )
        if excluded:
            stmt = stmt.where(Post.id.not_in(excluded))
        stmt = stmt.order_by(Post.published_at.desc(), Post.id.desc())
        for partition in self.session.execute(stmt).scalars().partitions(batch_size):
            yield from partition

    def search(
        self,
        *,
        statuses: Iterable[PostStatus] | None,
        category: PostCategory | None = None,
        tags: list[str] | None = None,
        author_id: int | None = None,
        text: str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[Post], int]:
        """Filtered, paginated listing newest-published first.

        Tag filtering matches any of ``tags`` and runs in Python because the
        tag list is stored as JSON.
        """
        stmt = select(Post)
        if statuses is not None:
            stmt = stmt.where(Post.status.in_(list(statuses)))
        if category is not None:
            stmt = stmt.where(Post.category == category)
        if author_id is not None:
            stmt = stmt.where(Post.author_id == author_id)
        stmt = stmt.order_by(Post.published_at.desc(), Post.id.desc())

        needle = text.lower() if text else None
        wanted = set(tags or [])
        if not needle and not wanted:
            total = int(
                self.session.scalar(select(func.count()).select_from(stmt.subquery())) or 0
            )
            posts = list(self.session.scalars(stmt.offset((page - 1) * limit).limit(limit)))
            return posts, total

        matched = [
            post
            for post in self.session.scalars(stmt)
            if _matches(post, needle, wanted)
        ]
        start = (page - 1) * limit
        return matched[start:start + limit], len(matched)

    def delete_cascade(self, post: Post) -> None:
        """Remove a post together with its comments, likes and bookmark entries."""
        comment_ids = select(Comment.id).where(Comment.post_id == post.id)
        self.session.execute(delete(CommentLike).where(CommentLike.comment_id.in_(comment_ids)))
        # Replies first so the self-referencing key never dangles.
        self.session.execute(
            delete(Comment).where(Comment.post_id == post.id, Comment.parent_id.is_not(None))
        )
        self.session.execute(delete(Comment).where(Comment.post_id == post.id))
        self.session.execute(delete(PostLike).where(PostLike.post_id == post.id))
        self.session.execute(delete(Bookmark).where(Bookmark.post_id == post.id))
        self.session.delete(post)
        self.session.flush()

    @staticmethod
    def _snapshot(post: Post, like_count: int, comment_count: int) -> PostSnapshot:
        category = post.category
        return PostSnapshot(
            id=post.id,
            author_id=post.author_id,
            title=post.title,
            slug=post.slug,
            excerpt=post.excerpt,
            featured_image=post.featured_image,
            category=category.value if hasattr(category, "value") else str(category),
            tags=tuple(post.tags or ()),
            views=int(post.views or 0),
            like_count=like_count,
            comment_count=comment_count,
            published_at=as_utc(post.published_at),
        )
