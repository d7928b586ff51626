"""Owner-only analytics for posts and authors."""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Protocol

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from inkwell.core.errors import Forbidden, InvalidOperation, NotFound
from inkwell.db.time import as_utc
from inkwell.models import Post, PostLike
from inkwell.repositories.comment_repo import CommentRepository
from inkwell.repositories.post_repo import PostRepository


@dataclass(frozen=True)
class DailyViews:
    date: date
    views: int


@dataclass(frozen=True)
class ReferrerVisits:
    source: str
    visits: int


class ViewEventSource(Protocol):
    """Per-view event data. No pipeline records view events yet."""

    def daily_views(self, post_id: int, days: int) -> list[DailyViews]: ...

    def top_referrers(self, post_id: int) -> list[ReferrerVisits]: ...


class NullViewEventSource:
    """Default source used until view events are collected: always empty."""

    def daily_views(self, post_id: int, days: int) -> list[DailyViews]:
        return []

    def top_referrers(self, post_id: int) -> list[ReferrerVisits]:
        return []


@dataclass(frozen=True)
class PostAnalytics:
    post_id: int
    title: str
    total_views: int
    total_likes: int
    total_comments: int
    unique_commenters: int
    engagement_rate: float
    reading_time: int
    published_at: datetime | None
    daily_views: list[DailyViews] = field(default_factory=list)
    top_referrers: list[ReferrerVisits] = field(default_factory=list)


class StatsRange(str, enum.Enum):
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


@dataclass(frozen=True)
class AuthorStats:
    total_posts: int
    total_views: int
    total_likes: int
    total_comments: int
    range: StatsRange


def engagement_rate(likes: int, comments: int, views: int) -> float:
    """Percentage of views that turned into a like or comment, to two decimals.

    Zero views gives 0.0.
    """
    if views <= 0:
        return 0.0
    return round((likes + comments) / views * 100, 2)


class AnalyticsService:
    """Per-post and per-author summaries visible only to the owner."""

    def __init__(self, db: Session, events: ViewEventSource | None = None) -> None:
        self.db = db
        self.posts = PostRepository(db)
        self.comments = CommentRepository(db)
        self.events = events or NullViewEventSource()

    def post_analytics(self, requester_id: int, post_id: int) -> PostAnalytics:
        """Summarize engagement on one post.

        Raises:
            NotFound: If the post does not exist.
            Forbidden: If the requester is not the post's author.
        """
        post = self.posts.get_by_id(post_id)
        if post is None:
            raise NotFound("Post not found")
        if post.author_id != requester_id:
            raise Forbidden("Not authorized to view analytics for this post")

        likes = self.posts.like_count(post.id)
        comments = self.comments.count_for_post(post.id)
        return PostAnalytics(
            post_id=post.id,
            title=post.title,
            total_views=post.views,
            total_likes=likes,
            total_comments=comments,
            unique_commenters=self.comments.distinct_author_count(post.id),
            engagement_rate=engagement_rate(likes, comments, post.views),
            reading_time=post.reading_time,
            published_at=as_utc(post.published_at),
            daily_views=self.events.daily_views(post.id, days=7),
            top_referrers=self.events.top_referrers(post.id),
        )

    def author_stats(
        self,
        requester_id: int,
        user_id: int,
        stats_range: str = StatsRange.WEEK,
    ) -> AuthorStats:
        """Lifetime totals across every post the user has written.

        ``stats_range`` is validated and echoed back; totals are not windowed
        because per-day counters are not recorded.
        """
        if requester_id != user_id:
            raise Forbidden("Not authorized to view these stats")
        try:
            window = StatsRange(stats_range)
        except ValueError as err:
            raise InvalidOperation(f"Invalid range '{stats_range}'") from err

        post_ids = list(self.db.scalars(select(Post.id).where(Post.author_id == user_id)))
        total_views = self.db.scalar(
            select(func.coalesce(func.sum(Post.views), 0)).where(Post.author_id == user_id)
        )
        total_likes = (
            self.db.scalar(
                select(func.count()).select_from(PostLike).where(PostLike.post_id.in_(post_ids))
            )
            if post_ids
            else 0
        )
        return AuthorStats(
            total_posts=len(post_ids),
            total_views=int(total_views or 0),
            total_likes=int(total_likes or 0),
            total_comments=self.comments.count_for_posts(post_ids),
            range=window,
        )
