"""Trending posts and popular tags.

Scoring and ranking are pure functions over snapshots read from the store;
:class:`EngagementAggregator` only performs the reads and wires them up.
"""
from __future__ import annotations

import calendar
import enum
from collections import Counter
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from inkwell.core.errors import InvalidOperation
from inkwell.core.settings import settings
from inkwell.db.time import utcnow
from inkwell.repositories.post_repo import PostRepository, PostSnapshot
from inkwell.repositories.user_repo import AuthorSummary, UserRepository

# A like is worth two views, a comment three.
VIEW_WEIGHT = 1
LIKE_WEIGHT = 2
COMMENT_WEIGHT = 3


class TrendingPeriod(str, enum.Enum):
    """Lookback windows accepted by the trending ranking."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"

    @classmethod
    def parse(cls, value: str | TrendingPeriod) -> TrendingPeriod:
        try:
            return cls(value)
        except ValueError as err:
            raise InvalidOperation(
                f"Invalid period '{value}'; expected one of: day, week, month"
            ) from err


@dataclass(frozen=True)
class TrendingEntry:
    """A ranked post with its score and author."""

    post: PostSnapshot
    engagement: int
    author: AuthorSummary


@dataclass(frozen=True)
class TagCount:
    tag: str
    count: int


def subtract_month(moment: datetime) -> datetime:
    """Step back one calendar month, clamping the day to the target month's length."""
    year, month = (moment.year, moment.month - 1) if moment.month > 1 else (moment.year - 1, 12)
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def window_start(period: TrendingPeriod, now: datetime) -> datetime:
    """Return the earliest ``published_at`` included for ``period``."""
    if period is TrendingPeriod.DAY:
        return now - timedelta(hours=24)
    if period is TrendingPeriod.WEEK:
        return now - timedelta(days=7)
    return subtract_month(now)


def engagement_score(views: int, likes: int, comments: int) -> int:
    """Weighted engagement: ``views + 2 * likes + 3 * comments``."""
    return VIEW_WEIGHT * views + LIKE_WEIGHT * likes + COMMENT_WEIGHT * comments


def rank_trending(
    snapshots: Iterable[PostSnapshot], limit: int
) -> list[tuple[PostSnapshot, int]]:
    """Order posts by engagement, highest first, and keep the top ``limit``.

    Ties fall back to the most recently published post, then the lowest id,
    so the same data always produces the same order.
    """
    scored = [
        (snap, engagement_score(snap.views, snap.like_count, snap.comment_count))
        for snap in snapshots
    ]
    scored.sort(
        key=lambda item: (
            -item[1],
            -(item[0].published_at.timestamp() if item[0].published_at else 0.0),
            item[0].id,
        )
    )
    return scored[: max(limit, 0)]


def count_tags(tag_lists: Iterable[Sequence[str]], limit: int) -> list[TagCount]:
    """Count tag occurrences across posts, most frequent first.

    Every occurrence counts, including a tag repeated within one post.
    Equal counts are ordered alphabetically.
    """
    counts: Counter[str] = Counter()
    for tags in tag_lists:
        counts.update(tags)
    ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [TagCount(tag=tag, count=count) for tag, count in ordered[: max(limit, 0)]]


class EngagementAggregator:
    """Read-only rankings computed from the current content store."""

    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow) -> None:
        self.posts = PostRepository(db)
        self.users = UserRepository(db)
        self.clock = clock

    def trending(
        self,
        period: str | TrendingPeriod = TrendingPeriod.WEEK,
        limit: int | None = None,
    ) -> list[TrendingEntry]:
        """Return the most engaging posts published within ``period``.

        Posts whose author no longer exists are dropped after truncation.
        """
        window = TrendingPeriod.parse(period)
        limit = settings.trending_default_limit if limit is None else limit
        since = window_start(window, self.clock())

        ranked = rank_trending(self.posts.published_snapshots(since), limit)
        authors = self.users.author_summaries(snap.author_id for snap, _ in ranked)
        return [
            TrendingEntry(post=snap, engagement=score, author=authors[snap.author_id])
            for snap, score in ranked
            if snap.author_id in authors
        ]

    def popular_tags(self, limit: int | None = None) -> list[TagCount]:
        """Return tag frequencies across all published posts."""
        limit = settings.popular_tags_default_limit if limit is None else limit
        return count_tags(self.posts.published_tag_lists(), limit)
