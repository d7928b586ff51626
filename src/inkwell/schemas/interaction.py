"""Schemas for toggles, rankings, analytics and reports."""

from datetime import date, datetime

from pydantic import Field

from .common import CamelModel


class LikeOut(CamelModel):
    liked: bool
    like_count: int


class FollowOut(CamelModel):
    following: bool


class BookmarkOut(CamelModel):
    bookmarked: bool


class TagCountOut(CamelModel):
    tag: str
    count: int


class BasedOn(CamelModel):
    """Signals behind a recommendation list."""

    top_categories: list[str]
    top_tags: list[str]
    followed_authors: int


class DailyViewsOut(CamelModel):
    date: date
    views: int


class ReferrerOut(CamelModel):
    source: str
    visits: int


class PostAnalyticsOut(CamelModel):
    post_id: int
    title: str
    total_views: int
    total_likes: int
    total_comments: int
    unique_commenters: int
    engagement_rate: float
    reading_time: int
    published_at: datetime | None
    daily_views: list[DailyViewsOut]
    top_referrers: list[ReferrerOut]


class ReportCreate(CamelModel):
    content_type: str
    content_id: int
    reason: str | None = None
    description: str | None = Field(None, max_length=1000)


class GraphRepairOut(CamelModel):
    added: int
    removed: int
    problems: list[str]
