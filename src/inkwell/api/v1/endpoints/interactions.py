"""Engagement endpoints: trending, popular tags, recommendations, analytics, reports."""

from typing import Any

from fastapi import APIRouter, Query

from inkwell.core.settings import settings
from inkwell.schemas.common import envelope
from inkwell.schemas.interaction import (
    BasedOn,
    DailyViewsOut,
    PostAnalyticsOut,
    ReferrerOut,
    ReportCreate,
    TagCountOut,
)
from inkwell.schemas.post import AuthorOut, TrendingPostOut
from inkwell.services.analytics import AnalyticsService
from inkwell.services.engagement import EngagementAggregator, TrendingPeriod
from inkwell.services.post_service import PostService
from inkwell.services.recommendation import RecommendationEngine
from inkwell.services.reports import submit_report

from ..dependencies import CurrentUserDep, SessionDep

router = APIRouter(prefix="/interactions", tags=["interactions"])


@router.get("/trending")
async def get_trending_posts(
    db: SessionDep,
    period: str = Query(TrendingPeriod.WEEK.value, description="day, week or month"),
    limit: int = Query(settings.trending_default_limit, ge=1, le=100),
) -> dict[str, Any]:
    """Return published posts ranked by weighted engagement within ``period``."""
    window = TrendingPeriod.parse(period)
    entries = EngagementAggregator(db).trending(window, limit)
    data = [
        TrendingPostOut(
            id=entry.post.id,
            title=entry.post.title,
            slug=entry.post.slug,
            excerpt=entry.post.excerpt,
            featured_image=entry.post.featured_image,
            category=entry.post.category,
            tags=list(entry.post.tags),
            views=entry.post.views,
            like_count=entry.post.like_count,
            comment_count=entry.post.comment_count,
            engagement=entry.engagement,
            published_at=entry.post.published_at,
            author=AuthorOut(
                id=entry.author.id,
                name=entry.author.name,
                avatar_url=entry.author.avatar_url,
            ),
        )
        for entry in entries
    ]
    return envelope(data, count=len(data), period=window.value)


@router.get("/tags/popular")
async def get_popular_tags(
    db: SessionDep,
    limit: int = Query(settings.popular_tags_default_limit, ge=1, le=100),
) -> dict[str, Any]:
    """Return tag occurrence counts across published posts."""
    tags = EngagementAggregator(db).popular_tags(limit)
    data = [TagCountOut(tag=t.tag, count=t.count) for t in tags]
    return envelope(data, count=len(data))


@router.get("/recommendations")
async def get_recommendations(
    current_user: CurrentUserDep,
    db: SessionDep,
    limit: int = Query(settings.recommendation_default_limit, ge=1, le=100),
) -> dict[str, Any]:
    """Return posts matching the caller's liked categories/tags or followed authors."""
    result = RecommendationEngine(db).recommend(current_user.id, limit)
    data = PostService(db).to_out(result.posts)
    based_on = BasedOn(
        top_categories=result.profile.top_categories,
        top_tags=result.profile.top_tags,
        followed_authors=len(result.profile.followed_author_ids),
    )
    return envelope(data, count=len(data), basedOn=based_on)


@router.get("/analytics/post/{post_id}")
async def get_post_analytics(
    post_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    """Return engagement analytics for a post owned by the caller."""
    stats = AnalyticsService(db).post_analytics(current_user.id, post_id)
    data = PostAnalyticsOut(
        post_id=stats.post_id,
        title=stats.title,
        total_views=stats.total_views,
        total_likes=stats.total_likes,
        total_comments=stats.total_comments,
        unique_commenters=stats.unique_commenters,
        engagement_rate=stats.engagement_rate,
        reading_time=stats.reading_time,
        published_at=stats.published_at,
        daily_views=[DailyViewsOut(date=d.date, views=d.views) for d in stats.daily_views],
        top_referrers=[ReferrerOut(source=r.source, visits=r.visits) for r in stats.top_referrers],
    )
    return envelope(data)


@router.post("/report")
async def report_content(
    report: ReportCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    """Flag a post or comment for review."""
    submit_report(
        db,
        reporter_id=current_user.id,
        content_type=report.content_type,
        content_id=report.content_id,
        reason=report.reason,
        description=report.description,
    )
    return envelope(message="Thank you for your report. We will review it shortly.")
