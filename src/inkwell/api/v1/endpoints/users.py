"""User endpoints: profiles, the follow graph and bookmarks."""

from typing import Any

from fastapi import APIRouter, Query

from inkwell.schemas.common import envelope
from inkwell.schemas.interaction import BookmarkOut, FollowOut, GraphRepairOut
from inkwell.schemas.user import UserStats
from inkwell.services.analytics import AnalyticsService
from inkwell.services.interactions import InteractionService
from inkwell.services.post_service import PostService
from inkwell.services.social_graph import SocialGraphManager
from inkwell.services.user_service import get_bookmarks, get_profile, search_users, to_summary

from ..dependencies import CurrentUserDep, SessionDep

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/search")
async def search(
    db: SessionDep,
    q: str | None = Query(None),
    limit: int = Query(10, ge=1, le=100),
) -> dict[str, Any]:
    users = search_users(db, q, limit)
    return envelope(users, count=len(users))


@router.get("/bookmarks")
async def list_bookmarks(current_user: CurrentUserDep, db: SessionDep) -> dict[str, Any]:
    """Return the caller's bookmarked posts in the order they were saved."""
    posts = get_bookmarks(db, current_user.id)
    data = PostService(db).to_out(posts, viewer_id=current_user.id)
    return envelope(data, count=len(data))


@router.get("/graph/check")
async def check_follow_graph(current_user: CurrentUserDep, db: SessionDep) -> dict[str, Any]:
    """Compare the caller's follow sets with the edge ledger and repair them."""
    graph = SocialGraphManager(db)
    problems = graph.find_divergence(current_user.id)
    repair = graph.reconcile(current_user.id)
    return envelope(GraphRepairOut(added=repair.added, removed=repair.removed, problems=problems))


@router.put("/follow/{user_id}")
async def toggle_follow(
    user_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    """Follow the user, or unfollow if already following."""
    result = InteractionService(db).toggle_follow(current_user.id, user_id)
    body = envelope(message="User followed" if result.following else "User unfollowed")
    body.update(FollowOut(following=result.following).model_dump(by_alias=True))
    return body


@router.put("/bookmark/{post_id}")
async def toggle_bookmark(
    post_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    """Bookmark the post, or remove the bookmark if present."""
    result = InteractionService(db).toggle_bookmark(current_user.id, post_id)
    body = envelope(message="Post bookmarked" if result.bookmarked else "Bookmark removed")
    body.update(BookmarkOut(bookmarked=result.bookmarked).model_dump(by_alias=True))
    return body


@router.get("/{user_id}")
async def get_user(user_id: int, db: SessionDep) -> dict[str, Any]:
    return envelope(get_profile(db, user_id))


@router.get("/{user_id}/stats")
async def get_user_stats(
    user_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
    stats_range: str = Query("week", alias="range"),
) -> dict[str, Any]:
    """Owner-only lifetime totals across the user's posts."""
    stats = AnalyticsService(db).author_stats(current_user.id, user_id, stats_range)
    return envelope(
        UserStats(
            total_posts=stats.total_posts,
            total_views=stats.total_views,
            total_likes=stats.total_likes,
            total_comments=stats.total_comments,
            range=stats.range.value,
        )
    )


@router.get("/{user_id}/followers")
async def get_followers(user_id: int, db: SessionDep) -> dict[str, Any]:
    users = [to_summary(u) for u in SocialGraphManager(db).get_followers(user_id)]
    return envelope(users, count=len(users))


@router.get("/{user_id}/following")
async def get_following(user_id: int, db: SessionDep) -> dict[str, Any]:
    users = [to_summary(u) for u in SocialGraphManager(db).get_following(user_id)]
    return envelope(users, count=len(users))
