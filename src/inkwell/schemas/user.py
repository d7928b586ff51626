"""User-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from .common import CamelModel


class UserSummary(CamelModel):
    """Public card for a user."""

    id: int
    name: str
    avatar_url: str
    bio: str | None = None


class UserProfile(UserSummary):
    """Profile page payload."""

    theme: str
    language: str
    created_at: datetime
    follower_count: int = Field(..., ge=0)
    following_count: int = Field(..., ge=0)
    post_count: int = Field(..., ge=0)
    followers: list[UserSummary] = Field(default_factory=list)
    following: list[UserSummary] = Field(default_factory=list)


class UserStats(CamelModel):
    """Owner-only totals."""

    total_posts: int
    total_views: int
    total_likes: int
    total_comments: int
    range: str
