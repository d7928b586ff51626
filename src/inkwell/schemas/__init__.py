"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .comment import CommentCreate, CommentOut, CommentUpdate
from .common import Pagination, envelope
from .interaction import (
    BasedOn,
    BookmarkOut,
    FollowOut,
    LikeOut,
    PostAnalyticsOut,
    ReportCreate,
    TagCountOut,
)
from .post import AuthorOut, PostCreate, PostOut, PostUpdate, TrendingPostOut
from .user import UserProfile, UserStats, UserSummary

__all__ = [
    "AuthorOut",
    "BasedOn",
    "BookmarkOut",
    "CommentCreate", "CommentOut", "CommentUpdate",
    "FollowOut",
    "LikeOut",
    "Pagination", "envelope",
    "PostAnalyticsOut",
    "PostCreate", "PostOut", "PostUpdate",
    "ReportCreate",
    "TagCountOut",
    "TrendingPostOut",
    "UserProfile", "UserStats", "UserSummary",
]
