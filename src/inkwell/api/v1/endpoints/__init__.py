"""API endpoint modules for version 1."""

from .comments import router as comments_router
from .interactions import router as interactions_router
from .posts import router as posts_router
from .users import router as users_router

__all__ = [
    "comments_router",
    "interactions_router",
    "posts_router",
    "users_router",
]
