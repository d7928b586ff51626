"""Data access layer over the content store."""

from .comment_repo import CommentRepository
from .post_repo import PostRepository, PostSnapshot
from .user_repo import AuthorSummary, UserRepository

__all__ = [
    "AuthorSummary",
    "CommentRepository",
    "PostRepository",
    "PostSnapshot",
    "UserRepository",
]
