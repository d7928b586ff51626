"""SQLAlchemy models for the Inkwell application."""

from .comment import Comment, CommentLike
from .follow import Follow
from .post import Post, PostCategory, PostLike, PostStatus
from .user import Bookmark, User, UserFollower, UserFollowing

__all__ = [
    "Bookmark",
    "Comment", "CommentLike",
    "Follow",
    "Post", "PostCategory", "PostLike", "PostStatus",
    "User", "UserFollower", "UserFollowing",
]
