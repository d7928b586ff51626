"""Comment-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from .common import CamelModel
from .post import AuthorOut


class CommentCreate(CamelModel):
    content: str = Field(..., min_length=1, max_length=1000)
    post: int
    parent_comment: int | None = None


class CommentUpdate(CamelModel):
    content: str = Field(..., min_length=1, max_length=1000)


class CommentOut(CamelModel):
    """A comment; top-level comments carry their replies."""

    id: int
    content: str
    post: int
    parent_comment: int | None
    author: AuthorOut | None
    like_count: int
    edited: bool
    edited_at: datetime | None
    created_at: datetime
    replies: list[CommentOut] | None = None


class UserCommentOut(CommentOut):
    """A comment listed on its author's page, with the post it belongs to."""

    post_title: str
    post_slug: str
