"""Post-related Pydantic schemas."""

from datetime import datetime

from pydantic import Field, field_validator

from inkwell.models.post import PostCategory, PostStatus

from .common import CamelModel


def _clean_tags(tags: list[str] | None) -> list[str] | None:
    if tags is None:
        return None
    # Trim each tag but keep repeats; they count per occurrence.
    return [tag.strip() for tag in tags if tag and tag.strip()]


class PostCreate(CamelModel):
    """Schema for creating a new post."""

    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    excerpt: str | None = Field(None, max_length=300)
    featured_image: str | None = None
    category: PostCategory = PostCategory.OTHER
    tags: list[str] = Field(default_factory=list)
    status: PostStatus = PostStatus.DRAFT
    comments_enabled: bool = True

    @field_validator("title")
    @classmethod
    def _strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Please provide a title")
        return v

    @field_validator("tags")
    @classmethod
    def _strip_tags(cls, v: list[str]) -> list[str]:
        return _clean_tags(v) or []


class PostUpdate(CamelModel):
    """Partial update; likes and views are not client-settable."""

    title: str | None = Field(None, min_length=1, max_length=200)
    content: str | None = Field(None, min_length=1)
    excerpt: str | None = Field(None, max_length=300)
    featured_image: str | None = None
    category: PostCategory | None = None
    tags: list[str] | None = None
    status: PostStatus | None = None
    comments_enabled: bool | None = None

    @field_validator("title", "content", "category", "comments_enabled")
    @classmethod
    def _not_null(cls, v):
        # Omit a field to leave it unchanged; these columns cannot be cleared.
        if v is None:
            raise ValueError("Field cannot be null")
        return v

    @field_validator("tags")
    @classmethod
    def _strip_tags(cls, v: list[str] | None) -> list[str] | None:
        return _clean_tags(v)


class AuthorOut(CamelModel):
    id: int
    name: str
    avatar_url: str


class PostOut(CamelModel):
    """Post as returned by the API."""

    id: int
    title: str
    slug: str
    excerpt: str | None
    content: str | None = None
    featured_image: str | None
    category: str
    tags: list[str]
    status: str
    published_at: datetime | None
    views: int
    reading_time: int
    comments_enabled: bool
    like_count: int = 0
    comment_count: int | None = None
    liked: bool | None = None
    author: AuthorOut | None = None


class TrendingPostOut(CamelModel):
    """Trending entry: a post card with its engagement score."""

    id: int
    title: str
    slug: str
    excerpt: str | None
    featured_image: str | None
    category: str
    tags: list[str]
    views: int
    like_count: int
    comment_count: int
    engagement: int
    published_at: datetime | None
    author: AuthorOut
