"""SQLAlchemy models for posts and post likes."""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from inkwell.db.session import Base
from inkwell.db.time import utcnow


class PostCategory(str, enum.Enum):
    """Closed set of categories a post may be filed under."""

    TECHNOLOGY = "Technology"
    TRAVEL = "Travel"
    FOOD = "Food"
    LIFESTYLE = "Lifestyle"
    BUSINESS = "Business"
    HEALTH = "Health"
    ENTERTAINMENT = "Entertainment"
    OTHER = "Other"


class PostStatus(str, enum.Enum):
    """Publication state of a post."""

    DRAFT = "draft"
    PUBLISHED = "published"


class Post(Base):
    """Article authored by exactly one user."""

    __tablename__ = "post"
    __table_args__ = (
        CheckConstraint("views >= 0", name="ck_post_views_non_negative"),
        Index("ix_post_status_published_at", "status", "published_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    author_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    excerpt: Mapped[str | None] = mapped_column(String(310), nullable=True)
    featured_image: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[PostCategory] = mapped_column(
        Enum(PostCategory, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=PostCategory.OTHER,
    )
    # Kept as a list: a tag repeated within one post is counted per occurrence.
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    status: Mapped[PostStatus] = mapped_column(
        Enum(PostStatus, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=PostStatus.DRAFT,
    )
    # Set once, on the first transition to published.
    published_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    reading_time: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    comments_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    def mark_published(self, when: datetime | None = None) -> None:
        """Move the post to published, stamping ``published_at`` only the first time."""
        self.status = PostStatus.PUBLISHED
        if self.published_at is None:
            self.published_at = when or utcnow()


class PostLike(Base):
    """Membership of a user in a post's like set."""

    __tablename__ = "post_like"

    # Composite primary key prevents duplicate likes from the same user.
    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
