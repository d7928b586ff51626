"""SQLAlchemy models for users and their denormalized social state."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from inkwell.db.session import Base
from inkwell.db.time import utcnow

DEFAULT_AVATAR_URL = "https://ui-avatars.com/api/?name=Inkwell"


class User(Base):
    """Registered account.

    Credentials live with the auth service; the core only needs identity and
    profile fields. Follower/following sets and bookmarks are stored in the
    companion tables below.
    """

    __tablename__ = "user_account"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    bio: Mapped[str | None] = mapped_column(String(500), nullable=True)
    avatar_url: Mapped[str] = mapped_column(Text, nullable=False, default=DEFAULT_AVATAR_URL)
    theme: Mapped[str] = mapped_column(String(16), nullable=False, default="light")
    language: Mapped[str] = mapped_column(String(8), nullable=False, default="en")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )


class UserFollower(Base):
    """Membership of ``follower_id`` in the followers set of ``user_id``."""

    __tablename__ = "user_follower"
    __table_args__ = (
        CheckConstraint("user_id != follower_id", name="ck_user_follower_not_self"),
    )

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
    )
    follower_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
    )


class UserFollowing(Base):
    """Membership of ``following_id`` in the following set of ``user_id``."""

    __tablename__ = "user_following"
    __table_args__ = (
        CheckConstraint("user_id != following_id", name="ck_user_following_not_self"),
    )

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
    )
    following_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
    )


class Bookmark(Base):
    """Entry in a user's bookmark sequence.

    The surrogate key grows with every insert, so ordering by ``id`` yields
    insertion order and removing a row leaves the others in place.
    """

    __tablename__ = "bookmark"
    __table_args__ = (
        UniqueConstraint("user_id", "post_id", name="uq_bookmark_user_post"),
        Index("ix_bookmark_user_id", "user_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        nullable=False,
    )
    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
