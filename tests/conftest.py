# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import datetime, timedelta
from itertools import count
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")

from inkwell.core.security import create_access_token
from inkwell.db.session import Base, enable_sqlite_foreign_keys
from inkwell.db.session import get_db as app_get_session
from inkwell.db.time import utcnow
from inkwell.main import app as fastapi_app
from inkwell.models import Comment, Post, PostCategory, PostStatus, User

TEST_DB_URL = "sqlite://"

_USER_COUNTER = count(1)
_POST_COUNTER = count(1)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()

        # Services commit, so each test clears every table afterwards.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Return a factory that persists users with unique emails."""

    def _make(name: str | None = None, **fields: Any) -> User:
        n = next(_USER_COUNTER)
        user = User(
            name=name or f"User {n}",
            email=fields.pop("email", f"user{n}@example.com"),
            **fields,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture()
def make_post(db_session: Session) -> Callable[..., Post]:
    """Return a factory for posts; published unless ``status`` says otherwise.

    ``age`` places ``published_at`` that far in the past.
    """

    def _make(
        author: User,
        *,
        title: str | None = None,
        category: PostCategory = PostCategory.OTHER,
        tags: list[str] | None = None,
        status: PostStatus = PostStatus.PUBLISHED,
        views: int = 0,
        age: timedelta = timedelta(hours=1),
        published_at: datetime | None = None,
        comments_enabled: bool = True,
    ) -> Post:
        n = next(_POST_COUNTER)
        post = Post(
            author_id=author.id,
            title=title or f"Post {n}",
            slug=f"post-{n}",
            content="Lorem ipsum dolor sit amet",
            excerpt="Lorem ipsum",
            category=category,
            tags=list(tags or []),
            status=status,
            views=views,
            reading_time=1,
            comments_enabled=comments_enabled,
        )
        if status is PostStatus.PUBLISHED:
            post.published_at = published_at or (utcnow() - age)
        db_session.add(post)
        db_session.commit()
        db_session.refresh(post)
        return post

    return _make


@pytest.fixture()
def make_comment(db_session: Session) -> Callable[..., Comment]:
    def _make(author: User, post: Post, content: str = "Nice post", parent: Comment | None = None) -> Comment:
        comment = Comment(
            content=content,
            author_id=author.id,
            post_id=post.id,
            parent_id=parent.id if parent else None,
        )
        db_session.add(comment)
        db_session.commit()
        db_session.refresh(comment)
        return comment

    return _make


def auth_headers(user: User) -> dict[str, str]:
    token = create_access_token(user.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def headers_for() -> Callable[[User], dict[str, str]]:
    """Return a helper building authorization headers for any user."""
    return auth_headers


@pytest.fixture()
def test_user(make_user: Callable[..., User]) -> User:
    """Create and return the primary test user."""
    return make_user("Test User")


@pytest.fixture()
def other_user(make_user: Callable[..., User]) -> User:
    """Create and return a second persisted user."""
    return make_user("Other User")


@pytest.fixture()
def auth_token(test_user: User) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    return auth_headers(test_user)


@pytest.fixture()
def other_auth_token(other_user: User) -> dict[str, str]:
    """Return authorization headers for the secondary test user."""
    return auth_headers(other_user)


@pytest.fixture()
def test_post(make_post: Callable[..., Post], other_user: User) -> Post:
    """A published post written by ``other_user``."""
    return make_post(other_user, title="Test Post", tags=["python"])
