"""Tests for like, bookmark and follow toggles."""

from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from inkwell.core.errors import NotFound
from inkwell.db.session import Base, enable_sqlite_foreign_keys
from inkwell.db.time import utcnow
from inkwell.models import Post, PostStatus, User
from inkwell.repositories.post_repo import PostRepository
from inkwell.repositories.user_repo import UserRepository
from inkwell.services.interactions import InteractionService, LikeTarget
from inkwell.services.locks import KeyedLocks


def test_like_toggle_pairs_cancel_out(db_session, make_user, make_post) -> None:
    user = make_user()
    post = make_post(make_user())
    service = InteractionService(db_session)

    first = service.toggle_like(user.id, post.id, LikeTarget.POST)
    second = service.toggle_like(user.id, post.id, LikeTarget.POST)
    third = service.toggle_like(user.id, post.id, LikeTarget.POST)

    assert (first.liked, first.like_count) == (True, 1)
    assert (second.liked, second.like_count) == (False, 0)
    assert (third.liked, third.like_count) == (True, 1)


def test_like_counts_each_actor_once(db_session, make_user, make_post) -> None:
    post = make_post(make_user())
    service = InteractionService(db_session)
    for user in (make_user(), make_user(), make_user()):
        result = service.toggle_like(user.id, post.id, LikeTarget.POST)
    assert result.like_count == 3


def test_comment_like(db_session, make_user, make_post, make_comment) -> None:
    user = make_user()
    comment = make_comment(make_user(), make_post(make_user()))
    result = InteractionService(db_session).toggle_like(user.id, comment.id, LikeTarget.COMMENT)
    assert result.liked is True
    assert result.like_count == 1


@pytest.mark.parametrize("kind", [LikeTarget.POST, LikeTarget.COMMENT])
def test_like_missing_target(db_session, make_user, kind) -> None:
    with pytest.raises(NotFound):
        InteractionService(db_session).toggle_like(make_user().id, 999, kind)


def test_bookmarks_keep_insertion_order(db_session, make_user, make_post) -> None:
    user = make_user()
    author = make_user()
    first, second, third = (make_post(author) for _ in range(3))
    service = InteractionService(db_session)

    for post in (second, first, third):
        assert service.toggle_bookmark(user.id, post.id).bookmarked is True
    assert service.toggle_bookmark(user.id, first.id).bookmarked is False

    assert UserRepository(db_session).bookmarked_post_ids(user.id) == [second.id, third.id]


def test_bookmark_missing_post(db_session, make_user) -> None:
    with pytest.raises(NotFound):
        InteractionService(db_session).toggle_bookmark(make_user().id, 12345)


def test_keyed_locks_serialize_same_key() -> None:
    locks = KeyedLocks()
    active: list[int] = []
    overlaps: list[int] = []

    def work(n: int) -> None:
        with locks.hold(("post", 1)):
            active.append(n)
            if len(active) > 1:
                overlaps.append(n)
            active.remove(n)

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(work, range(200)))

    assert overlaps == []


def test_keyed_locks_are_reentrant_and_order_independent() -> None:
    locks = KeyedLocks()
    with locks.hold(("user", 2), ("user", 1)):
        with locks.hold(("user", 1), ("user", 2)):
            pass


def test_concurrent_likes_from_separate_sessions(tmp_path) -> None:
    engine = create_engine(
        f"sqlite:///{tmp_path / 'likes.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

    with SessionLocal() as setup:
        author = User(name="Author", email="author@example.com")
        readers = [User(name=f"Reader {i}", email=f"reader{i}@example.com") for i in range(8)]
        setup.add_all([author, *readers])
        setup.flush()
        post = Post(
            author_id=author.id,
            title="Popular",
            slug="popular",
            content="Lorem ipsum",
            status=PostStatus.PUBLISHED,
            published_at=utcnow(),
        )
        setup.add(post)
        setup.commit()
        post_id = post.id
        reader_ids = [reader.id for reader in readers]

    def like(actor_id: int):
        with SessionLocal() as session:
            return InteractionService(session).toggle_like(actor_id, post_id, LikeTarget.POST)

    try:
        with ThreadPoolExecutor(max_workers=len(reader_ids)) as pool:
            results = list(pool.map(like, reader_ids))

        assert all(result.liked for result in results)
        # Each toggle saw every earlier like committed before counting.
        assert sorted(result.like_count for result in results) == list(range(1, 9))
        with SessionLocal() as session:
            assert PostRepository(session).like_count(post_id) == len(reader_ids)
    finally:
        engine.dispose()
