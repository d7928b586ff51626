"""Toggle semantics for likes, bookmarks and follows.

Each toggle infers its direction from current membership. The membership
change itself is a single conditional DELETE or INSERT against a table keyed
by (target, actor), and the surrounding read-then-write runs under a lock
held per target so concurrent toggles on one target never lose updates.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from inkwell.core.errors import NotFound
from inkwell.models import PostStatus
from inkwell.repositories.comment_repo import CommentRepository
from inkwell.repositories.post_repo import PostRepository
from inkwell.repositories.user_repo import UserRepository
from inkwell.services.locks import KeyedLocks, target_locks
from inkwell.services.social_graph import FollowResult, SocialGraphManager

logger = logging.getLogger(__name__)


class LikeTarget(str, enum.Enum):
    """Kinds of content that carry a like set."""

    POST = "post"
    COMMENT = "comment"


@dataclass(frozen=True)
class LikeResult:
    """Like state after a toggle."""

    liked: bool
    like_count: int


@dataclass(frozen=True)
class BookmarkResult:
    """Bookmark state after a toggle."""

    bookmarked: bool


class InteractionService:
    """Idempotent-per-pair toggles shared by posts, comments and users."""

    def __init__(self, db: Session, locks: KeyedLocks | None = None) -> None:
        self.db = db
        self.locks = locks or target_locks
        self.posts = PostRepository(db)
        self.comments = CommentRepository(db)
        self.users = UserRepository(db)

    def toggle_like(self, actor_id: int, target_id: int, kind: LikeTarget) -> LikeResult:
        """Flip ``actor_id``'s membership in the target's like set.

        Raises:
            NotFound: If the post or comment does not exist.
        """
        if kind is LikeTarget.POST:
            repo: PostRepository | CommentRepository = self.posts
            missing = "Post not found"
        else:
            repo = self.comments
            missing = "Comment not found"

        with self.locks.hold((kind.value, target_id)):
            if repo.get_by_id(target_id) is None:
                raise NotFound(missing)

            liked = not repo.remove_like(target_id, actor_id)
            if liked:
                try:
                    with self.db.begin_nested():
                        repo.add_like(target_id, actor_id)
                except IntegrityError:
                    # Another process inserted the same pair first; the like stands.
                    logger.debug(
                        "Like on %s %s by %s already present", kind.value, target_id, actor_id
                    )
            self.db.commit()
            like_count = repo.like_count(target_id)

        logger.debug(
            "User %s %s %s %s (%d likes)",
            actor_id,
            "liked" if liked else "unliked",
            kind.value,
            target_id,
            like_count,
        )
        return LikeResult(liked=liked, like_count=like_count)

    def toggle_bookmark(self, actor_id: int, post_id: int) -> BookmarkResult:
        """Add or remove ``post_id`` in the actor's bookmark sequence.

        New bookmarks go to the end of the sequence; removing one leaves the
        relative order of the rest untouched. Someone else's draft cannot be
        bookmarked, but an existing bookmark on it can still be removed.
        """
        post = self.posts.get_by_id(post_id)
        if post is None:
            raise NotFound("Post not found")
        readable = post.status is PostStatus.PUBLISHED or post.author_id == actor_id

        with self.locks.hold(("bookmarks", actor_id)):
            bookmarked = not self.users.remove_bookmark(actor_id, post_id)
            if bookmarked:
                if not readable:
                    raise NotFound("Post not found")
                try:
                    with self.db.begin_nested():
                        self.users.add_bookmark(actor_id, post_id)
                except IntegrityError:
                    logger.debug("Bookmark %s by %s already present", post_id, actor_id)
            self.db.commit()

        logger.debug(
            "User %s %s post %s",
            actor_id,
            "bookmarked" if bookmarked else "unbookmarked",
            post_id,
        )
        return BookmarkResult(bookmarked=bookmarked)

    def toggle_follow(self, actor_id: int, target_user_id: int) -> FollowResult:
        """Delegate to the social graph, the only writer of follow state."""
        return SocialGraphManager(self.db, self.locks).toggle_follow(actor_id, target_user_id)
