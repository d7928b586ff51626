"""Follow graph maintenance.

The graph is stored twice: as rows in the ``follow`` edge ledger and as the
denormalized ``user_follower``/``user_following`` sets. Every follow change
goes through :class:`SocialGraphManager`, which writes the edge and both set
entries inside one savepoint so a failure leaves all three untouched.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from inkwell.core.errors import Conflict, InvalidOperation, NotFound
from inkwell.models import Follow, User
from inkwell.repositories.user_repo import UserRepository
from inkwell.services.locks import KeyedLocks, target_locks

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FollowResult:
    """Follow state after a toggle."""

    following: bool


@dataclass(frozen=True)
class GraphRepair:
    """Entries changed by a reconciliation pass."""

    added: int
    removed: int

    @property
    def total(self) -> int:
        return self.added + self.removed


class SocialGraphManager:
    """Owns follow edges and the follower/following sets."""

    def __init__(self, db: Session, locks: KeyedLocks | None = None) -> None:
        self.db = db
        self.users = UserRepository(db)
        self.locks = locks or target_locks

    def toggle_follow(self, actor_id: int, target_user_id: int) -> FollowResult:
        """Follow ``target_user_id`` if not already following, otherwise unfollow.

        Raises:
            InvalidOperation: If the actor targets themselves.
            NotFound: If the target user does not exist.
            Conflict: If the edge ledger rejects a duplicate follow.
        """
        if actor_id == target_user_id:
            raise InvalidOperation("You cannot follow yourself")
        if not self.users.exists(target_user_id):
            raise NotFound("User not found")

        with self.locks.hold(("user", actor_id), ("user", target_user_id)):
            edge = self.users.get_edge(actor_id, target_user_id)
            try:
                with self.db.begin_nested():
                    if edge is not None:
                        self._unlink(edge, actor_id, target_user_id)
                        following = False
                    else:
                        self._link(actor_id, target_user_id)
                        following = True
            except IntegrityError as err:
                logger.warning(
                    "Follow edge %s -> %s rejected by storage: %s",
                    actor_id,
                    target_user_id,
                    err.orig,
                )
                raise Conflict("Follow relationship already exists") from err
            self.db.commit()

        logger.debug(
            "User %s %s user %s",
            actor_id,
            "followed" if following else "unfollowed",
            target_user_id,
        )
        return FollowResult(following=following)

    def _link(self, follower_id: int, following_id: int) -> None:
        self.db.add(Follow(follower_id=follower_id, following_id=following_id))
        self.db.flush()
        self.users.add_following(follower_id, following_id)
        self.users.add_follower(following_id, follower_id)

    def _unlink(self, edge: Follow, follower_id: int, following_id: int) -> None:
        self.db.delete(edge)
        self.db.flush()
        self.users.remove_following(follower_id, following_id)
        self.users.remove_follower(following_id, follower_id)

    def is_following(self, follower_id: int, following_id: int) -> bool:
        return self.users.get_edge(follower_id, following_id) is not None

    def get_followers(self, user_id: int) -> list[User]:
        """Return the users in ``user_id``'s follower set."""
        if not self.users.exists(user_id):
            raise NotFound("User not found")
        return self.users.users_by_ids(self.users.follower_ids(user_id))

    def get_following(self, user_id: int) -> list[User]:
        """Return the users in ``user_id``'s following set."""
        if not self.users.exists(user_id):
            raise NotFound("User not found")
        return self.users.users_by_ids(self.users.following_ids(user_id))

    def find_divergence(self, user_id: int) -> list[str]:
        """Describe every place where the sets disagree with the edge ledger."""
        problems: list[str] = []
        edges = set(self.users.edges_touching(user_id))
        expected_following = {b for a, b in edges if a == user_id}
        expected_followers = {a for a, b in edges if b == user_id}

        following = set(self.users.following_ids(user_id))
        followers = set(self.users.follower_ids(user_id))
        for uid in sorted(expected_following - following):
            problems.append(f"following set of {user_id} is missing {uid}")
        for uid in sorted(following - expected_following):
            problems.append(f"following set of {user_id} has stale {uid}")
        for uid in sorted(expected_followers - followers):
            problems.append(f"followers set of {user_id} is missing {uid}")
        for uid in sorted(followers - expected_followers):
            problems.append(f"followers set of {user_id} has stale {uid}")
        for a, b in sorted(edges):
            if a == user_id and user_id not in self.users.follower_ids(b):
                problems.append(f"followers set of {b} is missing {a}")
            if b == user_id and user_id not in self.users.following_ids(a):
                problems.append(f"following set of {a} is missing {b}")
        return problems

    def reconcile(self, user_id: int) -> GraphRepair:
        """Rewrite the sets around ``user_id`` so they match the edge ledger.

        The ledger is treated as the source of truth. Running this twice in a
        row changes nothing the second time.
        """
        if not self.users.exists(user_id):
            raise NotFound("User not found")

        added = removed = 0
        with self.locks.hold(("user", user_id)):
            edges = set(self.users.edges_touching(user_id))
            expected_following = {b for a, b in edges if a == user_id}
            expected_followers = {a for a, b in edges if b == user_id}

            following = set(self.users.following_ids(user_id))
            for uid in expected_following - following:
                self.users.add_following(user_id, uid)
                added += 1
            for uid in following - expected_following:
                self.users.remove_following(user_id, uid)
                self.users.remove_follower(uid, user_id)
                removed += 1

            followers = set(self.users.follower_ids(user_id))
            for uid in expected_followers - followers:
                self.users.add_follower(user_id, uid)
                added += 1
            for uid in followers - expected_followers:
                self.users.remove_follower(user_id, uid)
                self.users.remove_following(uid, user_id)
                removed += 1

            # Mirror entries held on the other end of each edge.
            for follower_id, following_id in edges:
                if follower_id == user_id and user_id not in self.users.follower_ids(following_id):
                    self.users.add_follower(following_id, user_id)
                    added += 1
                if following_id == user_id and user_id not in self.users.following_ids(follower_id):
                    self.users.add_following(follower_id, user_id)
                    added += 1
            self.db.commit()

        repair = GraphRepair(added=added, removed=removed)
        if repair.total:
            logger.info(
                "Reconciled follow graph for user %s: %d added, %d removed",
                user_id,
                added,
                removed,
            )
        return repair
