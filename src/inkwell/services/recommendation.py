"""Personalized post recommendations.

Interest signals come from what the user has liked (top categories, top
tags) and who they follow. A post qualifies if it matches any one signal;
qualifying posts are returned newest first.
"""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy.orm import Session

from inkwell.core.errors import NotFound
from inkwell.core.settings import settings
from inkwell.models import Post
from inkwell.repositories.post_repo import PostRepository
from inkwell.repositories.user_repo import UserRepository


@dataclass(frozen=True)
class InterestProfile:
    """Signals used to pick candidates, returned so callers can explain them."""

    top_categories: list[str]
    top_tags: list[str]
    followed_author_ids: frozenset[int]

    @property
    def is_empty(self) -> bool:
        return not (self.top_categories or self.top_tags or self.followed_author_ids)


@dataclass(frozen=True)
class Recommendation:
    posts: list[Post]
    profile: InterestProfile


def top_n(values: Iterable[str], n: int) -> list[str]:
    """Return the ``n`` most frequent values.

    Equal frequencies keep the order in which values were first seen.
    """
    counts: dict[str, int] = {}
    for value in values:
        counts[value] = counts.get(value, 0) + 1
    first_seen = {value: idx for idx, value in enumerate(counts)}
    ordered = sorted(counts, key=lambda value: (-counts[value], first_seen[value]))
    return ordered[: max(n, 0)]


def _category_value(post: Post) -> str:
    category = post.category
    return category.value if hasattr(category, "value") else str(category)


def build_profile(liked_posts: list[Post], following_ids: Iterable[int]) -> InterestProfile:
    """Derive interest signals from liked posts and the following set."""
    categories = top_n(
        (_category_value(post) for post in liked_posts if post.category),
        settings.recommendation_top_categories,
    )
    tags = top_n(
        (tag for post in liked_posts for tag in (post.tags or [])),
        settings.recommendation_top_tags,
    )
    return InterestProfile(
        top_categories=categories,
        top_tags=tags,
        followed_author_ids=frozenset(following_ids),
    )


def matches_profile(post: Post, profile: InterestProfile) -> bool:
    """True when the post satisfies at least one of the three signals."""
    if post.author_id in profile.followed_author_ids:
        return True
    if _category_value(post) in profile.top_categories:
        return True
    wanted = set(profile.top_tags)
    return any(tag in wanted for tag in (post.tags or []))


class RecommendationEngine:
    """Produce candidate posts for a user from their likes and follows."""

    def __init__(self, db: Session) -> None:
        self.posts = PostRepository(db)
        self.users = UserRepository(db)

    def recommend(self, user_id: int, limit: int | None = None) -> Recommendation:
        """Return up to ``limit`` published posts the user has neither written nor liked.

        A user with no likes and no follows has no signals and gets an empty
        list rather than a generic feed.
        """
        if not self.users.exists(user_id):
            raise NotFound("User not found")
        limit = settings.recommendation_default_limit if limit is None else limit

        liked = self.posts.liked_posts(user_id)
        profile = build_profile(liked, self.users.following_ids(user_id))

        picked: list[Post] = []
        if not profile.is_empty and limit > 0:
            pool = self.posts.iter_recommendation_pool(
                exclude_author_id=user_id,
                exclude_post_ids=[post.id for post in liked],
            )
            for post in pool:
                if matches_profile(post, profile):
                    picked.append(post)
                    if len(picked) >= limit:
                        break

        return Recommendation(posts=picked, profile=profile)
