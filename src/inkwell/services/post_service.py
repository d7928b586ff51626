"""Service-level helpers for authoring and reading posts."""
from __future__ import annotations

import logging
import math
import re
import secrets
import unicodedata
from dataclasses import dataclass

from sqlalchemy.orm import Session

from inkwell.core.errors import Forbidden, NotFound
from inkwell.models import Post, PostCategory, PostStatus
from inkwell.repositories.comment_repo import CommentRepository
from inkwell.repositories.post_repo import PostRepository
from inkwell.repositories.user_repo import AuthorSummary, UserRepository
from inkwell.schemas.post import AuthorOut, PostCreate, PostOut, PostUpdate

logger = logging.getLogger(__name__)

WORDS_PER_MINUTE = 200
EXCERPT_LENGTH = 300

_TAG_RE = re.compile(r"<[^>]*>")
_NON_SLUG_RE = re.compile(r"[^a-z0-9]+")


def slugify(title: str) -> str:
    """Lowercase ASCII slug; falls back to ``post`` when nothing survives."""
    ascii_title = (
        unicodedata.normalize("NFKD", title).encode("ascii", "ignore").decode("ascii")
    )
    slug = _NON_SLUG_RE.sub("-", ascii_title.lower()).strip("-")
    return slug or "post"


def reading_time(content: str) -> int:
    """Minutes to read ``content`` at 200 words per minute, rounded up."""
    return math.ceil(len(content.split()) / WORDS_PER_MINUTE)


def make_excerpt(content: str) -> str:
    plain = _TAG_RE.sub("", content)
    return plain[:EXCERPT_LENGTH] + "..."


@dataclass(frozen=True)
class PostPage:
    posts: list[Post]
    total: int
    page: int
    limit: int


class PostService:
    """Create, read, update and delete posts on behalf of a principal."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.posts = PostRepository(db)
        self.comments = CommentRepository(db)
        self.users = UserRepository(db)

    def _unique_slug(self, title: str) -> str:
        base = slugify(title)
        while True:
            candidate = f"{base}-{secrets.token_hex(4)}"
            if not self.posts.slug_exists(candidate):
                return candidate

    def _owned(self, requester_id: int, post_id: int) -> Post:
        post = self.posts.get_by_id(post_id)
        if post is None:
            raise NotFound("Post not found")
        if post.author_id != requester_id:
            raise Forbidden("Not authorized to modify this post")
        return post

    def create(self, author_id: int, data: PostCreate) -> Post:
        post = Post(
            author_id=author_id,
            title=data.title,
            slug=self._unique_slug(data.title),
            content=data.content,
            excerpt=data.excerpt or make_excerpt(data.content),
            featured_image=data.featured_image,
            category=data.category,
            tags=list(data.tags),
            status=PostStatus.DRAFT,
            reading_time=reading_time(data.content),
            comments_enabled=data.comments_enabled,
            views=0,
        )
        if data.status is PostStatus.PUBLISHED:
            post.mark_published()
        self.posts.add(post)
        self.db.commit()
        self.db.refresh(post)
        logger.info("User %s created post %s (%s)", author_id, post.id, post.status.value)
        return post

    def update(self, requester_id: int, post_id: int, data: PostUpdate) -> Post:
        post = self._owned(requester_id, post_id)
        changes = data.model_dump(exclude_unset=True)
        status = changes.pop("status", None)

        if "title" in changes and changes["title"] != post.title:
            post.slug = self._unique_slug(changes["title"])
        if "content" in changes:
            post.reading_time = reading_time(changes["content"])
            if not changes.get("excerpt") and not post.excerpt:
                post.excerpt = make_excerpt(changes["content"])
        for key, value in changes.items():
            if key == "tags":
                value = list(value or [])
            setattr(post, key, value)

        if status is PostStatus.PUBLISHED:
            post.mark_published()
        elif status is PostStatus.DRAFT:
            # Unpublishing keeps the original publication stamp.
            post.status = PostStatus.DRAFT

        self.db.commit()
        self.db.refresh(post)
        return post

    def delete(self, requester_id: int, post_id: int) -> None:
        post = self._owned(requester_id, post_id)
        self.posts.delete_cascade(post)
        self.db.commit()
        logger.info("User %s deleted post %s", requester_id, post_id)

    def read(self, post_id: int, viewer_id: int | None, *, count_view: bool = True) -> Post:
        """Return a post visible to ``viewer_id``, counting the view.

        Drafts are reported as missing to everyone but their author, and the
        author's own reads do not add views.
        """
        return self._view(self.posts.get_by_id(post_id), viewer_id, count_view)

    def read_by_slug(
        self, slug: str, viewer_id: int | None, *, count_view: bool = True
    ) -> Post:
        """Same as :meth:`read`, looking the post up by its slug."""
        return self._view(self.posts.get_by_slug(slug), viewer_id, count_view)

    def _view(self, post: Post | None, viewer_id: int | None, count_view: bool) -> Post:
        if post is None:
            raise NotFound("Post not found")
        if post.status is not PostStatus.PUBLISHED and post.author_id != viewer_id:
            raise NotFound("Post not found")
        if count_view and post.author_id != viewer_id:
            self.posts.increment_views(post.id)
            self.db.commit()
            self.db.refresh(post)
        return post

    def list_posts(
        self,
        *,
        viewer_id: int | None,
        page: int,
        limit: int,
        status: PostStatus | None = None,
        category: PostCategory | None = None,
        tags: list[str] | None = None,
        author_id: int | None = None,
        search: str | None = None,
    ) -> PostPage:
        """Filtered listing; drafts only ever show up for their own author."""
        statuses: list[PostStatus] = [PostStatus.PUBLISHED]
        if viewer_id is not None and status is PostStatus.DRAFT:
            statuses = [PostStatus.DRAFT]
            author_id = viewer_id
        posts, total = self.posts.search(
            statuses=statuses,
            category=category,
            tags=tags,
            author_id=author_id,
            text=search,
            page=page,
            limit=limit,
        )
        return PostPage(posts=posts, total=total, page=page, limit=limit)

    def by_author(
        self, author_id: int, viewer_id: int | None, page: int, limit: int
    ) -> PostPage:
        if not self.users.exists(author_id):
            raise NotFound("User not found")
        statuses = None if viewer_id == author_id else [PostStatus.PUBLISHED]
        posts, total = self.posts.search(
            statuses=statuses, author_id=author_id, page=page, limit=limit
        )
        return PostPage(posts=posts, total=total, page=page, limit=limit)

    def to_out(
        self,
        posts: list[Post],
        *,
        viewer_id: int | None = None,
        include_content: bool = False,
    ) -> list[PostOut]:
        """Convert ORM posts to API schemas with counts and author cards."""
        authors = self.users.author_summaries(post.author_id for post in posts)
        return [
            to_post_out(
                post,
                author=authors.get(post.author_id),
                like_count=self.posts.like_count(post.id),
                comment_count=self.comments.count_for_post(post.id),
                liked=(
                    self.posts.has_liked(post.id, viewer_id) if viewer_id is not None else None
                ),
                include_content=include_content,
            )
            for post in posts
        ]


def author_out(summary: AuthorSummary | None) -> AuthorOut | None:
    if summary is None:
        return None
    return AuthorOut(id=summary.id, name=summary.name, avatar_url=summary.avatar_url)


def to_post_out(
    post: Post,
    *,
    author: AuthorSummary | None,
    like_count: int,
    comment_count: int | None = None,
    liked: bool | None = None,
    include_content: bool = False,
) -> PostOut:
    """Convert a Post ORM instance to an API schema."""
    return PostOut(
        id=post.id,
        title=post.title,
        slug=post.slug,
        excerpt=post.excerpt,
        content=post.content if include_content else None,
        featured_image=post.featured_image,
        category=post.category.value,
        tags=list(post.tags or []),
        status=post.status.value,
        published_at=post.published_at,
        views=post.views,
        reading_time=post.reading_time,
        comments_enabled=post.comments_enabled,
        like_count=like_count,
        comment_count=comment_count,
        liked=liked,
        author=author_out(author),
    )
