"""Data access helpers for comments."""
from __future__ import annotations

from sqlalchemy import delete, func, insert, or_, select
from sqlalchemy.orm import Session

from inkwell.models import Comment, CommentLike, Post, PostStatus

__all__ = ["CommentRepository"]


class CommentRepository:
    """Thin wrapper around database access for comment entities."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_id(self, comment_id: int) -> Comment | None:
        return self.session.get(Comment, comment_id)

    def add(self, comment: Comment) -> Comment:
        self.session.add(comment)
        self.session.flush()
        return comment

    def for_post(self, post_id: int) -> list[Comment]:
        stmt = select(Comment).where(Comment.post_id == post_id).order_by(Comment.id)
        return list(self.session.scalars(stmt))

    def by_author(
        self, author_id: int, viewer_id: int | None, page: int, limit: int
    ) -> tuple[list[tuple[Comment, Post]], int]:
        """A user's comments with their posts, newest first.

        Comments on drafts are left out unless ``viewer_id`` wrote the draft.
        """
        visible = Post.status == PostStatus.PUBLISHED
        if viewer_id is not None:
            visible = or_(visible, Post.author_id == viewer_id)
        criteria = (Comment.author_id == author_id, visible)
        stmt = select(Comment, Post).join(Post, Post.id == Comment.post_id).where(*criteria)
        total = int(
            self.session.scalar(
                select(func.count(Comment.id))
                .join(Post, Post.id == Comment.post_id)
                .where(*criteria)
            )
            or 0
        )
        rows = self.session.execute(
            stmt.order_by(Comment.created_at.desc(), Comment.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).all()
        return [(comment, post) for comment, post in rows], total

    def count_for_post(self, post_id: int) -> int:
        return int(
            self.session.scalar(
                select(func.count()).select_from(Comment).where(Comment.post_id == post_id)
            )
            or 0
        )

    def distinct_author_count(self, post_id: int) -> int:
        return int(
            self.session.scalar(
                select(func.count(func.distinct(Comment.author_id))).where(
                    Comment.post_id == post_id
                )
            )
            or 0
        )

    def count_for_posts(self, post_ids: list[int]) -> int:
        if not post_ids:
            return 0
        return int(
            self.session.scalar(
                select(func.count()).select_from(Comment).where(Comment.post_id.in_(post_ids))
            )
            or 0
        )

    def like_counts(self, comment_ids: list[int]) -> dict[int, int]:
        if not comment_ids:
            return {}
        rows = self.session.execute(
            select(CommentLike.comment_id, func.count())
            .where(CommentLike.comment_id.in_(comment_ids))
            .group_by(CommentLike.comment_id)
        ).all()
        return {cid: int(cnt) for cid, cnt in rows}

    def like_count(self, comment_id: int) -> int:
        return self.like_counts([comment_id]).get(comment_id, 0)

    def remove_like(self, comment_id: int, user_id: int) -> bool:
        result = self.session.execute(
            delete(CommentLike).where(
                CommentLike.comment_id == comment_id, CommentLike.user_id == user_id
            )
        )
        return result.rowcount > 0

    def add_like(self, comment_id: int, user_id: int) -> None:
        self.session.execute(insert(CommentLike).values(comment_id=comment_id, user_id=user_id))

    def delete_with_replies(self, comment: Comment) -> None:
        """Remove a comment, its replies and the likes on all of them."""
        ids = [comment.id] + list(
            self.session.scalars(select(Comment.id).where(Comment.parent_id == comment.id))
        )
        self.session.execute(delete(CommentLike).where(CommentLike.comment_id.in_(ids)))
        self.session.execute(delete(Comment).where(Comment.parent_id == comment.id))
        self.session.execute(delete(Comment).where(Comment.id == comment.id))
        self.session.flush()
