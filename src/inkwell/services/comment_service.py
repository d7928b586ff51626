"""Comment threads on posts.

Threads are two levels deep: top-level comments and their replies. A reply
must point at a top-level comment of the same post.
"""
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from inkwell.core.errors import Forbidden, InvalidOperation, NotFound
from inkwell.db.time import utcnow
from inkwell.models import Comment
from inkwell.repositories.comment_repo import CommentRepository
from inkwell.repositories.post_repo import PostRepository
from inkwell.repositories.user_repo import UserRepository
from inkwell.schemas.comment import CommentCreate, CommentOut, UserCommentOut
from inkwell.services.post_service import author_out

logger = logging.getLogger(__name__)


class CommentService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.comments = CommentRepository(db)
        self.posts = PostRepository(db)
        self.users = UserRepository(db)

    def create(self, author_id: int, data: CommentCreate) -> Comment:
        """Add a comment or reply.

        Raises:
            NotFound: If the post or parent comment does not exist.
            Forbidden: If comments are disabled on the post.
            InvalidOperation: If the parent belongs to another post or is itself a reply.
        """
        post = self.posts.get_by_id(data.post)
        if post is None:
            raise NotFound("Post not found")
        if not post.comments_enabled:
            raise Forbidden("Comments are disabled for this post")

        if data.parent_comment is not None:
            parent = self.comments.get_by_id(data.parent_comment)
            if parent is None:
                raise NotFound("Parent comment not found")
            if parent.post_id != post.id:
                raise InvalidOperation("Parent comment does not belong to this post")
            if parent.parent_id is not None:
                raise InvalidOperation("Replies can only be made to top-level comments")

        comment = self.comments.add(
            Comment(
                content=data.content,
                author_id=author_id,
                post_id=post.id,
                parent_id=data.parent_comment,
            )
        )
        self.db.commit()
        self.db.refresh(comment)
        logger.debug("User %s commented %s on post %s", author_id, comment.id, post.id)
        return comment

    def by_author(
        self, author_id: int, viewer_id: int | None, page: int, limit: int
    ) -> tuple[list[UserCommentOut], int]:
        if not self.users.exists(author_id):
            raise NotFound("User not found")
        rows, total = self.comments.by_author(author_id, viewer_id, page, limit)
        likes = self.comments.like_counts([comment.id for comment, _ in rows])
        author = self.users.author_summaries([author_id]).get(author_id)
        data = [
            UserCommentOut(
                **self.to_out(comment, likes.get(comment.id, 0), author).model_dump(),
                post_title=post.title,
                post_slug=post.slug,
            )
            for comment, post in rows
        ]
        return data, total

    def _owned(self, requester_id: int, comment_id: int) -> Comment:
        comment = self.comments.get_by_id(comment_id)
        if comment is None:
            raise NotFound("Comment not found")
        if comment.author_id != requester_id:
            raise Forbidden("Not authorized to modify this comment")
        return comment

    def update(self, requester_id: int, comment_id: int, content: str) -> Comment:
        comment = self._owned(requester_id, comment_id)
        if content != comment.content:
            comment.content = content
            comment.edited = True
            comment.edited_at = utcnow()
        self.db.commit()
        self.db.refresh(comment)
        return comment

    def delete(self, requester_id: int, comment_id: int) -> None:
        comment = self._owned(requester_id, comment_id)
        self.comments.delete_with_replies(comment)
        self.db.commit()

    def thread(self, post_id: int) -> list[CommentOut]:
        """Top-level comments newest first, each with its replies oldest first."""
        if self.posts.get_by_id(post_id) is None:
            raise NotFound("Post not found")

        comments = self.comments.for_post(post_id)
        likes = self.comments.like_counts([c.id for c in comments])
        authors = self.users.author_summaries(c.author_id for c in comments)

        replies: dict[int, list[CommentOut]] = {}
        roots: list[CommentOut] = []
        for comment in comments:
            out = self.to_out(comment, likes.get(comment.id, 0), authors.get(comment.author_id))
            if comment.parent_id is None:
                out.replies = replies.setdefault(comment.id, [])
                roots.append(out)
            else:
                replies.setdefault(comment.parent_id, []).append(out)
        roots.reverse()
        return roots

    @staticmethod
    def to_out(comment: Comment, like_count: int, author=None) -> CommentOut:
        return CommentOut(
            id=comment.id,
            content=comment.content,
            post=comment.post_id,
            parent_comment=comment.parent_id,
            author=author_out(author),
            like_count=like_count,
            edited=comment.edited,
            edited_at=comment.edited_at,
            created_at=comment.created_at,
        )

    def one_out(self, comment: Comment) -> CommentOut:
        authors = self.users.author_summaries([comment.author_id])
        return self.to_out(
            comment, self.comments.like_count(comment.id), authors.get(comment.author_id)
        )
