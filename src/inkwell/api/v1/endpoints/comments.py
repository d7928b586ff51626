"""Comment endpoints."""

from typing import Any

from fastapi import APIRouter, status

from inkwell.schemas.comment import CommentCreate, CommentUpdate
from inkwell.schemas.common import Pagination, envelope
from inkwell.schemas.interaction import LikeOut
from inkwell.services.comment_service import CommentService
from inkwell.services.interactions import InteractionService, LikeTarget

from ..dependencies import CurrentUserDep, OptionalUserDep, PageDep, SessionDep

router = APIRouter(prefix="/comments", tags=["comments"])


@router.get("/post/{post_id}")
async def get_post_comments(post_id: int, db: SessionDep) -> dict[str, Any]:
    """Return the comment thread for a post."""
    roots = CommentService(db).thread(post_id)
    return envelope(roots, count=len(roots))


@router.get("/user/{user_id}")
async def get_user_comments(
    user_id: int,
    db: SessionDep,
    viewer: OptionalUserDep,
    paging: PageDep,
) -> dict[str, Any]:
    """Return a user's comments newest first, each with its post's title and slug."""
    page, limit = paging
    data, total = CommentService(db).by_author(user_id, viewer.id if viewer else None, page, limit)
    return envelope(
        data,
        count=len(data),
        total=total,
        pagination=Pagination.build(page, limit, total),
    )


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_comment(
    comment_data: CommentCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    service = CommentService(db)
    comment = service.create(current_user.id, comment_data)
    return envelope(service.one_out(comment))


@router.put("/{comment_id}")
async def update_comment(
    comment_id: int,
    comment_data: CommentUpdate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    service = CommentService(db)
    comment = service.update(current_user.id, comment_id, comment_data.content)
    return envelope(service.one_out(comment))


@router.delete("/{comment_id}")
async def delete_comment(
    comment_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    CommentService(db).delete(current_user.id, comment_id)
    return envelope(message="Comment deleted")


@router.put("/{comment_id}/like")
async def toggle_comment_like(
    comment_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    """Like the comment, or unlike it if the caller already does."""
    result = InteractionService(db).toggle_like(current_user.id, comment_id, LikeTarget.COMMENT)
    body = envelope()
    body.update(LikeOut(liked=result.liked, like_count=result.like_count).model_dump(by_alias=True))
    return body
