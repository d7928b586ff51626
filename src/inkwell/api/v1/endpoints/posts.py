"""Post-related endpoints for the Inkwell API."""

from typing import Any

from fastapi import APIRouter, Query, status

from inkwell.models import PostCategory, PostStatus
from inkwell.schemas.common import Pagination, envelope
from inkwell.schemas.interaction import LikeOut
from inkwell.schemas.post import PostCreate, PostUpdate
from inkwell.services.interactions import InteractionService, LikeTarget
from inkwell.services.post_service import PostService

from ..dependencies import CurrentUserDep, OptionalUserDep, PageDep, SessionDep

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("/")
async def list_posts(
    db: SessionDep,
    viewer: OptionalUserDep,
    paging: PageDep,
    category: PostCategory | None = Query(None),
    tags: str | None = Query(None, description="Comma separated; any match"),
    author: int | None = Query(None),
    search: str | None = Query(None),
    post_status: PostStatus | None = Query(None, alias="status"),
) -> dict[str, Any]:
    """List posts newest first.

    Anonymous callers only ever see published posts; ``status=draft`` lists
    the caller's own drafts.
    """
    page, limit = paging
    service = PostService(db)
    viewer_id = viewer.id if viewer else None
    result = service.list_posts(
        viewer_id=viewer_id,
        page=page,
        limit=limit,
        status=post_status,
        category=category,
        tags=[t.strip() for t in tags.split(",") if t.strip()] if tags else None,
        author_id=author,
        search=search,
    )
    data = service.to_out(result.posts, viewer_id=viewer_id)
    return envelope(
        data,
        count=len(data),
        total=result.total,
        pagination=Pagination.build(page, limit, result.total),
    )


@router.get("/user/{user_id}")
async def list_posts_by_user(
    user_id: int,
    db: SessionDep,
    viewer: OptionalUserDep,
    paging: PageDep,
) -> dict[str, Any]:
    """List a user's posts; drafts are included only for the user themselves."""
    page, limit = paging
    service = PostService(db)
    viewer_id = viewer.id if viewer else None
    result = service.by_author(user_id, viewer_id, page, limit)
    data = service.to_out(result.posts, viewer_id=viewer_id)
    return envelope(
        data,
        count=len(data),
        total=result.total,
        pagination=Pagination.build(page, limit, result.total),
    )


@router.get("/id/{post_id}")
@router.get("/{post_id:int}")
async def get_post(post_id: int, db: SessionDep, viewer: OptionalUserDep) -> dict[str, Any]:
    """Get a post by id and count the view."""
    service = PostService(db)
    viewer_id = viewer.id if viewer else None
    post = service.read(post_id, viewer_id)
    return envelope(service.to_out([post], viewer_id=viewer_id, include_content=True)[0])


@router.get("/{slug}")
async def get_post_by_slug(slug: str, db: SessionDep, viewer: OptionalUserDep) -> dict[str, Any]:
    """Get a post by its slug and count the view."""
    service = PostService(db)
    viewer_id = viewer.id if viewer else None
    post = service.read_by_slug(slug, viewer_id)
    return envelope(service.to_out([post], viewer_id=viewer_id, include_content=True)[0])


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_post(
    post_data: PostCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    """Create a post owned by the caller."""
    service = PostService(db)
    post = service.create(current_user.id, post_data)
    return envelope(service.to_out([post], include_content=True)[0])


@router.put("/{post_id}")
async def update_post(
    post_id: int,
    post_data: PostUpdate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    """Update a post; only its author may do so."""
    service = PostService(db)
    post = service.update(current_user.id, post_id, post_data)
    return envelope(service.to_out([post], include_content=True)[0])


@router.delete("/{post_id}")
async def delete_post(
    post_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    """Delete a post with its comments, likes and bookmark entries."""
    PostService(db).delete(current_user.id, post_id)
    return envelope(message="Post deleted")


@router.put("/{post_id}/like")
async def toggle_post_like(
    post_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    """Like the post, or unlike it if the caller already does."""
    result = InteractionService(db).toggle_like(current_user.id, post_id, LikeTarget.POST)
    body = envelope()
    body.update(LikeOut(liked=result.liked, like_count=result.like_count).model_dump(by_alias=True))
    return body
