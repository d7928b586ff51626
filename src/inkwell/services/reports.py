"""Content reports.

Reports are validated and logged; nothing is persisted.
"""
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from inkwell.core.errors import InvalidOperation, NotFound
from inkwell.db.time import utcnow
from inkwell.repositories.comment_repo import CommentRepository
from inkwell.repositories.post_repo import PostRepository

logger = logging.getLogger(__name__)

REPORTABLE_TYPES = ("post", "comment")


def submit_report(
    db: Session,
    *,
    reporter_id: int,
    content_type: str,
    content_id: int,
    reason: str | None,
    description: str | None = None,
) -> None:
    """Validate a report and record it in the log."""
    if content_type not in REPORTABLE_TYPES:
        raise InvalidOperation("Invalid content type")
    if not reason or not reason.strip():
        raise InvalidOperation("Reason is required")

    repo = PostRepository(db) if content_type == "post" else CommentRepository(db)
    if repo.get_by_id(content_id) is None:
        raise NotFound(f"{content_type} not found")

    logger.warning(
        "Content reported: type=%s id=%s reporter=%s reason=%r description=%r at=%s",
        content_type,
        content_id,
        reporter_id,
        reason,
        description,
        utcnow().isoformat(),
    )
