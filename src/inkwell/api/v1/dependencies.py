"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated

from fastapi import Depends, HTTPException, Query, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from inkwell.core.security import decode_subject
from inkwell.core.settings import settings
from inkwell.db.session import get_db
from inkwell.models import User

# Missing credentials are reported as 401 by get_current_user, not by the scheme.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]
CredentialsDep = Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]


def _resolve(credentials: HTTPAuthorizationCredentials | None, db: Session) -> User | None:
    if credentials is None:
        return None
    user_id = decode_subject(credentials.credentials)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )
    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return user


def get_current_user(credentials: CredentialsDep, db: SessionDep) -> User:
    """Get the authenticated principal from the bearer token.

    Raises:
        HTTPException: 401 if the token is missing, invalid, or names an unknown user
    """
    user = _resolve(credentials, db)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized to access this route",
        )
    return user


def get_optional_user(credentials: CredentialsDep, db: SessionDep) -> User | None:
    """Like get_current_user, but anonymous callers get None."""
    return _resolve(credentials, db)


def page_params(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
) -> tuple[int, int]:
    """Clamp ``limit`` to the configured maximum page size."""
    return page, min(limit, settings.max_page_size)


# Type alias for current user dependency
CurrentUserDep = Annotated[User, Depends(get_current_user)]
OptionalUserDep = Annotated[User | None, Depends(get_optional_user)]
PageDep = Annotated[tuple[int, int], Depends(page_params)]
