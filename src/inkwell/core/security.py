"""Bearer token helpers used to resolve the authenticated principal."""
from __future__ import annotations

from datetime import timedelta

from jose import JWTError, jwt

from inkwell.core.settings import settings
from inkwell.db.time import utcnow


def create_access_token(user_id: int, expires_delta: timedelta | None = None) -> str:
    """Mint a signed token whose subject is ``user_id``.

    Credential issuance belongs to the auth service; this helper exists for
    local development and tests.
    """
    expire = utcnow() + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    payload = {"sub": str(user_id), "exp": expire}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_subject(token: str) -> int | None:
    """Return the user id carried by ``token`` or None when it is not valid."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    subject = payload.get("sub")
    if subject is None:
        return None
    try:
        return int(subject)
    except (TypeError, ValueError):
        return None
