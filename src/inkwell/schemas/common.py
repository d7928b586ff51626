"""Shared Pydantic schemas and the response envelope."""
from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model exposing camelCase keys on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Pagination(CamelModel):
    """Page position for list endpoints (pages are 1-indexed)."""

    page: int = Field(..., ge=1)
    pages: int = Field(..., ge=0)

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> Pagination:
        return cls(page=page, pages=math.ceil(total / limit) if limit else 0)


def dump(value: Any) -> Any:
    """Serialize models (or lists of them) using their wire aliases."""
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, mode="json")
    if isinstance(value, list):
        return [dump(item) for item in value]
    return value


def envelope(
    data: Any = None,
    *,
    message: str | None = None,
    count: int | None = None,
    total: int | None = None,
    pagination: Pagination | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """Build the ``{success, data?, message?, count?, total?, pagination?}`` body."""
    body: dict[str, Any] = {"success": True}
    if count is not None:
        body["count"] = count
    if total is not None:
        body["total"] = total
    if pagination is not None:
        body["pagination"] = dump(pagination)
    for key, value in extra.items():
        body[key] = dump(value)
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = dump(data)
    return body


def error_body(message: str) -> dict[str, Any]:
    return {"success": False, "message": message}
