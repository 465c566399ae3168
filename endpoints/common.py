from __future__ import annotations

import math
from typing import Any, Callable, Iterable, Sequence

from fastapi import HTTPException, Request

from persistence.repositories import Collections
from settings import Settings


def get_collections(request: Request) -> Collections:
    return request.app.state.collections


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def resolve_limit(limit: int | None, settings: Settings) -> int:
    return settings.default_page_limit if limit is None else limit


def paginate(
    items: Sequence[dict[str, Any]],
    *,
    page: int,
    limit: int,
    view: Callable[[dict[str, Any]], dict[str, Any]] | None = None,
) -> dict[str, Any]:
    total_records = len(items)
    start = (page - 1) * limit
    window: Iterable[dict[str, Any]] = items[start : start + limit]
    return {
        "pagination": {
            "total_records": total_records,
            "total_pages": math.ceil(total_records / limit),
            "page": page,
            "limit": limit,
        },
        "data": [view(i) for i in window] if view else list(window),
    }


def require_text(value: Any) -> str | None:
    """Stripped non-empty string, or None."""
    if not isinstance(value, str):
        return None
    s = value.strip()
    return s or None


def bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=400, detail=detail)


def not_found(detail: str) -> HTTPException:
    return HTTPException(status_code=404, detail=detail)


def forbidden(detail: str = "Permission denied") -> HTTPException:
    return HTTPException(status_code=403, detail=detail)


def conflict(detail: str) -> HTTPException:
    return HTTPException(status_code=409, detail=detail)
