from __future__ import annotations

MAX_LIMIT = 100
DEFAULT_LIMIT = 20


def clamp_page(page: int | None) -> int:
    if page is None or page < 1:
        return 1
    return page


def clamp_limit(limit: int | None, default: int = DEFAULT_LIMIT) -> int:
    """Missing or non-positive limits fall back to ``default``; large ones cap at 100."""
    if limit is None or limit < 1:
        return default
    return min(limit, MAX_LIMIT)


def paginate(items: list, page: int, limit: int) -> list:
    offset = min((page - 1) * limit, len(items))
    end = min(offset + limit, len(items))
    return items[offset:end]
