"""Pagination helpers."""

import math


def paginate(page: int, limit: int, max_limit: int = 50) -> tuple[int, int, int]:
    """Clamp page/limit; return (page, limit, skip)."""
    page = max(1, page)
    limit = max(1, min(limit, max_limit))
    return page, limit, (page - 1) * limit


def page_info(page: int, limit: int, total: int) -> dict:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": math.ceil(total / limit) if limit else 0,
    }
