# app/utils/pagination.py
"""
Pagination and search helpers shared by the listing endpoints.
Page is 1-based; limit is clamped to [1, MAX_LIMIT].
"""

import re
from typing import Optional

MAX_LIMIT = 50
DEFAULT_LIMIT = 10

_UNSAFE_SEARCH_CHARS = re.compile(r"[^a-zA-Z0-9\s-]")


def clamp_page(page: Optional[int]) -> int:
    try:
        return max(1, int(page or 1))
    except (TypeError, ValueError):
        return 1


def clamp_limit(limit: Optional[int]) -> int:
    try:
        value = int(limit or DEFAULT_LIMIT)
    except (TypeError, ValueError):
        value = DEFAULT_LIMIT
    return max(1, min(MAX_LIMIT, value))


def sanitize_search(search: Optional[str]) -> str:
    """Keep only letters, digits, whitespace and dashes."""
    if not search:
        return ""
    return _UNSAFE_SEARCH_CHARS.sub("", str(search)).strip()


def like_pattern(search: str) -> str:
    return f"%{search}%"


def paginate(query, page: Optional[int], limit: Optional[int]) -> dict:
    """Run a count and a page fetch on the same query. Returns items + paging info."""
    page, limit = clamp_page(page), clamp_limit(limit)
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    total_pages = (total + limit - 1) // limit
    return {
        "items": items,
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": total_pages,
        "has_next_page": page < total_pages,
        "has_prev_page": page > 1,
    }
