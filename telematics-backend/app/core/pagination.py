"""Pagination helpers with hard caps."""

from __future__ import annotations

import math
import os
from typing import Any, Optional

from fastapi import Response


DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 20
DEFAULT_MAX_PAGE_SIZE = 200


def get_max_page_size() -> int:
    raw = os.getenv("API_MAX_PAGE_SIZE", str(DEFAULT_MAX_PAGE_SIZE))
    try:
        val = int(raw)
    except Exception:
        val = DEFAULT_MAX_PAGE_SIZE
    if val < 1:
        return DEFAULT_MAX_PAGE_SIZE
    return val


def clamp_page_size(page_size: int) -> int:
    max_size = get_max_page_size()
    if page_size < 1:
        return 1
    return min(page_size, max_size)


def _positive_int(value: Any, default: int) -> int:
    try:
        val = int(value)
    except (TypeError, ValueError):
        return default
    return val if val > 0 else default


def get_pagination(page: Any = None, per_page: Any = None) -> tuple[int, int, int, int]:
    """
    Normalize loosely typed page arguments.

    Returns ``(skip, take, page, per_page)``; missing, non-numeric or
    non-positive values fall back to page 1 / 20 per page.
    """
    page_val = _positive_int(page, DEFAULT_PAGE)
    per_page_val = _positive_int(per_page, DEFAULT_PER_PAGE)
    return (page_val - 1) * per_page_val, per_page_val, page_val, per_page_val


def pagination_meta(total: int, page: int, per_page: int) -> dict[str, int]:
    total_pages = math.ceil(total / per_page) if per_page else 0
    return {
        "total": total,
        "page": page,
        "per_page": per_page,
        "total_pages": total_pages,
    }


def set_pagination_headers(
    response: Optional[Response],
    *,
    total: Optional[int],
    page: int,
    page_size: int,
) -> None:
    if not response:
        return
    if total is not None:
        response.headers["X-Total-Count"] = str(total)
    response.headers["X-Page"] = str(page)
    response.headers["X-Page-Size"] = str(page_size)
