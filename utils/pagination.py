import math

from utils.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE


def _int_value(raw, default):
    try:
        return int(raw or default)
    except (ValueError, TypeError):
        return default


def page_window(page, limit, total):
    """
    Clamp page/limit and return (page, limit, skip, total_pages).
    Out-of-range pages snap to the nearest existing page.
    """
    page = _int_value(page, 1)
    limit = _int_value(limit, DEFAULT_PAGE_SIZE)
    limit = max(1, min(limit, MAX_PAGE_SIZE))

    total_pages = max(1, math.ceil(total / limit))
    if page < 1:
        page = 1
    if page > total_pages:
        page = total_pages

    skip = (page - 1) * limit
    return page, limit, skip, total_pages
