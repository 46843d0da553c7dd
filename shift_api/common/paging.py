# shift_api/common/paging.py
import math

from flask import request
from sqlalchemy import or_

DEFAULT_PAGE = 1
DEFAULT_SIZE = 10
MAX_SIZE = 100


def page_limit(default_size=DEFAULT_SIZE):
    """
    page (default 1), limit or size (alias), clamped to [1, MAX_SIZE].
    Garbage values fall back to defaults instead of failing the request.
    """
    try:
        page = max(int(request.args.get("page", DEFAULT_PAGE)), 1)
    except Exception:
        page = DEFAULT_PAGE
    raw = request.args.get("limit", request.args.get("size", default_size))
    try:
        size = max(1, min(int(raw), MAX_SIZE))
    except Exception:
        size = default_size
    return page, size


def page_meta(page: int, size: int, total: int) -> dict:
    pages = math.ceil(total / size) if size else 0
    return {
        "page": page,
        "size": size,
        "total": total,
        "pages": pages,
        "has_next": page < pages,
        "has_prev": page > 1,
    }


def paginate(query, page: int, size: int):
    """Return (items, meta) for an already filtered and ordered query."""
    total = query.order_by(None).count()
    items = query.offset((page - 1) * size).limit(size).all()
    return items, page_meta(page, size, total)


def sort_params(allowed: dict[str, object]):
    """
    allowed: {"name": Model.name, "created_at": Model.created_at, ...}
    ?sort=name,-created_at  => returns list of (column, asc:bool)
    Unknown keys ignored.
    """
    raw = request.args.get("sort", "")
    items = []
    for part in [p.strip() for p in raw.split(",") if p.strip()]:
        asc = True
        key = part
        if part.startswith("-"):
            asc = False
            key = part[1:]
        col = allowed.get(key)
        if col is not None:
            items.append((col, asc))
    return items


def text_q(*names: str):
    for n in names or ("q",):
        v = (request.args.get(n) or "").strip()
        if v:
            return v
    return None


def apply_q_search(query, q: str | None, *cols):
    if not q:
        return query
    like = f"%{q}%"
    return query.filter(or_(*[c.ilike(like) for c in cols]))
