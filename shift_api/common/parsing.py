# shift_api/common/parsing.py
from __future__ import annotations

import re
from datetime import datetime, date, time

from flask import request

from shift_api.common.errors import ValidationError

HHMM_RE = re.compile(r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$")
_MISSING = object()


def json_body() -> dict:
    # non-JSON content types (form posts, text/plain) yield an empty body
    d = request.get_json(silent=True)
    if not isinstance(d, dict):
        return {}
    return d


def pick(d: dict, *names, default=_MISSING):
    """
    First present key among names (snake_case/camelCase aliases).
    Returns `default` (or the _MISSING sentinel) when none is present.
    """
    for n in names:
        if n in d:
            return d[n]
    return default


def has_any(d: dict, *names) -> bool:
    return any(n in d for n in names)


def as_int(val, field, minimum: int | None = None):
    if val in (None, "", "null"):
        return None
    if isinstance(val, bool) or (isinstance(val, float) and not val.is_integer()):
        raise ValidationError(f"{field} must be integer")
    try:
        out = int(val)
    except Exception:
        raise ValidationError(f"{field} must be integer")
    if minimum is not None and out < minimum:
        raise ValidationError(f"{field} must be at least {minimum}")
    return out


def as_int_list(val, field) -> list[int]:
    if not isinstance(val, list) or not val:
        raise ValidationError(f"{field} must be a non-empty array")
    out = [as_int(v, field) for v in val]
    if any(v is None for v in out):
        raise ValidationError(f"{field} must contain only integers")
    return out


def parse_hhmm(s, field) -> time:
    """HH:MM on a 24-hour clock; a single-digit hour is accepted (7:30)."""
    if s in (None, ""):
        raise ValidationError(f"{field} is required")
    if not HHMM_RE.match(str(s).strip()):
        raise ValidationError(f"{field} must be in HH:MM format")
    hh, mm = str(s).strip().split(":")
    return time(hour=int(hh), minute=int(mm))


def parse_date(s, field, required: bool = True) -> date | None:
    """Accepts 'YYYY-MM-DD' or a full ISO-8601 timestamp."""
    if s in (None, "", "null"):
        if required:
            raise ValidationError(f"{field} is required")
        return None
    if isinstance(s, date) and not isinstance(s, datetime):
        return s
    raw = str(s).strip()
    try:
        return datetime.strptime(raw, "%Y-%m-%d").date()
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
    except ValueError:
        raise ValidationError(f"{field} must be a valid date (YYYY-MM-DD)")


def clean_str(val, field, max_len: int | None = None, required: bool = False) -> str | None:
    v = (str(val).strip() if val is not None else "") or None
    if required and not v:
        raise ValidationError(f"{field} is required")
    if v and max_len and len(v) > max_len:
        raise ValidationError(f"{field} must be at most {max_len} characters")
    return v


def arg_int(*names: str):
    """Query-string int among aliases; None when absent, 422 when garbage."""
    for n in names:
        if n in request.args:
            return as_int(request.args.get(n), n)
    return None


def arg_date(name: str):
    return parse_date(request.args.get(name), name, required=False)
