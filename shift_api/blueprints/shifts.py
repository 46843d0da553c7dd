from __future__ import annotations

from flask import Blueprint, current_app
from flask_jwt_extended import jwt_required

from shift_api.common.auth import current_auth
from shift_api.common.errors import NotFound
from shift_api.common.http import ok
from shift_api.common.paging import page_limit, paginate
from shift_api.common.parsing import (
    json_body, pick, has_any, as_int, clean_str, parse_date, parse_hhmm, arg_date,
)
from shift_api.extensions import db
from shift_api.models.shift import Shift
from shift_api.models.shift_assignment import ShiftAssignment
from shift_api.services.assignment_manager import AssignmentManager

bp = Blueprint("shifts", __name__, url_prefix="/api/shifts")

_NAME_KEYS = ("name", "shiftName")
_START_KEYS = ("start_time", "startTime")
_END_KEYS = ("end_time", "endTime")
_MAX_KEYS = ("max_employees", "maxEmployees")


def _shift_row(s: Shift, assigned_count: int | None = None):
    out = {
        "id": s.id,
        "name": s.name,
        "date": s.date.isoformat() if s.date else None,
        "start_time": s.start_time.strftime("%H:%M") if s.start_time else None,
        "end_time": s.end_time.strftime("%H:%M") if s.end_time else None,
        "location": s.location,
        "description": s.description,
        "max_employees": s.max_employees,
        "created_at": s.created_at.isoformat() if s.created_at else None,
        "updated_at": s.updated_at.isoformat() if s.updated_at else None,
    }
    if assigned_count is not None:
        out["assigned_count"] = assigned_count
        out["is_full"] = s.max_employees is not None and assigned_count >= s.max_employees
    return out


def _max_employees(v):
    return as_int(v, "max_employees", minimum=1)


# ---------- routes ----------

@bp.get("")
@jwt_required()
def list_shifts():
    """
    GET /api/shifts?date=YYYY-MM-DD&date_gte=&date_lte=&page=1&limit=10
    Ordered by date then start time. Each row carries its live assigned_count.
    """
    q = Shift.query
    day = arg_date("date")
    if day:
        q = q.filter(Shift.date == day)
    gte = arg_date("date_gte")
    if gte:
        q = q.filter(Shift.date >= gte)
    lte = arg_date("date_lte")
    if lte:
        q = q.filter(Shift.date <= lte)
    q = q.order_by(Shift.date.asc(), Shift.start_time.asc(), Shift.id.asc())

    page, size = page_limit()
    items, meta = paginate(q, page, size)
    counts = AssignmentManager().assigned_counts([s.id for s in items])
    return ok([_shift_row(s, counts.get(s.id, 0)) for s in items], **meta)


@bp.get("/<int:sid>")
@jwt_required()
def get_shift(sid: int):
    s = db.session.get(Shift, sid)
    if not s:
        raise NotFound("Shift not found", code="SHIFT_NOT_FOUND")

    rows = s.assignments.order_by(ShiftAssignment.assigned_at.asc(), ShiftAssignment.id.asc()).all()
    assigned = []
    for a in rows:
        e = a.employee
        assigned.append({
            "assignment_id": a.id,
            "status": a.status,
            "assigned_at": a.assigned_at.isoformat() if a.assigned_at else None,
            "employee": {
                "id": e.id,
                "employee_code": e.employee_code,
                "name": e.name,
                "email": e.email,
                "department": e.department,
                "position": e.position,
            } if e else None,
        })

    out = _shift_row(s, AssignmentManager().assigned_count(s.id))
    out["assigned_employees"] = assigned
    return ok(out)


@bp.post("")
@jwt_required()
def create_shift():
    d = json_body()
    s = Shift(
        name=clean_str(pick(d, *_NAME_KEYS, default=None), "name", max_len=100, required=True),
        date=parse_date(d.get("date"), "date"),
        start_time=parse_hhmm(pick(d, *_START_KEYS, default=None), "start_time"),
        end_time=parse_hhmm(pick(d, *_END_KEYS, default=None), "end_time"),
        location=clean_str(d.get("location"), "location", max_len=200),
        description=clean_str(d.get("description"), "description", max_len=500),
        max_employees=_max_employees(pick(d, *_MAX_KEYS, default=None)),
    )
    db.session.add(s)
    db.session.commit()
    current_app.logger.info("shift %s created by=%s", s.id, current_auth().username)
    return ok(_shift_row(s, 0), status=201)


@bp.put("/<int:sid>")
@jwt_required()
def update_shift(sid: int):
    s = db.session.get(Shift, sid)
    if not s:
        raise NotFound("Shift not found", code="SHIFT_NOT_FOUND")
    d = json_body()

    if has_any(d, *_NAME_KEYS):
        s.name = clean_str(pick(d, *_NAME_KEYS), "name", max_len=100, required=True)
    if "date" in d:
        s.date = parse_date(d["date"], "date")
    if has_any(d, *_START_KEYS):
        s.start_time = parse_hhmm(pick(d, *_START_KEYS), "start_time")
    if has_any(d, *_END_KEYS):
        s.end_time = parse_hhmm(pick(d, *_END_KEYS), "end_time")
    if "location" in d:
        s.location = clean_str(d["location"], "location", max_len=200)
    if "description" in d:
        s.description = clean_str(d["description"], "description", max_len=500)
    if has_any(d, *_MAX_KEYS):
        # lowering below the current count is allowed; capacity is checked on admission only
        s.max_employees = _max_employees(pick(d, *_MAX_KEYS))

    db.session.commit()
    return ok(_shift_row(s, AssignmentManager().assigned_count(s.id)))


@bp.delete("/<int:sid>")
@jwt_required()
def delete_shift(sid: int):
    AssignmentManager().delete_shift(sid, actor=current_auth())
    return ok({"id": sid, "deleted": True})
