from __future__ import annotations

from flask import Blueprint, request
from flask_jwt_extended import jwt_required

from shift_api.common.auth import current_auth
from shift_api.common.errors import NotFound, ValidationError
from shift_api.common.http import ok
from shift_api.common.paging import page_limit, paginate
from shift_api.common.parsing import json_body, pick, as_int, as_int_list, arg_int
from shift_api.extensions import db
from shift_api.models.employee import Employee
from shift_api.models.shift import Shift
from shift_api.models.shift_assignment import ShiftAssignment, STATUS_ASSIGNED
from shift_api.services.assignment_manager import AssignmentManager, validate_status

bp = Blueprint("shift_assignments", __name__, url_prefix="/api/shift-assignments")


def _row(a: ShiftAssignment):
    s, e = a.shift, a.employee
    return {
        "id": a.id,
        "shift_id": a.shift_id,
        "employee_id": a.employee_id,
        "status": a.status,
        "assigned_at": a.assigned_at.isoformat() if a.assigned_at else None,
        "updated_at": a.updated_at.isoformat() if a.updated_at else None,
        "shift": {
            "id": s.id,
            "name": s.name,
            "date": s.date.isoformat() if s.date else None,
            "start_time": s.start_time.strftime("%H:%M") if s.start_time else None,
            "end_time": s.end_time.strftime("%H:%M") if s.end_time else None,
            "location": s.location,
        } if s else None,
        "employee": {
            "id": e.id,
            "employee_code": e.employee_code,
            "name": e.name,
            "email": e.email,
            "department": e.department,
        } if e else None,
    }


def _required_int(d: dict, field: str, *names):
    v = as_int(pick(d, *names, default=None), field, minimum=1)
    if v is None:
        raise ValidationError(f"{field} is required")
    return v


def _listing(q):
    q = q.order_by(ShiftAssignment.assigned_at.desc(), ShiftAssignment.id.desc())
    page, size = page_limit()
    items, meta = paginate(q, page, size)
    return ok([_row(a) for a in items], **meta)


# ---------- reads ----------

@bp.get("")
@jwt_required()
def list_assignments():
    """
    GET /api/shift-assignments?shiftId=&employeeId=&status=&page=1&limit=10
    Newest first.
    """
    q = ShiftAssignment.query
    shift_id = arg_int("shiftId", "shift_id")
    if shift_id is not None:
        q = q.filter(ShiftAssignment.shift_id == shift_id)
    employee_id = arg_int("employeeId", "employee_id")
    if employee_id is not None:
        q = q.filter(ShiftAssignment.employee_id == employee_id)
    status = (request.args.get("status") or "").strip()
    if status:
        q = q.filter(ShiftAssignment.status == validate_status(status))
    return _listing(q)


@bp.get("/shift/<int:sid>")
@jwt_required()
def list_for_shift(sid: int):
    if not db.session.get(Shift, sid):
        raise NotFound("Shift not found", code="SHIFT_NOT_FOUND")
    return _listing(ShiftAssignment.query.filter(ShiftAssignment.shift_id == sid))


@bp.get("/employee/<int:eid>")
@jwt_required()
def list_for_employee(eid: int):
    if not db.session.get(Employee, eid):
        raise NotFound("Employee not found", code="EMPLOYEE_NOT_FOUND")
    return _listing(ShiftAssignment.query.filter(ShiftAssignment.employee_id == eid))


# ---------- writes ----------

@bp.post("")
@jwt_required()
def create_assignment():
    d = json_body()
    shift_id = _required_int(d, "shift_id", "shift_id", "shiftId")
    employee_id = _required_int(d, "employee_id", "employee_id", "employeeId")
    status = d.get("status") or STATUS_ASSIGNED

    a = AssignmentManager().create_assignment(shift_id, employee_id, status, actor=current_auth())
    return ok(_row(a), status=201)


@bp.post("/bulk")
@jwt_required()
def create_bulk():
    """
    POST /api/shift-assignments/bulk {"shiftId": 1, "employeeIds": [3, 4, 5]}
    All or nothing: any failing check rejects the whole batch.
    """
    d = json_body()
    shift_id = _required_int(d, "shift_id", "shift_id", "shiftId")
    employee_ids = as_int_list(pick(d, "employee_ids", "employeeIds", default=None), "employee_ids")

    rows = AssignmentManager().create_assignments_bulk(shift_id, employee_ids, actor=current_auth())
    return ok([_row(a) for a in rows], status=201, count=len(rows))


@bp.put("/<int:aid>")
@jwt_required()
def update_assignment(aid: int):
    d = json_body()
    if "status" not in d:
        raise ValidationError("status is required")
    a = AssignmentManager().update_assignment_status(aid, d["status"], actor=current_auth())
    return ok(_row(a))


@bp.delete("/<int:aid>")
@jwt_required()
def delete_assignment(aid: int):
    AssignmentManager().delete_assignment(aid, actor=current_auth())
    return ok({"id": aid, "deleted": True})
