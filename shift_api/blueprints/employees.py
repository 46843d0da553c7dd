from __future__ import annotations

from flask import Blueprint, current_app
from flask_jwt_extended import jwt_required

from shift_api.common.auth import current_auth
from shift_api.common.errors import Conflict, NotFound, ValidationError
from shift_api.common.http import ok
from shift_api.common.paging import page_limit, paginate, sort_params, text_q, apply_q_search
from shift_api.common.parsing import json_body, pick, has_any, clean_str, parse_date
from shift_api.extensions import db
from shift_api.models.employee import Employee
from shift_api.services.assignment_manager import AssignmentManager

bp = Blueprint("employees", __name__, url_prefix="/api/employees")

_CODE_KEYS = ("employee_code", "employeeCode", "employeeId", "code")
_HIRE_KEYS = ("hire_date", "hireDate")
_OPTIONAL = {
    "email": 255,
    "phone": 20,
    "department": 80,
    "position": 80,
}


def _row(x: Employee):
    return {
        "id": x.id,
        "employee_code": x.employee_code,
        "name": x.name,
        "email": x.email,
        "phone": x.phone,
        "department": x.department,
        "position": x.position,
        "hire_date": x.hire_date.isoformat() if x.hire_date else None,
        "created_at": x.created_at.isoformat() if x.created_at else None,
        "updated_at": x.updated_at.isoformat() if x.updated_at else None,
    }


def _check_email(v: str | None):
    if v and ("@" not in v or v.startswith("@") or v.endswith("@")):
        raise ValidationError("Invalid email format")
    return v.lower() if v else v


def _code_taken(code: str, exclude_id: int | None = None) -> bool:
    q = Employee.query.filter(Employee.employee_code == code)
    if exclude_id:
        q = q.filter(Employee.id != exclude_id)
    return q.first() is not None


# ---------- routes ----------

@bp.get("")
@jwt_required()
def list_employees():
    """
    GET /api/employees?q=|search=&page=1&limit=10&sort=name,-created_at
    Search matches name, employee code, email and department.
    """
    q = apply_q_search(
        Employee.query,
        text_q("q", "search"),
        Employee.name, Employee.employee_code, Employee.email, Employee.department,
    )
    allowed = {
        "name": Employee.name,
        "employee_code": Employee.employee_code,
        "department": Employee.department,
        "created_at": Employee.created_at,
    }
    order = sort_params(allowed)
    if order:
        q = q.order_by(*[c.asc() if asc else c.desc() for c, asc in order])
    else:
        q = q.order_by(Employee.created_at.desc(), Employee.id.desc())

    page, size = page_limit()
    items, meta = paginate(q, page, size)
    return ok([_row(i) for i in items], **meta)


@bp.get("/<int:eid>")
@jwt_required()
def get_employee(eid: int):
    x = db.session.get(Employee, eid)
    if not x:
        raise NotFound("Employee not found")
    return ok(_row(x))


@bp.post("")
@jwt_required()
def create_employee():
    d = json_body()
    code = clean_str(pick(d, *_CODE_KEYS, default=None), "employee_code", max_len=32, required=True)
    name = clean_str(d.get("name"), "name", max_len=120, required=True)
    fields = {k: clean_str(d.get(k), k, max_len=n) for k, n in _OPTIONAL.items()}
    fields["email"] = _check_email(fields["email"])
    hire_date = parse_date(pick(d, *_HIRE_KEYS, default=None), "hire_date", required=False)

    if _code_taken(code):
        raise Conflict("Employee ID already exists", code="EMPLOYEE_CODE_TAKEN")

    x = Employee(employee_code=code, name=name, hire_date=hire_date, **fields)
    db.session.add(x)
    db.session.commit()
    current_app.logger.info("employee %s created by=%s", code, current_auth().username)
    return ok(_row(x), status=201)


@bp.put("/<int:eid>")
@jwt_required()
def update_employee(eid: int):
    x = db.session.get(Employee, eid)
    if not x:
        raise NotFound("Employee not found")
    d = json_body()

    if has_any(d, *_CODE_KEYS):
        code = clean_str(pick(d, *_CODE_KEYS), "employee_code", max_len=32, required=True)
        if _code_taken(code, exclude_id=eid):
            raise Conflict("Employee ID already exists", code="EMPLOYEE_CODE_TAKEN")
        x.employee_code = code
    if "name" in d:
        x.name = clean_str(d["name"], "name", max_len=120, required=True)
    for key, n in _OPTIONAL.items():
        if key in d:
            v = clean_str(d[key], key, max_len=n)
            setattr(x, key, _check_email(v) if key == "email" else v)
    if has_any(d, *_HIRE_KEYS):
        x.hire_date = parse_date(pick(d, *_HIRE_KEYS), "hire_date", required=False)

    db.session.commit()
    return ok(_row(x))


@bp.delete("/<int:eid>")
@jwt_required()
def delete_employee(eid: int):
    AssignmentManager().delete_employee(eid, actor=current_auth())
    return ok({"id": eid, "deleted": True})
