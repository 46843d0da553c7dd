from flask import Blueprint, current_app

from shift_api.common.auth import requires_roles, current_auth
from shift_api.common.errors import ValidationError, Conflict, NotFound
from shift_api.common.http import ok
from shift_api.common.parsing import json_body, clean_str
from shift_api.extensions import db
from shift_api.models.user import User, ROLES

bp = Blueprint("users", __name__, url_prefix="/api/users")


def _row(u: User):
    return {
        "id": u.id,
        "username": u.username,
        "role": u.role,
        "created_at": u.created_at.isoformat() if u.created_at else None,
    }


@bp.get("")
@requires_roles("admin")
def list_users():
    rows = User.query.order_by(User.id.asc()).all()
    return ok([_row(u) for u in rows], total=len(rows))


@bp.post("")
@requires_roles("admin")
def create_user():
    d = json_body()
    username = clean_str(d.get("username"), "username", max_len=50, required=True)
    if len(username) < 3:
        raise ValidationError("username must be at least 3 characters")
    password = d.get("password") or ""
    if not isinstance(password, str) or len(password) < 6:
        raise ValidationError("password must be a string of at least 6 characters")
    role = d.get("role") or "user"
    role = role.strip().lower() if isinstance(role, str) else None
    if role not in ROLES:
        raise ValidationError(f"role must be one of {', '.join(ROLES)}")

    if User.query.filter_by(username=username).first():
        raise Conflict("Username already exists", code="USERNAME_TAKEN")

    u = User(username=username, role=role)
    u.set_password(password)
    db.session.add(u)
    db.session.commit()
    current_app.logger.info("user %s created by=%s", username, current_auth().username)
    return ok(_row(u), status=201)


@bp.delete("/<int:uid>")
@requires_roles("admin")
def delete_user(uid: int):
    ctx = current_auth()
    u = db.session.get(User, uid)
    if not u:
        raise NotFound("User not found")
    if ctx.user_id == uid:
        raise Conflict("You cannot delete your own account", code="SELF_DELETE")
    db.session.delete(u)
    db.session.commit()
    current_app.logger.info("user %s deleted by=%s", u.username, ctx.username)
    return ok({"id": uid, "deleted": True})
