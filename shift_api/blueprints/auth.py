from flask import Blueprint, current_app
from flask_jwt_extended import (
    create_access_token, create_refresh_token,
    jwt_required, get_jwt_identity,
    set_access_cookies, set_refresh_cookies, unset_jwt_cookies,
)

from shift_api.common.auth import claims_for, current_auth
from shift_api.common.errors import ValidationError
from shift_api.common.http import ok, fail
from shift_api.common.parsing import json_body, clean_str
from shift_api.extensions import db
from shift_api.models.user import User
from shift_api.services.credentials import get_verifier

bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _user_payload(u: User):
    return {"id": u.id, "username": u.username, "role": u.role}


@bp.post("/login")
def login():
    d = json_body()
    username = clean_str(d.get("username"), "username", required=True)
    password = d.get("password") or ""
    if not isinstance(password, str):
        raise ValidationError("password must be a string")
    if not password:
        raise ValidationError("password is required")

    if not get_verifier().verify(username, password):
        return fail("Invalid credentials", 401)
    u = User.query.filter_by(username=username).first()
    if not u:
        return fail("Invalid credentials", 401)

    access = create_access_token(identity=str(u.id), additional_claims=claims_for(u))
    refresh = create_refresh_token(identity=str(u.id), additional_claims=claims_for(u))
    current_app.logger.info("login ok user=%s", u.username)

    resp, status = ok({"access": access, "refresh": refresh, "user": _user_payload(u)})
    set_access_cookies(resp, access)
    set_refresh_cookies(resp, refresh)
    return resp, status


@bp.post("/refresh")
@jwt_required(refresh=True)
def refresh():
    uid = get_jwt_identity()
    u = db.session.get(User, int(uid)) if uid else None
    if not u:
        return fail("User not found", 401)
    new_access = create_access_token(identity=str(u.id), additional_claims=claims_for(u))
    resp, status = ok({"access": new_access})
    set_access_cookies(resp, new_access)
    return resp, status


@bp.post("/logout")
def logout():
    resp, status = ok({"logged_out": True})
    unset_jwt_cookies(resp)
    return resp, status


@bp.get("/me")
@jwt_required()
def me():
    ctx = current_auth()
    u = db.session.get(User, ctx.user_id) if ctx else None
    if not u:
        return fail("Not authenticated", 401)
    return ok(_user_payload(u))
