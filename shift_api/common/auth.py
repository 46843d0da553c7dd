# shift_api/common/auth.py
from __future__ import annotations

from dataclasses import dataclass
from functools import wraps

from flask_jwt_extended import jwt_required, get_jwt, get_jwt_identity

from shift_api.common.http import fail


@dataclass(frozen=True)
class AuthContext:
    """Validated caller identity, handed explicitly to services."""
    user_id: int
    username: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def claims_for(user) -> dict:
    return {"username": user.username, "role": user.role}


def current_auth() -> AuthContext | None:
    """Build the AuthContext from the JWT verified for this request."""
    uid = get_jwt_identity()
    if uid is None:
        return None
    claims = get_jwt() or {}
    return AuthContext(
        user_id=int(uid),
        username=claims.get("username") or str(uid),
        role=claims.get("role") or "user",
    )


def requires_roles(*codes: str):
    """
    Require that the current user has AT LEAST ONE of the given roles.
    'admin' always passes.
    """
    def outer(fn):
        @wraps(fn)
        @jwt_required()
        def inner(*args, **kwargs):
            ctx = current_auth()
            if ctx is None:
                return fail("Unauthorized", status=401)
            if ctx.is_admin or ctx.role in codes:
                return fn(*args, **kwargs)
            return fail("Admin access required", status=403, code="FORBIDDEN")
        return inner
    return outer
