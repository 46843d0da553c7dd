from datetime import datetime

from flask import Blueprint, current_app
from sqlalchemy import text

from shift_api.common.http import ok, fail
from shift_api.extensions import db

bp = Blueprint("health", __name__, url_prefix="/api")


@bp.get("/health")
def health():
    try:
        db.session.execute(text("SELECT 1"))
    except Exception:
        current_app.logger.exception("health check: database unreachable")
        return fail("Database connection failed", status=503)
    return ok({
        "status": "ok",
        "message": "Shift Management API is running",
        "timestamp": datetime.utcnow().isoformat(),
    })
