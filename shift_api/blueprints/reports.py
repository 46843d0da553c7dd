from io import BytesIO

from flask import Blueprint, request, current_app, send_file
from flask_jwt_extended import jwt_required

from shift_api.common.auth import current_auth
from shift_api.common.errors import NotFound
from shift_api.common.parsing import as_int
from shift_api.services.report_service import ReportService

bp = Blueprint("reports", __name__, url_prefix="/api/reports")

KINDS = ("assignments", "shifts", "employees")


@bp.get("/<kind>")
@jwt_required()
def download(kind: str):
    """
    GET /api/reports/<assignments|shifts|employees>?days=30&format=csv|xlsx
    """
    if kind not in KINDS:
        raise NotFound(f"Unknown report {kind!r}")
    days = as_int(request.args.get("days"), "days")
    if days is None:
        days = current_app.config.get("REPORT_WINDOW_DAYS", 30)
    fmt = request.args.get("format", "csv")

    content, file_name, mime = ReportService(window_days=days).build(kind, fmt)
    current_app.logger.info("report %s downloaded by=%s", file_name, current_auth().username)
    return send_file(BytesIO(content), mimetype=mime, as_attachment=True, download_name=file_name)
