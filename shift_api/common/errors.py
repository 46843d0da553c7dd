# shift_api/common/errors.py
from flask import current_app
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

from shift_api.common.http import fail
from shift_api.extensions import db


class APIError(Exception):
    """Custom API Error class."""
    status_code = 400
    default_code = "API_ERROR"

    def __init__(self, message, code=None, status_code=None, payload=None):
        super().__init__(message)
        self.code = code or self.default_code
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.payload = payload


class ValidationError(APIError):
    """Malformed input, rejected before the store is touched."""
    status_code = 422
    default_code = "VALIDATION_ERROR"


class NotFound(APIError):
    status_code = 404
    default_code = "NOT_FOUND"


class Conflict(APIError):
    """Duplicate pair, or a delete blocked by referencing rows."""
    status_code = 409
    default_code = "CONFLICT"


class CapacityExceeded(APIError):
    status_code = 409
    default_code = "SHIFT_CAPACITY_EXCEEDED"


class StorageError(APIError):
    """Unexpected persistence failure. Never carries detail to the client."""
    status_code = 500
    default_code = "STORAGE_ERROR"


def register_error_handlers(app):
    @app.errorhandler(APIError)
    def _api_error(e: APIError):
        if isinstance(e, StorageError):
            current_app.logger.error("storage failure: %s", e.message, exc_info=e.__cause__ or e)
            return fail("Internal server error", status=e.status_code, code=e.code)
        return fail(e.message, status=e.status_code, code=e.code, detail=e.payload)

    @app.errorhandler(HTTPException)
    def _http(e: HTTPException):
        return fail(e.description or e.name, status=e.code or 500)

    @app.errorhandler(IntegrityError)
    def _integrity(e: IntegrityError):
        db.session.rollback()
        return fail("Duplicate or FK constraint failed", status=409, code="CONSTRAINT_ERROR")

    @app.errorhandler(Exception)
    def _500(e: Exception):
        app.logger.exception(e)
        return fail("Internal server error", status=500)
